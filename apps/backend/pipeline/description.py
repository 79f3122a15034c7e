"""
Job description cleanup.

JSON-LD descriptions arrive as HTML-entity-encoded markup.
"""
import html
import logging
import re

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

_BLANK_LINES = re.compile(r"\n\s*\n+")


def clean_description(raw) -> str:
    """
    Decode entities once, then strip markup to plain text.

    A missing description cleans to an empty string. Falls back to the
    undecoded text when stripping fails.
    """
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raw = str(raw)

    try:
        decoded = html.unescape(raw)
        text = BeautifulSoup(decoded, "html.parser").get_text()
    except (TypeError, AttributeError, ValueError) as e:
        logger.error(f"[description] Could not clean description: {e}")
        return raw

    lines = [line.strip() for line in text.splitlines()]
    return _BLANK_LINES.sub("\n\n", "\n".join(lines)).strip()

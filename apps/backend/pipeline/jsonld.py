"""
JSON-LD extractor.

Reads the structured-data block embedded in Glassdoor job and job-list pages.
"""

import json
import logging
from typing import Dict, List, Any

from core.document import Document
from core.errors import ItemSkipped

logger = logging.getLogger(__name__)

JSONLD_TYPE = "application/ld+json"


class MissingStructuredData(ItemSkipped):
    """Raised when a page has no usable JSON-LD block."""
    pass


class JSONLDExtractor:
    """Extracts structured data from JSON-LD script blocks."""

    def extract(self, doc: Document, url: str) -> Dict[str, Any]:
        """
        Parse the first JSON-LD block of a page.

        Raises:
            MissingStructuredData: no block, invalid JSON, or not an object
        """
        scripts = doc.scripts(JSONLD_TYPE)
        if not scripts:
            raise MissingStructuredData(f"No JSON-LD block on {url}")

        try:
            # raw newlines inside description strings are common
            data = json.loads(scripts[0], strict=False)
        except json.JSONDecodeError as e:
            raise MissingStructuredData(f"Invalid JSON-LD on {url}: {e}") from e

        if not isinstance(data, dict):
            raise MissingStructuredData(f"Unexpected JSON-LD shape on {url}: {type(data).__name__}")
        return data

    def first_list_item(self, doc: Document, url: str) -> Dict[str, Any]:
        """
        First entry of an ItemList block (a list page pre-scrolled to one job).

        Raises:
            MissingStructuredData: block missing, or itemListElement missing/empty
        """
        data = self.extract(doc, url)
        items = self._flatten_item_list(data)
        if not items:
            raise MissingStructuredData(f"Jobs list not found in JSON-LD on {url}")
        return items[0]

    def _flatten_item_list(self, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Flatten itemListElement, unwrapping ListItem.item entries."""
        elements = data.get("itemListElement")
        if not isinstance(elements, list):
            return []

        items = []
        for element in elements:
            if not isinstance(element, dict):
                continue
            if isinstance(element.get("item"), dict) and "url" not in element:
                items.append(element["item"])
            else:
                items.append(element)
        return items

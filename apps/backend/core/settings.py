"""
Crawler configuration.

Values come from environment variables (a .env file is loaded by main.py).
"""
import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

BASE_URL = "https://www.glassdoor.com"
DEFAULT_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Rate-limit handling for listing pages
RATE_LIMIT_STATUS = 504
RATE_LIMIT_MAX_RETRIES = 5
RATE_LIMIT_WAIT_SECONDS = 3.0

LOCATION_CANDIDATES = 10
EMPLOYER_JOBS_LIMIT = 3
MAX_CONCURRENCY = 5
MAX_REQUEST_RETRIES = 3
DEFAULT_OUTPUT_PATH = "storage/dataset.jsonl"


@dataclass(frozen=True)
class RateLimitPolicy:
    """Fixed-backoff retry policy for the "service overloaded" status."""
    status_code: int = RATE_LIMIT_STATUS
    max_retries: int = RATE_LIMIT_MAX_RETRIES
    wait_seconds: float = RATE_LIMIT_WAIT_SECONDS


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"[settings] Invalid integer for {name}: {raw!r}, using {default}")
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"[settings] Invalid number for {name}: {raw!r}, using {default}")
        return default


class CrawlSettings:
    """Runtime settings for one crawl"""

    def __init__(self, output_path: Optional[str] = None):
        self.base_url = os.getenv("GLASSDOOR_BASE_URL", BASE_URL).rstrip("/")
        self.proxy_url = os.getenv("GLASSDOOR_PROXY_URL") or None
        self.user_agent = os.getenv("GLASSDOOR_USER_AGENT", DEFAULT_UA)
        self.max_concurrency = max(1, _int_env("GLASSDOOR_MAX_CONCURRENCY", MAX_CONCURRENCY))
        self.max_request_retries = max(0, _int_env("GLASSDOOR_MAX_REQUEST_RETRIES", MAX_REQUEST_RETRIES))
        self.location_candidates = max(1, _int_env("GLASSDOOR_LOCATION_CANDIDATES", LOCATION_CANDIDATES))
        self.employer_jobs_limit = max(1, _int_env("GLASSDOOR_EMPLOYER_JOBS_LIMIT", EMPLOYER_JOBS_LIMIT))
        self.rate_limit = RateLimitPolicy(
            status_code=_int_env("GLASSDOOR_RATE_LIMIT_STATUS", RATE_LIMIT_STATUS),
            max_retries=max(0, _int_env("GLASSDOOR_RATE_LIMIT_RETRIES", RATE_LIMIT_MAX_RETRIES)),
            wait_seconds=max(0.0, _float_env("GLASSDOOR_RATE_LIMIT_WAIT_SECONDS", RATE_LIMIT_WAIT_SECONDS)),
        )
        self.output_path = Path(output_path or os.getenv("GLASSDOOR_OUTPUT_PATH", DEFAULT_OUTPUT_PATH))
        metrics_port = _int_env("GLASSDOOR_METRICS_PORT", 0)
        self.metrics_port: Optional[int] = metrics_port if metrics_port > 0 else None

        if self.proxy_url:
            logger.info("[settings] Proxy configured for all requests")

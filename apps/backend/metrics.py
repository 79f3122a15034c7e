"""
Lightweight metrics helper for crawl monitoring (Prometheus counters).
"""
import logging
from typing import Optional

from prometheus_client import Counter, REGISTRY, start_http_server

logger = logging.getLogger(__name__)

pages_fetched = Counter('glassdoor_pages_fetched_total', 'Listing pages fetched')
rate_limit_retries = Counter('glassdoor_rate_limit_retries_total', 'Listing page retries after the rate-limit status')
records_saved = Counter('glassdoor_records_saved_total', 'Job records pushed to the dataset')
items_skipped = Counter('glassdoor_items_skipped_total', 'Items dropped by a recoverable error')
requests_failed = Counter('glassdoor_requests_failed_total', 'Requests that exhausted their retries')
employer_cache_hits = Counter('glassdoor_employer_cache_hits_total', 'Employer profile cache hits')
employer_cache_misses = Counter('glassdoor_employer_cache_misses_total', 'Employer profile cache misses')


def incr_pages_fetched(n: int = 1):
    if n > 0:
        pages_fetched.inc(n)


def incr_rate_limit_retries(n: int = 1):
    if n > 0:
        rate_limit_retries.inc(n)


def incr_records_saved(n: int = 1):
    if n > 0:
        records_saved.inc(n)


def incr_items_skipped(n: int = 1):
    if n > 0:
        items_skipped.inc(n)


def incr_requests_failed(n: int = 1):
    if n > 0:
        requests_failed.inc(n)


def incr_employer_cache_hits(n: int = 1):
    if n > 0:
        employer_cache_hits.inc(n)


def incr_employer_cache_misses(n: int = 1):
    if n > 0:
        employer_cache_misses.inc(n)


def get_metrics() -> dict:
    """Current counter values, keyed by short name."""
    names = {
        'pages_fetched': 'glassdoor_pages_fetched_total',
        'rate_limit_retries': 'glassdoor_rate_limit_retries_total',
        'records_saved': 'glassdoor_records_saved_total',
        'items_skipped': 'glassdoor_items_skipped_total',
        'requests_failed': 'glassdoor_requests_failed_total',
        'employer_cache_hits': 'glassdoor_employer_cache_hits_total',
        'employer_cache_misses': 'glassdoor_employer_cache_misses_total',
    }
    return {key: REGISTRY.get_sample_value(sample) or 0.0 for key, sample in names.items()}


def start_metrics_server(port: Optional[int]):
    """Expose /metrics when a port is configured."""
    if not port:
        return
    start_http_server(port)
    logger.info(f"Prometheus metrics exposed on port {port}")

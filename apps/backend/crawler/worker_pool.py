"""
Request queue and worker pool.

Runs a handler once per unique request with bounded concurrency and
at-least-once retry semantics.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Iterable, List

from tenacity import AsyncRetrying, retry_if_not_exception_type, stop_after_attempt

import metrics
from core.errors import ItemSkipped
from core.settings import MAX_CONCURRENCY, MAX_REQUEST_RETRIES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrawlRequest:
    url: str
    unique_key: str


@dataclass
class PoolStats:
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.succeeded + self.skipped + self.failed


Handler = Callable[[CrawlRequest], Awaitable[None]]


def unique_requests(requests: Iterable[CrawlRequest]) -> List[CrawlRequest]:
    """Drop requests whose unique_key was already seen (first one wins)."""
    seen: Dict[str, CrawlRequest] = {}
    for request in requests:
        if request.unique_key not in seen:
            seen[request.unique_key] = request
    return list(seen.values())


class WorkerPool:
    """
    Bounded-concurrency dispatcher for per-item handlers.

    Handlers raising ItemSkipped are not retried. Any other exception is
    retried up to `max_request_retries` times, then logged as failed.
    """

    def __init__(
        self,
        max_concurrency: int = MAX_CONCURRENCY,
        max_request_retries: int = MAX_REQUEST_RETRIES
    ):
        self.max_concurrency = max(1, max_concurrency)
        self.max_request_retries = max(0, max_request_retries)

    async def run(self, requests: Iterable[CrawlRequest], handler: Handler) -> PoolStats:
        queue = unique_requests(requests)
        stats = PoolStats()
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def process(request: CrawlRequest):
            async with semaphore:
                try:
                    await self._run_with_retries(request, handler)
                    stats.succeeded += 1
                except ItemSkipped as e:
                    stats.skipped += 1
                    metrics.incr_items_skipped()
                    logger.error(f"[pool] Skipped {request.url} ({request.unique_key}): {e}")
                except Exception as e:
                    stats.failed += 1
                    metrics.incr_requests_failed()
                    logger.error(
                        f"[pool] Request {request.url} ({request.unique_key}) failed "
                        f"{self.max_request_retries + 1} times: {e}"
                    )

        logger.info(f"[pool] Processing {len(queue)} request(s) with concurrency {self.max_concurrency}")
        await asyncio.gather(*(process(request) for request in queue))
        logger.info(f"[pool] Done: {stats.succeeded} succeeded, {stats.skipped} skipped, {stats.failed} failed")
        return stats

    async def _run_with_retries(self, request: CrawlRequest, handler: Handler):
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_request_retries + 1),
            retry=retry_if_not_exception_type(ItemSkipped),
            before_sleep=lambda state: logger.warning(
                f"[pool] Retrying {request.url} after error: {state.outcome.exception()}"
            ),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                await handler(request)

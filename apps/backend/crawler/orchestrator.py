"""
Crawl orchestrator - runs one search from input to dataset.

Stages:
1. Resolve the location and build the search criteria
2. Paginate search results (Jobs or Companies)
3. Expand companies into job stubs (Companies only)
4. Deduplicate by job id
5. Enrich every job from its detail page and push it to the sink
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import metrics
from core.errors import ItemSkipped, NoLocationFound, NoResultsFound
from core.net import HTTPClient
from core.settings import CrawlSettings
from crawler.employer_cache import EmployerDetailCache
from crawler.employer_jobs import EmployerJobExpander
from crawler.job_detail import JobDetailEnricher
from crawler.listing import ListingResult, PaginatedListCrawler
from crawler.location import LocationResolver
from crawler.models import Category, CrawlInput, EmployerStub, JobStub, SearchCriteria
from crawler.worker_pool import CrawlRequest, PoolStats, WorkerPool
from pipeline.sink import JsonlDatasetSink

logger = logging.getLogger(__name__)


def dedupe_by_id(stubs: Sequence[JobStub]) -> List[JobStub]:
    """Keep the first stub for every job id, preserving order."""
    unique: Dict[int, JobStub] = {}
    for stub in stubs:
        unique.setdefault(stub.id, stub)
    return list(unique.values())


@dataclass
class CrawlSummary:
    category: Category
    budget: int
    listings: int
    unique: int
    saved: int
    skipped: int
    failed: int


class GlassdoorCrawler:
    """Coordinates the crawl stages for one run."""

    def __init__(
        self,
        settings: Optional[CrawlSettings] = None,
        http_client: Optional[HTTPClient] = None,
        sink: Optional[JsonlDatasetSink] = None
    ):
        self.settings = settings or CrawlSettings()
        self.http_client = http_client or HTTPClient(
            user_agent=self.settings.user_agent,
            proxy=self.settings.proxy_url,
            overload_status=self.settings.rate_limit.status_code,
        )
        self.sink = sink or JsonlDatasetSink(self.settings.output_path)
        # profiles live for this run only
        self.cache = EmployerDetailCache()
        self.pool = WorkerPool(self.settings.max_concurrency, self.settings.max_request_retries)

        base_url = self.settings.base_url
        self.resolver = LocationResolver(self.http_client, base_url, self.settings.location_candidates)
        self.expander = EmployerJobExpander(self.http_client, base_url, self.settings.employer_jobs_limit)
        self.enricher = JobDetailEnricher(self.http_client, self.cache, base_url)

    async def build_criteria(self, crawl_input: CrawlInput) -> SearchCriteria:
        """
        Raises:
            NoLocationFound: empty location text or no lookup candidates
        """
        if not crawl_input.location:
            raise NoLocationFound(crawl_input.location)

        fragment = await self.resolver.resolve(crawl_input.location, crawl_input.location_state)
        return SearchCriteria(
            query=crawl_input.query,
            location_fragment=fragment,
            category=Category.from_input(crawl_input.category),
            max_results=crawl_input.max_results,
        )

    async def paginate(self, criteria: SearchCriteria) -> ListingResult:
        crawler = PaginatedListCrawler(
            self.http_client,
            criteria,
            base_url=self.settings.base_url,
            policy=self.settings.rate_limit,
        )
        return await crawler.crawl()

    async def expand_employers(self, employers: Sequence[EmployerStub]) -> List[JobStub]:
        """Job stubs from every employer; failed employers contribute none."""
        by_key = {str(employer.id): employer for employer in employers}
        requests = []
        for employer in employers:
            try:
                requests.append(CrawlRequest(self.expander.jobs_url(employer), str(employer.id)))
            except ValueError as e:
                logger.error(f"[crawl] - {e}")

        stubs: List[JobStub] = []

        async def handle(request: CrawlRequest):
            employer = by_key.get(request.unique_key)
            if employer is None:
                raise ItemSkipped(f"not found review listing id {request.unique_key} in search results")
            stubs.extend(await self.expander.expand(employer, request.url))

        await self.pool.run(requests, handle)
        return stubs

    async def enrich_jobs(self, stubs: Sequence[JobStub]) -> PoolStats:
        """Fetch every job's detail page and push the merged record."""
        by_key = {str(stub.id): stub for stub in stubs}
        requests = []
        for stub in stubs:
            if stub.url:
                requests.append(CrawlRequest(stub.url, str(stub.id)))
            else:
                logger.warning(f"[crawl] Job listing id {stub.id} has no detail url")

        async def handle(request: CrawlRequest):
            stub = by_key.get(request.unique_key)
            if stub is None:
                raise ItemSkipped(f"Not found job listing id {request.unique_key} in search results")
            record = await self.enricher.enrich(stub, request.url)
            logger.info(f"[crawl] Saving details for job listing id {request.unique_key}")
            await self.sink.push(record)
            metrics.incr_records_saved()

        return await self.pool.run(requests, handle)

    async def run(self, crawl_input: CrawlInput) -> CrawlSummary:
        """
        Run the whole crawl.

        Raises:
            CrawlError: any fatal error (location, budget, pagination, no results)
        """
        criteria = await self.build_criteria(crawl_input)
        logger.info(f"[crawl] Searching {criteria.category.value} for {criteria.query!r}")

        listing = await self.paginate(criteria)
        if criteria.category is Category.COMPANIES:
            stubs = await self.expand_employers(listing.items)
        else:
            stubs = list(listing.items)

        unique = dedupe_by_id(stubs)
        logger.info(f"[crawl] Found {len(unique)} unique listings out of {len(stubs)} in total")
        if not unique:
            raise NoResultsFound("No results from search!")

        stats = await self.enrich_jobs(unique)
        logger.info(f"[crawl] Parsed {stats.succeeded} items in total")
        return CrawlSummary(
            category=criteria.category,
            budget=listing.budget,
            listings=len(stubs),
            unique=len(unique),
            saved=stats.succeeded,
            skipped=stats.skipped,
            failed=stats.failed,
        )

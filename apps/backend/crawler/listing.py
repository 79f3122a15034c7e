"""
Paginated search-result crawler for the Jobs and Companies categories.

Pagination is sequential: each page's URL comes from the previous page's
"next" link.
"""
import re
import math
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Union
from urllib.parse import urlencode, urljoin

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_fixed

import metrics
from core.document import Document, Node
from core.errors import BudgetUnresolvable, ServiceOverloaded
from core.net import HTTPClient
from core.settings import BASE_URL, RateLimitPolicy
from crawler.models import Category, EmployerStub, JobStub, SearchCriteria

logger = logging.getLogger(__name__)

ListItem = Union[JobStub, EmployerStub]

NEXT_PAGE_SELECTOR = "#FooterPageNav li.next a"

_NUMBER = re.compile(r"[-+]?\d*\.?\d+")
_LEADING_INT = re.compile(r"\s*(\d+)")


def parse_rating(text: str) -> float:
    """Leading decimal number of a rating badge, NaN when absent."""
    match = _NUMBER.search(text or "")
    return float(match.group()) if match else math.nan


def parse_count(text: Optional[str]) -> Optional[int]:
    """
    Parse a results-count summary such as "1,234 Jobs".

    Returns None unless the text starts with a positive integer.
    """
    if not text:
        return None
    match = _LEADING_INT.match(text.replace(",", ""))
    if not match:
        return None
    count = int(match.group(1))
    return count if count > 0 else None


def _parse_id(raw: Optional[str]) -> Optional[int]:
    try:
        return int(raw) if raw is not None else None
    except ValueError:
        return None


def map_job_item(node: Node, base_url: str) -> Optional[JobStub]:
    """Map an `li.jl` search result to a JobStub."""
    job_id = _parse_id(node.data("id"))
    if job_id is None:
        logger.warning(f"[listing] Job item without id: {node.data('id')!r}")
        return None

    anchors = node.select("a")
    href = anchors[0].attr("href") if anchors else None
    return JobStub(
        id=job_id,
        employer_name=node.text_of("div.jobInfoItem.jobEmpolyerName"),
        employer_rating=parse_rating(node.text_of("span.compactStars")),
        job_title=anchors[-1].text() if anchors else "",
        # div.jobInfoItem.empLoc includes tooltips like "hot" or "easy hire"
        job_location=node.text_of("span.subtle.loc"),
        url=urljoin(base_url, href) if href else "",
        salary=node.text_of("span.salaryText").strip(),
    )


def map_employer_item(node: Node, base_url: str) -> Optional[EmployerStub]:
    """Map a `div.eiHdrModule` company-review result to an EmployerStub."""
    employer_id = _parse_id(node.data("emp-id"))
    link = node.select_one("div.margBotXs a")
    if employer_id is None or link is None or not link.attr("href"):
        logger.warning(f"[listing] Employer item without id or review link: {node.data('emp-id')!r}")
        return None

    return EmployerStub(
        id=employer_id,
        employer_name=link.text().strip(),
        employer_rating=parse_rating(node.text_of("span.bigRating.strong.margRtSm.h1")),
        review_page_url=link.attr("href"),
    )


@dataclass(frozen=True)
class ListingLayout:
    """Category-specific search path and selectors"""
    search_path: str
    item_selector: str
    count_selector: str
    mapper: Callable[[Node, str], Optional[ListItem]]


LAYOUTS: Dict[Category, ListingLayout] = {
    Category.JOBS: ListingLayout(
        search_path="/Job/jobs.htm",
        item_selector="li.jl",
        count_selector="p.jobsCount",
        mapper=map_job_item,
    ),
    Category.COMPANIES: ListingLayout(
        search_path="/Reviews/company-reviews.htm",
        item_selector="div.eiHdrModule",
        count_selector="div.count.margBot.floatLt.tightBot strong",
        mapper=map_employer_item,
    ),
}


def build_search_url(criteria: SearchCriteria, base_url: str = BASE_URL) -> str:
    """Page-1 URL for a search."""
    layout = LAYOUTS[criteria.category]
    keyword = urlencode({"sc.keyword": criteria.query})
    return f"{base_url}{layout.search_path}?{keyword}{criteria.location_fragment}&srs=RECENT_SEARCHES"


@dataclass
class ListingResult:
    items: List[ListItem] = field(default_factory=list)
    budget: int = 0
    pages: int = 0


class PaginatedListCrawler:
    """
    Walks search-result pages until the budget is met or pages run out.

    If the criteria carry no result limit, the budget is read from the first
    page's results-count summary. A page answered with the rate-limit status
    is retried after a fixed wait; any other failure propagates.

    The rate-limit retry budget is per page: every page gets the full
    `policy.max_retries`, rather than one counter shared by the whole run.
    A next link pointing at an already fetched page ends the walk.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        criteria: SearchCriteria,
        base_url: str = BASE_URL,
        policy: Optional[RateLimitPolicy] = None
    ):
        self.http_client = http_client
        self.criteria = criteria
        self.base_url = base_url
        self.policy = policy or RateLimitPolicy()
        self.layout = LAYOUTS[criteria.category]

    def _log_rate_limit(self, retry_state: RetryCallState):
        metrics.incr_rate_limit_retries()
        logger.info(
            f"[listing] - Encountered rate limit, waiting {self.policy.wait_seconds:g} seconds "
            f"(retry {retry_state.attempt_number}/{self.policy.max_retries})"
        )

    async def fetch_page(self, url: str) -> Document:
        """Fetch one listing page, retrying the rate-limit status only."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.policy.max_retries + 1),
            wait=wait_fixed(self.policy.wait_seconds),
            retry=retry_if_exception_type(ServiceOverloaded),
            before_sleep=self._log_rate_limit,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                logger.info(f"[listing] GET {url}")
                doc = await self.http_client.get_document(url)
        metrics.incr_pages_fetched()
        return doc

    def parse_budget(self, doc: Document) -> int:
        """
        Results count from the category's summary element.

        Raises:
            BudgetUnresolvable: missing element or not a positive integer
        """
        nodes = doc.select(self.layout.count_selector)
        raw = nodes[-1].text() if nodes else None
        count = parse_count(raw)
        if count is None:
            raise BudgetUnresolvable(raw)
        logger.info(f"[listing] Parsed maximumResults = {count}")
        return count

    def parse_items(self, doc: Document) -> List[ListItem]:
        items = []
        for node in doc.select(self.layout.item_selector):
            item = self.layout.mapper(node, self.base_url)
            if item is not None:
                items.append(item)
        return items

    def next_page_url(self, doc: Document) -> Optional[str]:
        href = doc.attr_of(NEXT_PAGE_SELECTOR, "href")
        return urljoin(self.base_url, href) if href else None

    async def crawl(self) -> ListingResult:
        result = ListingResult(budget=self.criteria.max_results if self.criteria.budget_requested else -1)
        url: Optional[str] = build_search_url(self.criteria, self.base_url)
        visited: Set[str] = set()

        while url:
            if url in visited:
                logger.warning(f"[listing] Next page {url} was already fetched, stopping")
                break
            visited.add(url)

            doc = await self.fetch_page(url)
            result.pages += 1

            if result.budget < 0:
                result.budget = self.parse_budget(doc)

            page_items = self.parse_items(doc)
            to_save = page_items[:result.budget - len(result.items)]
            result.items.extend(to_save)

            url = self.next_page_url(doc)
            logger.info(f"[listing] Page {result.pages}: Found {len(to_save)} items, next page: {url}")

            if len(result.items) >= result.budget:
                break

        return result

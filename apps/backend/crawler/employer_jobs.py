"""
Expands company-review results into job stubs.

A company's jobs page links each job to a *list* page pre-scrolled to that
job, so every job needs one more request to find its canonical URL.
"""
import logging
from typing import List, Optional
from urllib.parse import parse_qs, urljoin, urlparse

from core.document import Node
from core.errors import ItemSkipped
from core.net import HTTPClient
from core.settings import BASE_URL, EMPLOYER_JOBS_LIMIT
from crawler.models import EmployerStub, JobStub
from pipeline.jsonld import JSONLDExtractor

logger = logging.getLogger(__name__)

JOB_CONTAINER_SELECTOR = "div.JobsListItemStyles__jobDetailsContainer"
JOB_LINK_SELECTOR = ".JobDetailsStyles__jobTitle"
JOB_TITLE_SELECTOR = ".JobDetailsStyles__iconLink"

_REVIEW_SEGMENT = "Overview/Working-at-"
_JOBS_SEGMENT = "Jobs/"
_REVIEW_ID_MARKER = "-EI_IE"
_JOBS_ID_MARKER = "-Jobs-E"


def review_url_to_jobs_url(review_url: str) -> str:
    """
    Rewrite a company overview URL into the company's jobs URL.

    >>> review_url_to_jobs_url("/Overview/Working-at-Web-com-EI_IE12965.11,18.htm")
    '/Jobs/Web-com-Jobs-E12965.htm'
    >>> review_url_to_jobs_url("https://www.glassdoor.com/Overview/Working-at-Acme-EI_IE42.htm")
    'https://www.glassdoor.com/Jobs/Acme-Jobs-E42.htm'

    Raises:
        ValueError: the URL has no "-EI_IE" employer marker
    """
    url = review_url.replace(_REVIEW_SEGMENT, _JOBS_SEGMENT)
    marker = url.find(_REVIEW_ID_MARKER)
    if marker < 0:
        raise ValueError(f"Not a company overview URL: {review_url}")

    # drop everything from the first "." after the employer id
    end = url.find(".", marker)
    if end >= 0:
        url = url[:end]
    return url.replace(_REVIEW_ID_MARKER, _JOBS_ID_MARKER) + ".htm"


def parse_job_listing_id(href: str) -> Optional[int]:
    """jobListingId from a job link's query string."""
    values = parse_qs(urlparse(href).query).get("jobListingId")
    if not values:
        return None
    try:
        return int(values[0])
    except ValueError:
        return None


class EmployerJobExpander:
    """Turns one EmployerStub into up to `jobs_limit` JobStubs."""

    def __init__(
        self,
        http_client: HTTPClient,
        base_url: str = BASE_URL,
        jobs_limit: int = EMPLOYER_JOBS_LIMIT
    ):
        self.http_client = http_client
        self.base_url = base_url
        self.jobs_limit = jobs_limit
        self.jsonld = JSONLDExtractor()

    def jobs_url(self, employer: EmployerStub) -> str:
        return urljoin(self.base_url, review_url_to_jobs_url(employer.review_page_url))

    async def expand(self, employer: EmployerStub, jobs_url: Optional[str] = None) -> List[JobStub]:
        """
        Fetch the employer's jobs page and resolve each job's canonical URL.

        Per-job problems are logged and skipped; a failure to fetch the jobs
        page itself propagates to the caller.
        """
        jobs_url = jobs_url or self.jobs_url(employer)
        doc = await self.http_client.get_document(jobs_url)
        containers = doc.select(JOB_CONTAINER_SELECTOR)[:self.jobs_limit]
        logger.info(f"[employer_jobs] Preparing {len(containers)} job(s) for company {jobs_url}")

        stubs = []
        for container in containers:
            try:
                stubs.append(await self._resolve_job(employer, container))
            except ItemSkipped as e:
                logger.error(f"[employer_jobs] - {e}")
        return stubs

    async def _resolve_job(self, employer: EmployerStub, container: Node) -> JobStub:
        links = container.select(JOB_LINK_SELECTOR)
        if not links:
            raise ItemSkipped("no job link element")

        href = links[0].attr("href")
        job_id = parse_job_listing_id(href) if href else None
        if job_id is None:
            raise ItemSkipped(f"job link {href!r} corrupted: {container.html()[:200]}")

        title = container.text_of(JOB_TITLE_SELECTOR)
        list_page_url = urljoin(self.base_url, href)
        logger.info(f"[employer_jobs] parsing {list_page_url}")
        list_page = await self.http_client.get_document(list_page_url)
        job_item = self.jsonld.first_list_item(list_page, list_page_url)

        job_url = job_item.get("url")
        if not job_url:
            raise ItemSkipped(f"Job item without url on {list_page_url}")

        logger.info(f"[employer_jobs] set to reparse from {job_url}")
        return JobStub(
            id=job_id,
            employer_name=employer.employer_name,
            employer_rating=employer.employer_rating,
            job_title=title,
            url=job_url,
        )

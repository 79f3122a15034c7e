"""
Job detail enrichment.

Fetches a job page, reads its JSON-LD JobPosting, attaches the employer
profile (cached per employer) and merges everything into a JobRecord.
"""
import logging
from typing import Any, Dict, Optional
from urllib.parse import urljoin

from core.document import Document
from core.net import HTTPClient
from core.settings import BASE_URL
from crawler.employer_cache import EmployerDetailCache, EmployerProfile
from crawler.models import JobRecord, JobStub
from pipeline.description import clean_description
from pipeline.jsonld import JSONLDExtractor

logger = logging.getLogger(__name__)

EMPLOYER_HERO_SELECTOR = "#EmpHero"
EMPLOYER_PROFILE_LINK_SELECTOR = "div.logo.cell a"
BASIC_INFO_SELECTOR = "#EmpBasicInfo div.infoEntity"


def parse_employer_profile(doc: Document) -> EmployerProfile:
    """Label/value pairs from an employer overview's basic-info section."""
    profile = {}
    for entity in doc.select(BASIC_INFO_SELECTOR):
        label = entity.text_of("label").strip()
        value = entity.text_of("span").strip()
        if label and value:
            profile[label] = value
    return profile


def merge_record(
    stub: JobStub,
    posting: Dict[str, Any],
    job_details: str,
    profile: EmployerProfile
) -> JobRecord:
    """
    Merge list data, the JobPosting block and the employer profile.

    Posting values supersede the stub's; structured hiringOrganization
    fields win over profile attributes of the same name.
    """
    company_details: Dict[str, Any] = dict(profile)
    organization = posting.get("hiringOrganization")
    if isinstance(organization, dict):
        company_details.update(organization)

    date_posted = posting.get("datePosted")
    return JobRecord(
        id=stub.id,
        employer_name=stub.employer_name,
        employer_rating=stub.employer_rating,
        job_title=stub.job_title,
        job_location=posting.get("jobLocation", stub.job_location),
        url=posting.get("url") or stub.url,
        salary=posting.get("estimatedSalary", stub.salary),
        company_details=company_details,
        job_details=job_details,
        date_posted=str(date_posted) if date_posted is not None else None,
    )


class JobDetailEnricher:
    """Builds the final record for one job stub."""

    def __init__(
        self,
        http_client: HTTPClient,
        cache: EmployerDetailCache,
        base_url: str = BASE_URL
    ):
        self.http_client = http_client
        self.cache = cache
        self.base_url = base_url
        self.jsonld = JSONLDExtractor()

    async def enrich(self, stub: JobStub, url: Optional[str] = None) -> JobRecord:
        """
        Raises:
            MissingStructuredData: the page has no usable JobPosting block
        """
        url = url or stub.url
        logger.info(f"[job_detail] job GET {url}")
        doc = await self.http_client.get_document(url)
        posting = self.jsonld.extract(doc, url)

        job_details = clean_description(posting.get("description"))
        profile = await self.employer_profile(doc)
        return merge_record(stub, posting, job_details, profile)

    async def employer_profile(self, doc: Document) -> EmployerProfile:
        """Cached profile for the page's employer; empty if the page has no employer id."""
        employer_id = doc.attr_of(EMPLOYER_HERO_SELECTOR, "data-employer-id")
        if not employer_id:
            logger.warning("[job_detail] No employer id on job page, skipping company overview")
            return {}

        async def load() -> EmployerProfile:
            return await self._fetch_profile(doc, employer_id)

        return await self.cache.get_or_load(employer_id, load)

    async def _fetch_profile(self, doc: Document, employer_id: str) -> EmployerProfile:
        href = doc.attr_of(EMPLOYER_PROFILE_LINK_SELECTOR, "href")
        if not href:
            logger.warning(f"[job_detail] No company overview link for employer {employer_id}")
            return {}

        company_url = urljoin(self.base_url, href)
        logger.info(f"[job_detail] company overview GET {company_url}")
        overview = await self.http_client.get_document(company_url)
        return parse_employer_profile(overview)

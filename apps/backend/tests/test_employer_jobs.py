"""
Tests for expanding company-review results into job stubs.
"""
import pytest

from crawler.employer_jobs import EmployerJobExpander, parse_job_listing_id, review_url_to_jobs_url
from crawler.models import EmployerStub
from glassdoor_pages import BASE_URL, employer_jobs_page, job_list_page, jsonld_page

JOBS_URL = f"{BASE_URL}/Jobs/Acme-Jobs-E42.htm"


def _employer():
    return EmployerStub(
        id=42,
        employer_name="Acme",
        employer_rating=4.5,
        review_page_url="/Overview/Working-at-Acme-EI_IE42.11,15.htm",
    )


def _job_href(job_id):
    return f"/Job/acme-jobs-SRCH_IE42.htm?jl={job_id}&jobListingId={job_id}"


class TestReviewUrlRewrite:

    def test_relative_url(self):
        assert review_url_to_jobs_url("/Overview/Working-at-Web-com-EI_IE12965.11,18.htm") == "/Jobs/Web-com-Jobs-E12965.htm"

    def test_absolute_url_without_suffix(self):
        assert review_url_to_jobs_url(
            "https://www.glassdoor.com/Overview/Working-at-Acme-EI_IE42.htm"
        ) == "https://www.glassdoor.com/Jobs/Acme-Jobs-E42.htm"

    def test_missing_marker(self):
        with pytest.raises(ValueError):
            review_url_to_jobs_url("/Reviews/Acme-Reviews-E42.htm")


class TestJobListingId:

    def test_reads_query_parameter(self):
        assert parse_job_listing_id(_job_href(3141)) == 3141

    def test_missing_parameter(self):
        assert parse_job_listing_id("/Job/acme-jobs.htm?jl=3141") is None

    def test_non_numeric(self):
        assert parse_job_listing_id("/Job/x.htm?jobListingId=abc") is None


class TestEmployerJobExpander:

    def test_jobs_url(self, fake_http):
        expander = EmployerJobExpander(fake_http, BASE_URL)
        assert expander.jobs_url(_employer()) == JOBS_URL

    @pytest.mark.asyncio
    async def test_expands_first_three_jobs(self, fake_http):
        fake_http.pages[JOBS_URL] = employer_jobs_page([
            {"href": _job_href(job_id), "title": f"Role {job_id}"} for job_id in (1, 2, 3, 4)
        ])
        for job_id in (1, 2, 3, 4):
            fake_http.pages[BASE_URL + _job_href(job_id)] = job_list_page(f"{BASE_URL}/job-listing/role-{job_id}")

        stubs = await EmployerJobExpander(fake_http, BASE_URL, jobs_limit=3).expand(_employer())

        assert [stub.id for stub in stubs] == [1, 2, 3]
        assert stubs[0].job_title == "Role 1"
        assert stubs[0].url == f"{BASE_URL}/job-listing/role-1"
        assert stubs[0].employer_name == "Acme"
        assert stubs[0].employer_rating == 4.5
        assert BASE_URL + _job_href(4) not in fake_http.urls()

    @pytest.mark.asyncio
    async def test_bad_jobs_are_skipped(self, fake_http):
        fake_http.pages[JOBS_URL] = employer_jobs_page([
            {"title": "No link"},
            {"href": "/Job/acme.htm?jl=7", "title": "No token"},
            {"href": _job_href(8), "title": "No structured data"},
        ])
        fake_http.pages[BASE_URL + _job_href(8)] = "<html><body>gone</body></html>"

        stubs = await EmployerJobExpander(fake_http, BASE_URL, jobs_limit=5).expand(_employer())

        assert stubs == []
        assert fake_http.urls() == [JOBS_URL, BASE_URL + _job_href(8)]

    @pytest.mark.asyncio
    async def test_empty_item_list_is_skipped(self, fake_http):
        fake_http.pages[JOBS_URL] = employer_jobs_page([
            {"href": _job_href(1), "title": "Empty list"},
            {"href": _job_href(2), "title": "Fine"},
        ])
        fake_http.pages[BASE_URL + _job_href(1)] = jsonld_page({"@type": "ItemList", "itemListElement": []})
        fake_http.pages[BASE_URL + _job_href(2)] = job_list_page(f"{BASE_URL}/job-listing/fine")

        stubs = await EmployerJobExpander(fake_http, BASE_URL).expand(_employer())

        assert [stub.id for stub in stubs] == [2]

    @pytest.mark.asyncio
    async def test_no_containers(self, fake_http):
        fake_http.pages[JOBS_URL] = employer_jobs_page([])

        assert await EmployerJobExpander(fake_http, BASE_URL).expand(_employer()) == []

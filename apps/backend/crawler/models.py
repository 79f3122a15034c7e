"""
Data models for the Glassdoor crawl.

Output models serialize with the site's camelCase field names.
"""
import math
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(str, Enum):
    """Searchable record categories"""
    JOBS = "Jobs"
    COMPANIES = "Companies"

    @classmethod
    def from_input(cls, value: Optional[str]) -> "Category":
        # anything other than "Companies" is a job search
        return cls.COMPANIES if value == cls.COMPANIES.value else cls.JOBS


class CrawlInput(BaseModel):
    """Run input as loaded from INPUT.json or CLI flags."""
    model_config = ConfigDict(populate_by_name=True)

    query: str
    location: str
    location_state: Optional[str] = Field(None, alias="locationState")
    category: Optional[str] = None
    max_results: int = Field(-1, alias="maxResults")

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("INPUT must contain query")
        return value

    @field_validator("max_results", mode="before")
    @classmethod
    def parse_max_results(cls, value: Any) -> Any:
        if value is None:
            return -1
        if isinstance(value, str):
            value = value.strip()
            return int(value) if value else -1
        return value


class SearchCriteria(BaseModel):
    """Immutable search parameters for one run."""
    model_config = ConfigDict(frozen=True)

    query: str
    location_fragment: str = ""
    category: Category = Category.JOBS
    max_results: int = -1

    @property
    def budget_requested(self) -> bool:
        return self.max_results > 0


class LocationMatch(BaseModel):
    """One candidate from the location lookup endpoint."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    location_type: str = Field(alias="locationType")
    location_id: int = Field(alias="locationId")
    long_name: str = Field("", alias="longName")

    def in_region(self, region: str) -> bool:
        # longName looks like "Yorktown, VA (US)"
        return f", {region} (" in self.long_name


class _SiteModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class EmployerStub(_SiteModel):
    id: int
    employer_name: str = Field("", alias="employerName")
    employer_rating: float = Field(math.nan, alias="employerRating")
    review_page_url: str = Field("", alias="reviewPageUrl")


class JobStub(_SiteModel):
    id: int
    employer_name: str = Field("", alias="employerName")
    employer_rating: float = Field(math.nan, alias="employerRating")
    job_title: str = Field("", alias="jobTitle")
    job_location: Any = Field("", alias="jobLocation")
    url: str = ""
    salary: Any = ""
    job_details: str = Field("", alias="jobDetails")
    company_details: Dict[str, Any] = Field(default_factory=dict, alias="companyDetails")


class JobRecord(_SiteModel):
    """Final merged output record."""
    id: int
    employer_name: str = Field("", alias="employerName")
    employer_rating: float = Field(math.nan, alias="employerRating")
    job_title: str = Field("", alias="jobTitle")
    job_location: Any = Field(None, alias="jobLocation")
    url: str = ""
    salary: Any = None
    company_details: Dict[str, Any] = Field(default_factory=dict, alias="companyDetails")
    job_details: str = Field("", alias="jobDetails")
    date_posted: Optional[str] = Field(None, alias="datePosted")

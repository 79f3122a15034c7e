"""
Location lookup: free-text location -> Glassdoor search query fragment.
"""
import json
import logging
from typing import List, Optional
from urllib.parse import urlencode, urljoin

from pydantic import ValidationError

from core.errors import FetchError, NoLocationFound
from core.net import HTTPClient
from core.settings import BASE_URL, LOCATION_CANDIDATES
from crawler.models import LocationMatch

logger = logging.getLogger(__name__)

LOCATION_LOOKUP_PATH = "/findPopularLocationAjax.htm"


def select_match(matches: List[LocationMatch], region: Optional[str] = None) -> LocationMatch:
    """
    Pick the candidate for a region hint.

    The first match whose longName contains ", {region} (" wins; without a
    hint, or when no candidate is in the region, the first match is used.
    """
    if not matches:
        raise ValueError("select_match() needs at least one candidate")
    if region:
        for match in matches:
            if match.in_region(region):
                return match
    return matches[0]


def location_fragment(match: LocationMatch, text: str) -> str:
    return "&" + urlencode({
        "locT": match.location_type,
        "locId": match.location_id,
        "locKeyword": text,
    })


class LocationResolver:
    """Resolves location text through the site's location autocomplete."""

    def __init__(
        self,
        http_client: HTTPClient,
        base_url: str = BASE_URL,
        max_candidates: int = LOCATION_CANDIDATES
    ):
        self.http_client = http_client
        self.base_url = base_url
        self.max_candidates = max_candidates

    async def lookup(self, text: str, limit: int) -> List[LocationMatch]:
        """
        Fetch up to `limit` location candidates for the text.

        Malformed candidates are dropped.

        Raises:
            FetchError: the response body is not JSON
        """
        url = urljoin(self.base_url, LOCATION_LOOKUP_PATH)
        try:
            data = await self.http_client.get_json(
                url,
                params={"term": text, "maxLocationsToReturn": limit}
            )
        except json.JSONDecodeError as e:
            raise FetchError(url, 200, f"location lookup did not return JSON ({e})") from e

        if not isinstance(data, list):
            logger.warning(f"[location] Unexpected lookup response for {text!r}: {type(data).__name__}")
            return []

        matches = []
        for item in data:
            try:
                matches.append(LocationMatch.model_validate(item))
            except ValidationError as e:
                logger.warning(f"[location] Ignoring malformed candidate for {text!r}: {e.error_count()} error(s)")
        return matches

    async def resolve(self, text: str, region: Optional[str] = None) -> str:
        """
        Resolve location text (and optional region hint) to a query fragment.

        Empty text means "no location" and returns an empty fragment.

        Raises:
            NoLocationFound: the lookup returned no candidates
        """
        if not text:
            return ""

        # only the first candidate is used unless a region hint must be matched
        limit = self.max_candidates if region else 1
        matches = await self.lookup(text, limit)
        if not matches:
            raise NoLocationFound(text)

        match = select_match(matches, region)
        if region and not match.in_region(region):
            logger.warning(f"[location] No candidate for {text!r} in region {region!r}, using {match.long_name!r}")

        fragment = location_fragment(match, text)
        logger.info(f"[location] Found location: {fragment}")
        return fragment

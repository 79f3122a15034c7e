"""
HTTP client with retries, proxy support and rate-limit status detection
"""
import os
import json
import time
import logging
from typing import Optional, Dict, Tuple, Any
import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from core.document import Document
from core.errors import FetchError, ServiceOverloaded
from core.settings import DEFAULT_UA, RATE_LIMIT_STATUS

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
MAX_RETRIES = 2


class HTTPClient:
    """HTTP client used for every Glassdoor request"""

    def __init__(
        self,
        user_agent: Optional[str] = None,
        proxy: Optional[str] = None,
        overload_status: int = RATE_LIMIT_STATUS,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.user_agent = user_agent or os.getenv("GLASSDOOR_USER_AGENT", DEFAULT_UA)
        self.proxy = proxy
        self.overload_status = overload_status
        self.timeout = httpx.Timeout(DEFAULT_TIMEOUT)
        # Injected transport (tests use httpx.MockTransport)
        self._transport = transport

    def _get_headers(self, custom_headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Build browser-like request headers"""
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,application/json;q=0.8,*/*;q=0.7",
            "Accept-Language": "en-US,en;q=0.5",
            "Connection": "keep-alive",
        }
        if custom_headers:
            headers.update(custom_headers)
        return headers

    def _client(self) -> httpx.AsyncClient:
        kwargs: Dict[str, Any] = {"timeout": self.timeout, "follow_redirects": True}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        elif self.proxy:
            kwargs["proxy"] = self.proxy
        return httpx.AsyncClient(**kwargs)

    @retry(
        stop=stop_after_attempt(MAX_RETRIES + 1),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        reraise=True
    )
    async def fetch(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Tuple[int, Dict[str, str], bytes]:
        """
        GET a URL, retrying timeouts and connection errors.

        Returns:
            (status_code, headers, body)
        """
        request_headers = self._get_headers(headers)

        async with self._client() as client:
            start_time = time.time()
            try:
                response = await client.get(url, headers=request_headers, params=params)
            except httpx.TimeoutException as e:
                logger.error(f"[net] Timeout fetching {url}: {e}")
                raise
            except httpx.ConnectError as e:
                logger.error(f"[net] Connection error fetching {url}: {e}")
                raise

            elapsed_ms = int((time.time() - start_time) * 1000)
            logger.info(f"[net] GET {response.status_code} {response.url} ({len(response.content)} bytes, {elapsed_ms}ms)")
            return response.status_code, dict(response.headers), response.content

    async def get_text(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        GET a URL and return the decoded body.

        Raises:
            ServiceOverloaded: the site answered with its rate-limit status
            FetchError: any other non-2xx response
        """
        status, _, body = await self.fetch(url, headers=headers, params=params)
        if status == self.overload_status:
            raise ServiceOverloaded(url, status)
        if not 200 <= status < 300:
            raise FetchError(url, status)
        return body.decode("utf-8", errors="ignore")

    async def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        text = await self.get_text(url, headers={"Accept": "application/json"}, params=params)
        return json.loads(text)

    async def get_document(self, url: str) -> Document:
        text = await self.get_text(url)
        return Document(text)

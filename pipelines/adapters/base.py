"""Shared HTTP client and the source adapter contract."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, ClassVar, Dict, Optional

import aiohttp

from observability.prometheus_metrics import record_source_fetch
from sources.errors import DocSourceError, DocumentNotFoundError, SourceTransportError
from ..cache import DocCache
from ..html_ingest import html_to_markdown

logger = logging.getLogger(__name__)

Normalizer = Callable[[str], str]


@dataclass
class HttpResponse:
    """Fully read HTTP response."""
    url: str
    status: int
    reason: str
    content_type: str
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpClient:
    """Asynchronous HTTP client shared by every adapter of a service."""

    def __init__(self,
                 user_agent: str = "Org-Docs-MCP-Server",
                 request_timeout: float = 30.0,
                 max_connections: int = 20):
        """Initialize client.

        Args:
            user_agent: User agent sent with every request
            request_timeout: Total request timeout in seconds
            max_connections: Connection pool size
        """
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.max_connections = max_connections
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the HTTP session."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(limit=self.max_connections),
                timeout=aiohttp.ClientTimeout(total=self.request_timeout),
                headers={'User-Agent': self.user_agent}
            )
        return self.session

    async def close(self):
        """Close the client session."""
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        """GET ``url`` and read the body.

        Raises:
            SourceTransportError: on connection failures and timeouts
        """
        session = await self._get_session()
        try:
            async with session.get(url, headers=headers, allow_redirects=True) as response:
                text = await response.text(errors="replace")
                return HttpResponse(
                    url=str(response.url),
                    status=response.status,
                    reason=response.reason or "",
                    content_type=response.headers.get('content-type', ''),
                    text=text
                )
        except asyncio.TimeoutError:
            raise SourceTransportError(f"Timed out fetching {url} after {self.request_timeout:g}s")
        except aiohttp.ClientError as e:
            raise SourceTransportError(f"Failed to fetch {url}: {e}")

    async def head(self, url: str, headers: Optional[Dict[str, str]] = None) -> int:
        """HEAD ``url`` and return the status code."""
        session = await self._get_session()
        async with session.head(url, headers=headers, allow_redirects=True) as response:
            return response.status


class SourceAdapter(ABC):
    """Fetches one kind of source and normalizes it to text.

    Subclasses implement ``cache_key``, ``_fetch_uncached`` and
    ``check_access``; ``fetch`` wraps them with the cache.
    """

    source_type: ClassVar[str] = "unknown"
    # Whether check_access reaches a fixed origin (included in health checks)
    has_fixed_origin: ClassVar[bool] = True

    def __init__(self, cache: DocCache, http: HttpClient, normalize: Normalizer = html_to_markdown):
        self.cache = cache
        self.http = http
        self.normalize = normalize

    @abstractmethod
    def cache_key(self, spec) -> str:
        """Deterministic key over every identifying field of ``spec``."""

    @abstractmethod
    async def _fetch_uncached(self, spec) -> str:
        """Retrieve and normalize content from the origin."""

    @abstractmethod
    async def check_access(self) -> bool:
        """Lightweight reachability check; never raises."""

    async def fetch(self, spec) -> str:
        """Return normalized text for ``spec``, from the cache when fresh."""
        key = self.cache_key(spec)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        start_time = time.time()
        try:
            content = await self._fetch_uncached(spec)
        except DocSourceError as e:
            record_source_fetch(self.source_type, time.time() - start_time, error=True)
            logger.warning(f"Fetch failed for {key}: {e}")
            raise

        record_source_fetch(self.source_type, time.time() - start_time)
        self.cache.set(key, content)
        logger.info(f"Fetched {key} ({len(content)} chars)")
        return content

    async def _get_page(self, url: str, not_found_message: str, error_label: str,
                        accept: str = "text/html") -> HttpResponse:
        """GET a page, mapping 404 to not-found and other failures to transport errors."""
        logger.debug(f"GET {url}")
        response = await self.http.get(url, headers={'Accept': accept})

        if response.status == 404:
            raise DocumentNotFoundError(not_found_message)
        if not response.ok:
            raise SourceTransportError(
                f"{error_label} error: {response.status} {response.reason}".rstrip(),
                status=response.status
            )
        return response

    async def _check_url(self, url: str) -> bool:
        try:
            status = await self.http.head(url)
            return 200 <= status < 300
        except Exception as e:
            logger.debug(f"Access check failed for {url}: {e}")
            return False

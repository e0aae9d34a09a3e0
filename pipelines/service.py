"""Documentation service: the components wired together for one process.

Nothing here is a module-level singleton; servers and tests construct
their own ``DocsService`` and close it when done.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from config.settings import Settings
from sources.catalog import Catalog
from sources.errors import TopicNotFoundError
from sources.models import DocumentDescriptor
from sources.user_docs import UserDocSource
from .adapters import HttpClient, URLAdapter, UrlPreview
from .cache import DocCache
from .router import SourceRouter
from .search import SearchEngine, SearchResult

logger = logging.getLogger(__name__)

MAX_SEARCH_LIMIT = 20


@dataclass
class RetrievedDocument:
    descriptor: DocumentDescriptor
    content: str


class DocsService:
    """Catalog, cache, router and search engine for one process."""

    def __init__(self, catalog: Catalog, router: SourceRouter, cache: DocCache,
                 http: Optional[HttpClient] = None, search_concurrency: int = 4):
        self.catalog = catalog
        self.router = router
        self.cache = cache
        self.http = http
        self.search_engine = SearchEngine(router, catalog.all, concurrency=search_concurrency)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> 'DocsService':
        settings = settings or Settings.from_env()
        cache = DocCache(ttl_seconds=settings.cache_ttl_seconds)
        http = HttpClient(user_agent=settings.user_agent, request_timeout=settings.request_timeout)
        router = SourceRouter.from_settings(settings, cache, http)
        catalog = Catalog.from_files(settings.catalog_path, settings.user_docs_path)
        logger.info(f"Docs service ready: catalog={settings.catalog_path}, "
                    f"user_docs={settings.user_docs_path}, cache_ttl={settings.cache_ttl_seconds:g}s")
        return cls(catalog, router, cache, http=http, search_concurrency=settings.search_concurrency)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self.http is not None:
            await self.http.close()

    def list_topics(self) -> Dict[str, List[DocumentDescriptor]]:
        """Descriptors grouped by category, in catalog order."""
        grouped: Dict[str, List[DocumentDescriptor]] = {"internal": [], "public": [], "user": []}
        for descriptor in self.catalog.all():
            grouped[descriptor.category].append(descriptor)
        return grouped

    async def get_doc(self, topic: str) -> RetrievedDocument:
        """Fetch one document by topic.

        Raises:
            TopicNotFoundError: the topic is not in the catalog
            DocSourceError: the fetch failed; never swallowed here
        """
        descriptor = self.catalog.get(topic)
        if descriptor is None:
            raise TopicNotFoundError(topic, self.catalog.topics())
        content = await self.router.fetch_doc(descriptor)
        return RetrievedDocument(descriptor=descriptor, content=content)

    async def search(self, query: str, limit: int = 5) -> List[SearchResult]:
        return await self.search_engine.search(query, min(limit, MAX_SEARCH_LIMIT))

    def _url_adapter(self) -> URLAdapter:
        adapter = self.router.adapter_for("url")
        if not isinstance(adapter, URLAdapter):
            raise TypeError("The url source kind is not served by a URLAdapter")
        return adapter

    async def preview_url(self, url: str) -> UrlPreview:
        return await self._url_adapter().preview(url)

    def add_user_doc(self, topic: str, title: str, description: str, url: str) -> UserDocSource:
        return self.catalog.add_user_doc(topic, title, description, url)

    def remove_user_doc(self, topic: str) -> bool:
        """Remove a user doc and drop its cached body."""
        descriptor = self.catalog.get(topic)
        removed = self.catalog.remove_user_doc(topic)
        if removed and descriptor is not None and descriptor.category == "user":
            adapter = self.router.adapters.get(descriptor.source.type)
            if adapter is not None:
                self.cache.invalidate(adapter.cache_key(descriptor.source))
        return removed

    def list_user_docs(self) -> List[UserDocSource]:
        return self.catalog.list_user_docs()

    async def check_health(self) -> Dict[str, bool]:
        return await self.router.check_source_health()

"""Source router: one entry point for fetching any catalog document."""

import asyncio
import logging
from typing import Dict, Mapping

from config.settings import Settings
from sources.errors import UnknownSourceKindError
from sources.models import DocumentDescriptor
from .adapters import (
    GCPAdapter,
    GitHubAdapter,
    HttpClient,
    SourceAdapter,
    TektonAdapter,
    TerraformAdapter,
    URLAdapter
)
from .cache import DocCache

logger = logging.getLogger(__name__)


class SourceRouter:
    """Dispatches descriptors to the adapter registered for their source kind."""

    def __init__(self, adapters: Mapping[str, SourceAdapter]):
        self.adapters: Dict[str, SourceAdapter] = dict(adapters)

    @classmethod
    def from_settings(cls, settings: Settings, cache: DocCache, http: HttpClient) -> 'SourceRouter':
        """Wire the adapter for every supported source kind."""
        adapters = [
            GitHubAdapter(
                cache, http,
                token=settings.github_token,
                api_base=settings.github_api_base,
                gh_binary=settings.gh_binary
            ),
            GCPAdapter(cache, http),
            TerraformAdapter(cache, http),
            TektonAdapter(cache, http),
            URLAdapter(cache, http),
        ]
        return cls({adapter.source_type: adapter for adapter in adapters})

    def adapter_for(self, kind: str) -> SourceAdapter:
        adapter = self.adapters.get(kind)
        if adapter is None:
            raise UnknownSourceKindError(kind)
        return adapter

    async def fetch_doc(self, descriptor: DocumentDescriptor) -> str:
        """Fetch normalized text for ``descriptor``.

        Adapter errors propagate unchanged.
        """
        source = descriptor.source
        adapter = self.adapter_for(getattr(source, 'type', None))
        logger.debug(f"Routing '{descriptor.topic}' to {adapter.source_type} adapter")
        return await adapter.fetch(source)

    async def check_source_health(self) -> Dict[str, bool]:
        """Check every fixed-origin adapter concurrently."""
        adapters = [a for a in self.adapters.values() if a.has_fixed_origin]
        results = await asyncio.gather(*(a.check_access() for a in adapters))
        health = {adapter.source_type: bool(ok) for adapter, ok in zip(adapters, results)}
        logger.info(f"Source health: {health}")
        return health

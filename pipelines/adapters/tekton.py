"""Tekton documentation source adapter."""

from sources.models import TektonSource
from ..html_ingest import extract_main_content
from .base import SourceAdapter

TEKTON_DOCS_BASE = "https://tekton.dev/docs"

CONTENT_SELECTORS = (
    "main",
    "article",
    "div[class*=content]",
)


class TektonAdapter(SourceAdapter):
    source_type = "tekton"

    def cache_key(self, spec: TektonSource) -> str:
        return f"tekton:{spec.doc_path}"

    async def _fetch_uncached(self, spec: TektonSource) -> str:
        url = f"{TEKTON_DOCS_BASE}/{spec.doc_path.strip('/')}/"
        response = await self._get_page(
            url,
            not_found_message=f"Tekton documentation not found: {spec.doc_path}",
            error_label="Tekton docs"
        )
        return self.normalize(extract_main_content(response.text, CONTENT_SELECTORS))

    async def check_access(self) -> bool:
        return await self._check_url(TEKTON_DOCS_BASE)

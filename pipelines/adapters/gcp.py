"""GCP documentation source adapter.

Fetches pages from cloud.google.com and converts them to Markdown.
"""

from sources.models import GCPSource
from ..html_ingest import extract_main_content
from .base import SourceAdapter

GCP_DOCS_BASE = "https://cloud.google.com"

CONTENT_SELECTORS = (
    "article.devsite-article",
    "div.devsite-article-body",
    "main",
)


class GCPAdapter(SourceAdapter):
    source_type = "gcp"

    def cache_key(self, spec: GCPSource) -> str:
        return f"gcp:{spec.product}:{spec.page}"

    async def _fetch_uncached(self, spec: GCPSource) -> str:
        url = f"{GCP_DOCS_BASE}/{spec.product}/{spec.page.lstrip('/')}"
        response = await self._get_page(
            url,
            not_found_message=f"GCP documentation not found: {spec.product}/{spec.page}",
            error_label="GCP docs"
        )
        return self.normalize(extract_main_content(response.text, CONTENT_SELECTORS))

    async def check_access(self) -> bool:
        return await self._check_url(f"{GCP_DOCS_BASE}/storage/docs")

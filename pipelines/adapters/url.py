"""Generic URL source adapter.

Fetches any URL; HTML is converted to Markdown, other text passes through.
"""

import re
from dataclasses import dataclass
from typing import Optional

from sources.models import URLSource
from ..html_ingest import extract_main_content, extract_meta_description, extract_title
from .base import HttpResponse, SourceAdapter

ACCEPT = "text/html, text/markdown, text/plain, */*"
PREVIEW_CHARS = 500

CONTENT_SELECTORS = (
    "main",
    "article",
    "[role=main]",
)


@dataclass
class UrlPreview:
    """What a URL would contribute if added as a user doc."""
    url: str
    title: str
    description: Optional[str]
    content_preview: str


def _is_html(response: HttpResponse) -> bool:
    return "text/html" in response.content_type.lower()


def _truncate(text: str, limit: int = PREVIEW_CHARS) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


class URLAdapter(SourceAdapter):
    source_type = "url"
    has_fixed_origin = False

    def cache_key(self, spec: URLSource) -> str:
        return f"url:{spec.url}"

    async def _fetch_page(self, url: str) -> HttpResponse:
        return await self._get_page(
            url,
            not_found_message=f"Document not found at {url}",
            error_label=f"Failed to fetch {url}",
            accept=ACCEPT
        )

    async def _fetch_uncached(self, spec: URLSource) -> str:
        response = await self._fetch_page(spec.url)
        if _is_html(response):
            return self.normalize(extract_main_content(response.text, CONTENT_SELECTORS))
        return response.text

    async def preview(self, url: str) -> UrlPreview:
        """Title, description and the start of the content of ``url``.

        Not cached: a preview always reflects the live page.
        """
        response = await self._fetch_page(url)
        title = "Untitled Document"
        description = None

        if _is_html(response):
            title = extract_title(response.text) or title
            description = extract_meta_description(response.text)
            content = self.normalize(extract_main_content(response.text, CONTENT_SELECTORS))
        else:
            content = response.text
            first_line = content.lstrip().split("\n", 1)[0].strip() if content.strip() else ""
            if first_line.startswith("#"):
                title = first_line.lstrip("#").strip() or title

        return UrlPreview(
            url=url,
            title=re.sub(r"\s+", " ", title).strip(),
            description=description,
            content_preview=_truncate(content).strip()
        )

    async def check_access(self, url: Optional[str] = None) -> bool:
        """Check ``url`` when given; with no URL there is nothing to reach."""
        if url is None:
            return True
        return await self._check_url(url)

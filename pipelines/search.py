"""Full-text search across every catalog document.

Documents are fetched through the router (and so through the cache) on
each query, scored by term overlap, and returned with an excerpt around
the first match.
"""

import asyncio
import logging
import re
import time
from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, List, Optional, Sequence

from observability.prometheus_metrics import record_search_metrics
from sources.models import DocumentDescriptor
from .router import SourceRouter

logger = logging.getLogger(__name__)

TITLE_BOOST = 10
TOPIC_BOOST = 5
DESCRIPTION_BOOST = 3

CATEGORY_BOOST = {
    "internal": 1.2,
    "user": 1.1,
    "public": 1.0,
}

EXCERPT_CONTEXT_CHARS = 150
ELLIPSIS = "..."


@dataclass
class SearchResult:
    """One ranked document for a query."""
    topic: str
    title: str
    category: str
    excerpt: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def tokenize(query: str) -> List[str]:
    """Lowercased whitespace-separated terms."""
    return query.lower().split()


def score_document(terms: Sequence[str], body: str, descriptor: DocumentDescriptor) -> float:
    """Relevance of ``body`` and its descriptor metadata for ``terms``.

    Per term: literal occurrences in the body, plus fixed boosts when the
    title, topic or description contain it. The sum is weighted by the
    descriptor's priority and category.
    """
    body_lower = body.lower()
    title = descriptor.title.lower()
    topic = descriptor.topic.lower()
    description = descriptor.description.lower()

    score = 0.0
    for term in terms:
        score += body_lower.count(term)
        if term in title:
            score += TITLE_BOOST
        if term in topic:
            score += TOPIC_BOOST
        if term in description:
            score += DESCRIPTION_BOOST

    score *= descriptor.priority
    score *= CATEGORY_BOOST.get(descriptor.category, 1.0)
    return score


def _excerpt_window(body: str, lo: int, hi: int) -> str:
    lo = max(0, lo)
    hi = min(len(body), hi)

    excerpt = re.sub(r"\s+", " ", body[lo:hi]).strip()
    if lo > 0:
        excerpt = ELLIPSIS + excerpt
    if hi < len(body):
        excerpt = excerpt + ELLIPSIS
    return excerpt


def _find(body: str, needle: str) -> Optional[int]:
    """Start of the first case-insensitive match, as an index into ``body`` itself."""
    if not needle:
        return None
    match = re.search(re.escape(needle), body, re.IGNORECASE)
    return match.start() if match else None


def extract_excerpt(body: str, query: str, context_chars: int = EXCERPT_CONTEXT_CHARS) -> str:
    """Excerpt of ``context_chars`` either side of the start of the first match.

    The whole query is tried first, then its first term; with no match at
    all the start of the body is used.
    """
    index = _find(body, query.strip())
    if index is None:
        terms = tokenize(query)
        index = _find(body, terms[0]) if terms else None

    if index is None:
        return _excerpt_window(body, 0, context_chars * 2)

    return _excerpt_window(body, index - context_chars, index + context_chars)


CatalogAccessor = Callable[[], Sequence[DocumentDescriptor]]


class SearchEngine:
    """Ranks catalog documents against free-text queries."""

    def __init__(self, router: SourceRouter, catalog: CatalogAccessor, concurrency: int = 4):
        """Initialize search engine.

        Args:
            router: Router used to fetch document bodies
            catalog: Returns the current descriptor snapshot on each call
            concurrency: Maximum fetches in flight during one search
        """
        self.router = router
        self.catalog = catalog
        self.concurrency = max(1, concurrency)

    async def _fetch_body(self, descriptor: DocumentDescriptor,
                          semaphore: asyncio.Semaphore) -> Optional[str]:
        async with semaphore:
            try:
                return await self.router.fetch_doc(descriptor)
            except Exception as e:
                logger.warning(f"Failed to search {descriptor.topic}: {e}")
                return None

    async def search(self, query: str, limit: int = 5) -> List[SearchResult]:
        """Return up to ``limit`` results ordered by descending score.

        Equal scores keep catalog order. Documents that fail to fetch are
        skipped.
        """
        start_time = time.time()
        terms = tokenize(query)
        if not terms or limit < 1:
            return []

        try:
            descriptors = list(self.catalog())
            semaphore = asyncio.Semaphore(self.concurrency)
            bodies = await asyncio.gather(*(self._fetch_body(d, semaphore) for d in descriptors))
        except Exception as e:
            record_search_metrics(time.time() - start_time, 0, error=True)
            logger.error(f"Search '{query}' failed: {e}")
            raise

        results: List[SearchResult] = []
        skipped = 0
        for descriptor, body in zip(descriptors, bodies):
            if body is None:
                skipped += 1
                continue

            score = score_document(terms, body, descriptor)
            if score <= 0:
                continue

            results.append(SearchResult(
                topic=descriptor.topic,
                title=descriptor.title,
                category=descriptor.category,
                excerpt=extract_excerpt(body, query),
                score=score
            ))

        # sorted() is stable, so ties stay in catalog order
        ranked = sorted(results, key=lambda r: r.score, reverse=True)[:limit]

        duration = time.time() - start_time
        record_search_metrics(duration, len(ranked), skipped=skipped)
        logger.info(f"Search '{query}': {len(ranked)} results from {len(descriptors)} documents "
                    f"({skipped} skipped) in {duration:.2f}s")
        return ranked

"""Pipelines package for orgdocs.

Provides the document cache, source adapters, routing, search and the service facade.
"""

from .cache import DocCache, CacheEntry
from .html_ingest import extract_main_content, html_to_markdown, html_to_text
from .adapters import (
    HttpClient,
    HttpResponse,
    SourceAdapter,
    GitHubAdapter,
    GitHubAuthPath,
    GCPAdapter,
    TerraformAdapter,
    TektonAdapter,
    URLAdapter,
    UrlPreview,
    select_auth_path
)
from .router import SourceRouter
from .search import SearchEngine, SearchResult, score_document, extract_excerpt, tokenize
from .service import DocsService, RetrievedDocument

__all__ = [
    # Cache
    'DocCache',
    'CacheEntry',

    # Normalization
    'extract_main_content',
    'html_to_markdown',
    'html_to_text',

    # Adapters
    'HttpClient',
    'HttpResponse',
    'SourceAdapter',
    'GitHubAdapter',
    'GitHubAuthPath',
    'GCPAdapter',
    'TerraformAdapter',
    'TektonAdapter',
    'URLAdapter',
    'UrlPreview',
    'select_auth_path',

    # Routing and search
    'SourceRouter',
    'SearchEngine',
    'SearchResult',
    'score_document',
    'extract_excerpt',
    'tokenize',

    # Service
    'DocsService',
    'RetrievedDocument'
]

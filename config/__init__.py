"""Configuration module for orgdocs.

Provides environment-driven settings for the cache, HTTP client, catalog and logging.
"""

from .settings import (
    Settings,
    DEFAULT_CATALOG_PATH,
    DEFAULT_USER_DOCS_PATH
)

__all__ = [
    'Settings',
    'DEFAULT_CATALOG_PATH',
    'DEFAULT_USER_DOCS_PATH'
]

"""Runtime settings for orgdocs.

All values can be overridden through environment variables so the MCP
server can be configured from the client's launch configuration.
"""

import os
import logging
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parents[1] / "sources" / "builtin_sources.yaml"
DEFAULT_USER_DOCS_PATH = Path.home() / ".config" / "orgdocs" / "docs.json"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Process-wide configuration."""
    # Cache
    cache_ttl_seconds: float = Field(default=1800.0, gt=0, description="Document cache time-to-live in seconds")

    # HTTP
    request_timeout: float = Field(default=30.0, gt=0, description="Total timeout per HTTP request in seconds")
    user_agent: str = Field(default="Org-Docs-MCP-Server", description="User-Agent sent to every origin")

    # GitHub
    github_token: Optional[str] = Field(default=None, description="Bearer token used when the gh CLI is unavailable")
    github_api_base: str = Field(default="https://api.github.com", description="GitHub REST API base URL")
    gh_binary: str = Field(default="gh", description="gh CLI executable")

    # Catalog
    catalog_path: Path = Field(default=DEFAULT_CATALOG_PATH, description="Built-in catalog YAML file")
    user_docs_path: Path = Field(default=DEFAULT_USER_DOCS_PATH, description="User-added documents JSON file")

    # Search
    search_concurrency: int = Field(default=4, ge=1, description="Concurrent fetches during a search")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")
    log_file: Optional[str] = Field(default=None, description="Optional JSON log file")

    @classmethod
    def from_env(cls) -> 'Settings':
        """Create settings from environment variables."""
        return cls(
            cache_ttl_seconds=float(os.getenv('ORGDOCS_CACHE_TTL_SECONDS', '1800')),
            request_timeout=float(os.getenv('ORGDOCS_REQUEST_TIMEOUT', '30')),
            user_agent=os.getenv('ORGDOCS_USER_AGENT', 'Org-Docs-MCP-Server'),
            github_token=os.getenv('GITHUB_TOKEN') or None,
            github_api_base=os.getenv('ORGDOCS_GITHUB_API_BASE', 'https://api.github.com').rstrip('/'),
            gh_binary=os.getenv('ORGDOCS_GH_BINARY', 'gh'),
            catalog_path=Path(os.getenv('ORGDOCS_CATALOG_PATH', str(DEFAULT_CATALOG_PATH))).expanduser(),
            user_docs_path=Path(os.getenv('ORGDOCS_USER_DOCS_PATH', str(DEFAULT_USER_DOCS_PATH))).expanduser(),
            search_concurrency=int(os.getenv('ORGDOCS_SEARCH_CONCURRENCY', '4')),
            log_level=os.getenv('ORGDOCS_LOG_LEVEL', 'INFO'),
            log_json=_env_bool('ORGDOCS_LOG_JSON', False),
            log_file=os.getenv('ORGDOCS_LOG_FILE') or None,
        )

"""GitHub source adapter.

Fetches raw markdown files from GitHub repositories.

Auth priority, re-evaluated on every fetch:
1. ``gh`` CLI, when ``gh auth status`` succeeds
2. ``GITHUB_TOKEN`` bearer token against the REST API
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from sources.errors import (
    AuthenticationRequiredError,
    DocumentNotFoundError,
    SourceTransportError
)
from sources.models import GitHubSource
from ..cache import DocCache
from .base import HttpClient, SourceAdapter

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"
RAW_MEDIA_TYPE = "application/vnd.github.v3.raw"

AUTH_REQUIRED_MESSAGE = (
    "GitHub authentication required. Either:\n"
    "  1. Install and authenticate gh CLI: gh auth login\n"
    "  2. Set GITHUB_TOKEN environment variable"
)


@dataclass
class CommandResult:
    returncode: int
    stdout: str
    stderr: str


CommandRunner = Callable[[List[str]], Awaitable[CommandResult]]


async def run_command(args: List[str]) -> CommandResult:
    """Run a command without a shell and capture its output."""
    proc = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE
    )
    stdout, stderr = await proc.communicate()
    return CommandResult(
        returncode=proc.returncode,
        stdout=stdout.decode('utf-8', errors='replace'),
        stderr=stderr.decode('utf-8', errors='replace')
    )


class GitHubAuthPath(str, Enum):
    """How a GitHub fetch authenticates."""
    GH_CLI = "gh_cli"
    TOKEN = "token"
    NONE = "none"


def select_auth_path(gh_cli_ready: bool, token: Optional[str]) -> GitHubAuthPath:
    """Pick the acquisition path from the detected state; no I/O."""
    if gh_cli_ready:
        return GitHubAuthPath.GH_CLI
    if token:
        return GitHubAuthPath.TOKEN
    return GitHubAuthPath.NONE


def contents_path(source: GitHubSource) -> str:
    return f"/repos/{source.repo}/contents/{source.path.lstrip('/')}?ref={source.branch}"


class GitHubAdapter(SourceAdapter):
    """Markdown files from GitHub, returned as-is."""

    source_type = "github"

    def __init__(self, cache: DocCache, http: HttpClient,
                 token: Optional[str] = None,
                 api_base: str = GITHUB_API_BASE,
                 gh_binary: str = "gh",
                 runner: CommandRunner = run_command):
        super().__init__(cache, http)
        self.token = token
        self.api_base = api_base.rstrip('/')
        self.gh_binary = gh_binary
        self.runner = runner

    def cache_key(self, spec: GitHubSource) -> str:
        return f"github:{spec.repo}:{spec.path}:{spec.branch}"

    async def gh_cli_ready(self) -> bool:
        """True when the gh CLI is installed and authenticated."""
        try:
            result = await self.runner([self.gh_binary, "auth", "status"])
        except OSError as e:
            logger.debug(f"gh CLI unavailable: {e}")
            return False
        return result.returncode == 0

    async def resolve_auth_path(self) -> GitHubAuthPath:
        return select_auth_path(await self.gh_cli_ready(), self.token)

    async def _fetch_uncached(self, spec: GitHubSource) -> str:
        auth_path = await self.resolve_auth_path()
        logger.debug(f"Fetching {spec.repo}/{spec.path} via {auth_path.value}")

        if auth_path is GitHubAuthPath.GH_CLI:
            return await self._fetch_with_gh_cli(spec)
        if auth_path is GitHubAuthPath.TOKEN:
            return await self._fetch_with_token(spec, self.token)
        raise AuthenticationRequiredError(AUTH_REQUIRED_MESSAGE)

    async def _fetch_with_gh_cli(self, spec: GitHubSource) -> str:
        try:
            result = await self.runner([
                self.gh_binary, "api", contents_path(spec),
                "-H", f"Accept: {RAW_MEDIA_TYPE}"
            ])
        except OSError as e:
            raise SourceTransportError(f"gh CLI error: {e}")

        if result.returncode != 0:
            stderr = result.stderr.strip()
            if "404" in stderr or "Not Found" in stderr:
                raise DocumentNotFoundError(f"Document not found: {spec.repo}/{spec.path}")
            raise SourceTransportError(f"gh CLI error: {stderr}")

        return result.stdout

    async def _fetch_with_token(self, spec: GitHubSource, token: str) -> str:
        url = f"{self.api_base}{contents_path(spec)}"
        response = await self.http.get(url, headers={
            'Accept': RAW_MEDIA_TYPE,
            'Authorization': f"Bearer {token}"
        })

        if response.status == 404:
            raise DocumentNotFoundError(f"Document not found: {spec.repo}/{spec.path}")
        if response.status == 403:
            raise SourceTransportError("GitHub API rate limit exceeded.", status=403)
        if not response.ok:
            raise SourceTransportError(
                f"GitHub API error: {response.status} {response.reason}".rstrip(),
                status=response.status
            )
        return response.text

    async def check_access(self) -> bool:
        try:
            auth_path = await self.resolve_auth_path()
            if auth_path is GitHubAuthPath.GH_CLI:
                return True
            if auth_path is GitHubAuthPath.NONE:
                return False

            response = await self.http.get(
                f"{self.api_base}/rate_limit",
                headers={'Authorization': f"Bearer {self.token}"}
            )
            return response.ok
        except Exception as e:
            logger.debug(f"GitHub access check failed: {e}")
            return False

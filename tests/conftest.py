import pytest
from typing import Dict, List, Optional, Tuple

from pipelines.adapters.base import HttpResponse, SourceAdapter
from pipelines.adapters.github import CommandResult
from pipelines.cache import DocCache
from sources.errors import DocumentNotFoundError
from sources.models import DocumentDescriptor, URLSource


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_response(url: str, text: str = "", status: int = 200,
                  content_type: str = "text/html; charset=utf-8", reason: str = "OK") -> HttpResponse:
    return HttpResponse(url=url, status=status, reason=reason, content_type=content_type, text=text)


class FakeHttpClient:
    """Stands in for HttpClient; unknown URLs answer 404."""

    def __init__(self, responses: Optional[Dict[str, object]] = None, head_status: int = 200,
                 head_error: Optional[Exception] = None):
        self.responses = dict(responses or {})
        self.head_status = head_status
        self.head_error = head_error
        self.get_calls: List[Tuple[str, Optional[Dict[str, str]]]] = []
        self.head_calls: List[str] = []

    async def get(self, url, headers=None):
        self.get_calls.append((url, headers))
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        if response is None:
            return make_response(url, status=404, reason="Not Found")
        return response

    async def head(self, url, headers=None):
        self.head_calls.append(url)
        if self.head_error is not None:
            raise self.head_error
        return self.head_status

    async def close(self):
        pass


class FakeRunner:
    """Stands in for the gh CLI."""

    def __init__(self, auth_ok: bool = True, api_result: Optional[CommandResult] = None,
                 missing: bool = False):
        self.auth_ok = auth_ok
        self.api_result = api_result or CommandResult(returncode=0, stdout="# From gh\n", stderr="")
        self.missing = missing
        self.calls: List[List[str]] = []

    async def __call__(self, args):
        self.calls.append(list(args))
        if self.missing:
            raise FileNotFoundError(args[0])
        if args[1:3] == ["auth", "status"]:
            return CommandResult(returncode=0 if self.auth_ok else 1, stdout="",
                                 stderr="" if self.auth_ok else "You are not logged into any GitHub hosts")
        return self.api_result

    def api_calls(self):
        return [c for c in self.calls if c[1] == "api"]


class StubAdapter(SourceAdapter):
    """Serves bodies from a dict keyed by source spec."""

    def __init__(self, source_type: str, cache: DocCache, bodies=None, errors=None,
                 reachable: bool = True, fixed_origin: bool = True):
        super().__init__(cache, http=None)
        self.source_type = source_type
        self.has_fixed_origin = fixed_origin
        self.bodies = dict(bodies or {})
        self.errors = dict(errors or {})
        self.reachable = reachable
        self.calls = []

    def cache_key(self, spec) -> str:
        return f"{self.source_type}:{sorted(spec.to_dict().items())}"

    async def _fetch_uncached(self, spec) -> str:
        self.calls.append(spec)
        if spec in self.errors:
            raise self.errors[spec]
        if spec not in self.bodies:
            raise DocumentNotFoundError(f"No stub body for {spec}")
        return self.bodies[spec]

    async def check_access(self) -> bool:
        if isinstance(self.reachable, Exception):
            raise self.reachable
        return self.reachable


def url_descriptor(topic: str, body_url: Optional[str] = None, title: str = "Untitled",
                   description: str = "", category: str = "public",
                   priority: float = 1.0) -> DocumentDescriptor:
    return DocumentDescriptor(
        topic=topic,
        title=title,
        description=description,
        category=category,
        priority=priority,
        source=URLSource(url=body_url or f"https://docs.example.com/{topic}")
    )


def identity(html: str) -> str:
    return html


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return DocCache(ttl_seconds=1800, clock=clock)

import pytest

from config.settings import Settings
from pipelines.adapters import GCPAdapter, GitHubAdapter, TektonAdapter, TerraformAdapter, URLAdapter
from pipelines.router import SourceRouter
from sources.errors import DocumentNotFoundError, UnknownSourceKindError
from sources.models import DocumentDescriptor, GCPSource, GitHubSource, TektonSource, TerraformSource, URLSource

from conftest import FakeHttpClient, StubAdapter


def _descriptor(topic, source):
    return DocumentDescriptor(topic=topic, title=topic, description="", category="public",
                              priority=1.0, source=source)


SOURCES = {
    "github": GitHubSource(repo="org/repo", path="README.md"),
    "gcp": GCPSource(product="storage", page="docs/buckets"),
    "terraform": TerraformSource(provider="google", resource="google_project"),
    "tekton": TektonSource(doc_path="pipelines/tasks"),
    "url": URLSource(url="https://docs.example.com/a"),
}


@pytest.fixture
def router(cache):
    adapters = {
        kind: StubAdapter(kind, cache, bodies={spec: f"{kind} body"}, fixed_origin=(kind != "url"))
        for kind, spec in SOURCES.items()
    }
    return SourceRouter(adapters)


class TestSourceRouter:
    def test_from_settings_wires_every_kind(self, cache):
        router = SourceRouter.from_settings(Settings(github_token="t"), cache, FakeHttpClient())

        assert set(router.adapters) == {"github", "gcp", "terraform", "tekton", "url"}
        assert isinstance(router.adapters["github"], GitHubAdapter)
        assert router.adapters["github"].token == "t"
        assert isinstance(router.adapters["gcp"], GCPAdapter)
        assert isinstance(router.adapters["terraform"], TerraformAdapter)
        assert isinstance(router.adapters["tekton"], TektonAdapter)
        assert isinstance(router.adapters["url"], URLAdapter)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", sorted(SOURCES))
    async def test_dispatches_on_source_kind(self, router, kind):
        content = await router.fetch_doc(_descriptor(f"doc-{kind}", SOURCES[kind]))

        assert content == f"{kind} body"
        assert router.adapters[kind].calls == [SOURCES[kind]]

    @pytest.mark.asyncio
    async def test_unregistered_kind(self, cache):
        router = SourceRouter({"url": StubAdapter("url", cache)})

        with pytest.raises(UnknownSourceKindError, match="Unknown source type: gcp"):
            await router.fetch_doc(_descriptor("gcp-doc", SOURCES["gcp"]))

    def test_adapter_for_unknown(self, router):
        with pytest.raises(UnknownSourceKindError):
            router.adapter_for("svn")

    @pytest.mark.asyncio
    async def test_adapter_errors_propagate(self, cache):
        spec = SOURCES["gcp"]
        router = SourceRouter({"gcp": StubAdapter("gcp", cache, errors={spec: DocumentNotFoundError("gone")})})

        with pytest.raises(DocumentNotFoundError, match="gone"):
            await router.fetch_doc(_descriptor("gcp-doc", spec))

    @pytest.mark.asyncio
    async def test_health_covers_fixed_origins(self, router):
        router.adapters["tekton"].reachable = False

        health = await router.check_source_health()

        assert health == {"github": True, "gcp": True, "terraform": True, "tekton": False}

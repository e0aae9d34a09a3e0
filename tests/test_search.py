"""Search ranking, excerpts and failure isolation."""

import pytest

from observability.prometheus_metrics import orgdocs_registry
from pipelines.router import SourceRouter
from pipelines.search import SearchEngine, extract_excerpt, score_document, tokenize
from sources.errors import DocumentNotFoundError, SourceTransportError

from conftest import StubAdapter, url_descriptor


def _engine(cache, docs, errors=None, concurrency=4):
    """docs: list of (descriptor, body) in catalog order."""
    bodies = {d.source: body for d, body in docs}
    adapter = StubAdapter("url", cache, bodies=bodies, errors=errors or {}, fixed_origin=False)
    descriptors = [d for d, _ in docs]
    return SearchEngine(SourceRouter({"url": adapter}), lambda: descriptors, concurrency=concurrency), adapter


def _search_requests(status):
    return orgdocs_registry.get_sample_value('orgdocs_search_requests_total', {'status': status}) or 0.0


NAMING_BODY = "Naming rules apply everywhere. Every naming choice matters, so check naming early."


class TestScoring:
    def test_tokenize(self):
        assert tokenize("  GCS  Bucket\tLabels ") == ["gcs", "bucket", "labels"]
        assert tokenize("   ") == []

    def test_body_count_plus_title_boost(self):
        descriptor = url_descriptor("standards", title="Resource Naming Standards",
                                    category="internal", priority=1.0)
        assert score_document(["naming"], NAMING_BODY, descriptor) == pytest.approx(15.6)

    def test_topic_boost_applies(self):
        descriptor = url_descriptor("naming-standards", title="Resource Naming Standards",
                                    category="internal", priority=1.0)
        assert score_document(["naming"], NAMING_BODY, descriptor) == pytest.approx((3 + 10 + 5) * 1.2)

    def test_description_boost_applies(self):
        descriptor = url_descriptor("doc", description="Naming conventions", category="public")
        assert score_document(["naming"], "", descriptor) == pytest.approx(3.0)

    def test_priority_and_category_weighting(self):
        body = "label label"
        public = url_descriptor("a", category="public", priority=0.5)
        user = url_descriptor("b", category="user", priority=0.5)
        assert score_document(["label"], body, public) == pytest.approx(1.0)
        assert score_document(["label"], body, user) == pytest.approx(1.1)

    def test_counts_substring_occurrences(self):
        descriptor = url_descriptor("doc")
        assert score_document(["bucket"], "buckets and bucket_name", descriptor) == pytest.approx(2.0)

    def test_terms_are_matched_literally(self):
        descriptor = url_descriptor("doc")
        assert score_document(["a.c"], "abc a.c", descriptor) == pytest.approx(1.0)
        assert score_document(["(unclosed"], "text (unclosed", descriptor) == pytest.approx(1.0)

    def test_no_match_scores_zero(self):
        assert score_document(["kubernetes"], "nothing relevant", url_descriptor("doc")) == 0


class TestExcerpt:
    def test_full_query_match_with_ellipses(self):
        body = ("x" * 200) + " all teams must set bucket labels before creation " + ("y" * 200)
        excerpt = extract_excerpt(body, "bucket labels")

        assert "bucket labels" in excerpt
        assert excerpt.startswith("...")
        assert excerpt.endswith("...")

    def test_match_at_start_has_no_leading_ellipsis(self):
        body = "bucket labels are required. " + ("z" * 400)
        excerpt = extract_excerpt(body, "bucket labels")

        assert excerpt.startswith("bucket labels")
        assert excerpt.endswith("...")

    def test_short_body_is_not_clipped(self):
        excerpt = extract_excerpt("Set bucket labels.", "bucket labels")
        assert excerpt == "Set bucket labels."

    def test_case_insensitive_match_keeps_original_case(self):
        excerpt = extract_excerpt("Always set Bucket Labels.", "bucket labels")
        assert "Bucket Labels" in excerpt

    def test_falls_back_to_first_term(self):
        body = ("a" * 300) + " bucket naming " + ("b" * 300)
        excerpt = extract_excerpt(body, "bucket labels")

        assert "bucket naming" in excerpt
        assert excerpt.startswith("...")

    def test_falls_back_to_body_start(self):
        body = "w" * 1000
        excerpt = extract_excerpt(body, "missing")

        assert excerpt == "w" * 300 + "..."

    def test_whitespace_is_collapsed(self):
        excerpt = extract_excerpt("Set\n\n   bucket    labels\tearly.", "bucket")
        assert excerpt == "Set bucket labels early."

    def test_context_window_size(self):
        body = ("a" * 500) + "needle" + ("b" * 500)
        excerpt = extract_excerpt(body, "needle")

        assert excerpt == "..." + "a" * 150 + "needle" + "b" * 144 + "..."

    def test_window_is_located_in_original_text(self):
        # "İ" lowercases to two characters; the match must still be found in the body as given
        body = ("İ" * 200) + " must set bucket labels before creation " + ("z" * 400)
        excerpt = extract_excerpt(body, "bucket labels")

        assert "bucket labels" in excerpt
        assert excerpt.startswith("...İ")
        assert excerpt.endswith("...")


class TestSearchEngine:
    @pytest.mark.asyncio
    async def test_single_document_scenario(self, cache):
        descriptor = url_descriptor("standards", title="Resource Naming Standards",
                                    category="internal", priority=1.0)
        engine, _ = _engine(cache, [(descriptor, NAMING_BODY)])

        results = await engine.search("naming")

        assert len(results) == 1
        assert results[0].topic == "standards"
        assert results[0].title == "Resource Naming Standards"
        assert results[0].category == "internal"
        assert results[0].score == pytest.approx(15.6)
        assert "Naming" in results[0].excerpt

    @pytest.mark.asyncio
    async def test_no_matches_is_empty(self, cache):
        engine, _ = _engine(cache, [
            (url_descriptor("a"), "alpha"),
            (url_descriptor("b"), "beta"),
        ])
        assert await engine.search("kubernetes") == []

    @pytest.mark.asyncio
    async def test_blank_query_fetches_nothing(self, cache):
        engine, adapter = _engine(cache, [(url_descriptor("a"), "alpha")])

        assert await engine.search("   ") == []
        assert adapter.calls == []

    @pytest.mark.asyncio
    async def test_non_positive_limit(self, cache):
        engine, _ = _engine(cache, [(url_descriptor("a"), "alpha")])
        assert await engine.search("alpha", limit=0) == []

    @pytest.mark.asyncio
    async def test_failed_fetch_is_skipped(self, cache):
        missing = url_descriptor("gone")
        engine, _ = _engine(cache, [(missing, "")],
                            errors={missing.source: DocumentNotFoundError("gone")})

        assert await engine.search("anything") == []

    @pytest.mark.asyncio
    async def test_failures_do_not_hide_other_results(self, cache):
        broken = url_descriptor("broken")
        flaky = url_descriptor("flaky")
        good = url_descriptor("good")
        engine, _ = _engine(cache, [(broken, ""), (flaky, ""), (good, "labels here")], errors={
            broken.source: DocumentNotFoundError("gone"),
            flaky.source: SourceTransportError("502"),
        })

        results = await engine.search("labels")

        assert [r.topic for r in results] == ["good"]

    @pytest.mark.asyncio
    async def test_higher_priority_ranks_first(self, cache):
        body = "bucket labels"
        engine, _ = _engine(cache, [
            (url_descriptor("low", priority=0.5), body),
            (url_descriptor("high", priority=1.0), body),
        ])

        results = await engine.search("labels")

        assert [r.topic for r in results] == ["high", "low"]

    @pytest.mark.asyncio
    async def test_ties_keep_catalog_order(self, cache):
        body = "one label"
        engine, _ = _engine(cache, [
            (url_descriptor("first"), body),
            (url_descriptor("second"), body),
            (url_descriptor("third"), body),
        ], concurrency=1)

        results = await engine.search("label")

        assert [r.topic for r in results] == ["first", "second", "third"]

    @pytest.mark.asyncio
    async def test_limit_truncates_after_sorting(self, cache):
        engine, _ = _engine(cache, [
            (url_descriptor("one"), "x"),
            (url_descriptor("three"), "x x x"),
            (url_descriptor("two"), "x x"),
        ])

        results = await engine.search("x", limit=2)

        assert [r.topic for r in results] == ["three", "two"]

    @pytest.mark.asyncio
    async def test_second_search_uses_cache(self, cache):
        engine, adapter = _engine(cache, [(url_descriptor("a"), "alpha")])

        await engine.search("alpha")
        await engine.search("alpha")

        assert len(adapter.calls) == 1

    @pytest.mark.asyncio
    async def test_catalog_is_read_per_query(self, cache):
        descriptors = []
        first = url_descriptor("first")
        adapter = StubAdapter("url", cache, bodies={first.source: "alpha"}, fixed_origin=False)
        engine = SearchEngine(SourceRouter({"url": adapter}), lambda: list(descriptors))

        assert await engine.search("alpha") == []
        descriptors.append(first)
        assert [r.topic for r in await engine.search("alpha")] == ["first"]

    @pytest.mark.asyncio
    async def test_catalog_failure_is_recorded_and_raised(self, cache):
        def broken_catalog():
            raise RuntimeError("catalog unavailable")

        adapter = StubAdapter("url", cache, fixed_origin=False)
        engine = SearchEngine(SourceRouter({"url": adapter}), broken_catalog)
        errors = _search_requests("error")

        with pytest.raises(RuntimeError):
            await engine.search("alpha")

        assert _search_requests("error") == errors + 1

    def test_result_to_dict(self):
        from pipelines.search import SearchResult

        result = SearchResult(topic="t", title="T", category="user", excerpt="e", score=1.5)
        assert result.to_dict() == {"topic": "t", "title": "T", "category": "user", "excerpt": "e", "score": 1.5}

"""Tests for the retrieval engine."""

import random
from datetime import datetime, timezone
from pathlib import Path

import pytest

from resume_rag.config import AppConfig, RetrievalConfig
from resume_rag.errors import ConfigurationError
from resume_rag.ingestion.builder import IndexBuilder
from resume_rag.models.chunk import Chunk
from resume_rag.models.index import IndexArtifact, SearchConfig
from resume_rag.models.search import SearchOptions, SearchResult
from resume_rag.retrieval.engine import SearchEngine
from resume_rag.retrieval.vectorizer import KeywordVectorizer
from resume_rag.storage.index_store import load_index, save_index

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "sample_texts"


def _make_index(
    entries: list[tuple[str, str, str]],
    keywords: list[str] | None = None,
    min_similarity: float = 0.05,
    top_k: int = 4,
) -> IndexArtifact:
    """Build an index from (type, title, content) triples."""
    config = AppConfig()
    vectorizer = KeywordVectorizer.from_config(config.embedding, keywords=keywords)
    chunks = [
        Chunk(
            id=f"cv.txt_{i}",
            type=type_,
            title=title,
            content=content,
            source="cv.txt",
            word_count=len(content.split()),
            embedding=vectorizer.embed(content + " " + title),
        )
        for i, (type_, title, content) in enumerate(entries)
    ]
    return IndexArtifact(
        version="1.0",
        build_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        total_documents=1,
        total_chunks=len(chunks),
        embedding_dimensions=len(vectorizer.vocabulary),
        documents=[],
        chunks=chunks,
        search_config=SearchConfig(
            default_top_k=top_k,
            min_similarity=min_similarity,
            keywords=list(vectorizer.vocabulary),
        ),
    )


def _make_result(type_: str, title: str, content: str, similarity: float = 0.5) -> SearchResult:
    return SearchResult(
        content=content,
        similarity=similarity,
        source="cv.txt",
        type=type_,
        title=title,
        word_count=len(content.split()),
    )


@pytest.fixture
def resume_engine() -> SearchEngine:
    text = (FIXTURES_DIR / "cv.txt").read_text(encoding="utf-8")
    index = IndexBuilder(AppConfig()).build_from_text(text, "cv.txt")
    return SearchEngine(index)


# ── Search ──────────────────────────────────────────────────────────────────


class TestSearch:
    def test_boosted_section_ranks_first(self) -> None:
        index = _make_index(
            [
                ("languages", "Languages", "Languages: French, English"),
                ("skills", "Skills", "Expert in TypeScript and Go"),
            ]
        )
        engine = SearchEngine(index)

        response = engine.search("typescript", SearchOptions(min_similarity=0.0))
        assert response.has_results
        assert response.results[0].type == "skills"
        assert response.results[0].similarity > response.results[1].similarity

    def test_default_threshold_filters_unrelated(self) -> None:
        index = _make_index(
            [
                ("skills", "Skills", "Expert in TypeScript and Go"),
                ("languages", "Languages", "Languages: French, English"),
            ]
        )
        response = SearchEngine(index).search("typescript")
        assert [r.type for r in response.results] == ["skills"]

    def test_no_match(self, resume_engine: SearchEngine) -> None:
        response = resume_engine.search("zzzznotfound", SearchOptions(min_similarity=0.1))
        assert not response.has_results
        assert response.results == []
        assert response.sources == []
        assert response.context == ""

    @pytest.mark.parametrize("query", ["", "   ", "\n\t"])
    def test_blank_query(self, resume_engine: SearchEngine, query: str) -> None:
        response = resume_engine.search(query)
        assert not response.has_results
        assert response.results == []
        assert response.context == ""
        assert response.stats.checked_chunks == 0

    def test_threshold_respected(self, resume_engine: SearchEngine) -> None:
        options = SearchOptions(min_similarity=0.3, top_k=20)
        response = resume_engine.search("développeur React TypeScript", options)
        assert all(r.similarity >= 0.3 for r in response.results)

    @pytest.mark.parametrize("top_k", [0, 1, 2, 5])
    def test_top_k_bound(self, resume_engine: SearchEngine, top_k: int) -> None:
        options = SearchOptions(top_k=top_k, min_similarity=0.0)
        response = resume_engine.search("développement web React", options)
        assert len(response.results) <= top_k

    def test_default_top_k_from_index(self, resume_engine: SearchEngine) -> None:
        response = resume_engine.search("web", SearchOptions(min_similarity=0.0))
        assert len(response.results) == resume_engine.index.search_config.default_top_k

    def test_sorted_descending(self, resume_engine: SearchEngine) -> None:
        response = resume_engine.search("React WPF", SearchOptions(min_similarity=0.0, top_k=20))
        scores = [r.similarity for r in response.results]
        assert scores == sorted(scores, reverse=True)

    def test_ties_keep_index_order(self) -> None:
        index = _make_index(
            [
                ("skills", "Skills A", "Expert in TypeScript"),
                ("skills", "Skills B", "Expert in TypeScript"),
                ("skills", "Skills C", "Expert in TypeScript"),
            ]
        )
        response = SearchEngine(index).search("typescript", SearchOptions(top_k=3))
        assert [r.index for r in response.results] == [0, 1, 2]

    def test_deterministic(self, resume_engine: SearchEngine) -> None:
        first = resume_engine.search("expérience React")
        second = resume_engine.search("expérience React")
        assert first.model_dump_json() == second.model_dump_json()

    def test_boosts_can_be_disabled(self) -> None:
        index = _make_index([("skills", "Skills", "Expert in TypeScript and Go")])
        response = SearchEngine(index).search(
            "typescript", SearchOptions(boost_sections=False)
        )
        result = response.results[0]
        assert result.similarity == result.original_similarity

    def test_stats(self, resume_engine: SearchEngine) -> None:
        response = resume_engine.search("React")
        assert response.stats.total_chunks == len(resume_engine.index.chunks)
        assert response.stats.checked_chunks == len(resume_engine.index.chunks)
        assert response.stats.found_chunks == len(response.results)

    def test_round_trip_through_file(self, tmp_path: Path) -> None:
        text = (FIXTURES_DIR / "cv.txt").read_text(encoding="utf-8")
        index = IndexBuilder(AppConfig()).build_from_text(text, "cv.txt")
        path = save_index(index, tmp_path / "index.json")

        in_memory = SearchEngine(index)
        reloaded = SearchEngine(load_index(path))
        for query in ["React TypeScript", "Master informatique", "anglais courant"]:
            assert (
                in_memory.search(query).model_dump_json()
                == reloaded.search(query).model_dump_json()
            )


# ── Configuration errors ────────────────────────────────────────────────────


class _ShortVectorizer:
    vocabulary = ("typescript", "python")

    def embed(self, text: str) -> list[float]:
        return [0.0]


class TestConfigurationErrors:
    def test_vocabulary_mismatch(self) -> None:
        index = _make_index([("skills", "Skills", "Python")], keywords=["typescript", "python"])
        with pytest.raises(ConfigurationError):
            SearchEngine(index, vectorizer=KeywordVectorizer(["python", "typescript"]))

    def test_query_dimension_mismatch(self) -> None:
        index = _make_index([("skills", "Skills", "Python")], keywords=["typescript", "python"])
        engine = SearchEngine(index, vectorizer=_ShortVectorizer())
        with pytest.raises(ConfigurationError):
            engine.search("python")

    def test_inconsistent_index(self) -> None:
        index = _make_index([("skills", "Skills", "Python")], keywords=["typescript", "python"])
        broken = index.model_copy(update={"embedding_dimensions": 3})
        with pytest.raises(ConfigurationError):
            SearchEngine(broken)


# ── Context and sources ─────────────────────────────────────────────────────


class TestContextAndSources:
    def test_context_blocks(self, resume_engine: SearchEngine) -> None:
        results = [_make_result("skills", "COMPÉTENCES", "Rust, Go")]
        assert resume_engine.build_context(results) == "[COMPÉTENCES]\nRust, Go"

    def test_context_falls_back_to_type(self, resume_engine: SearchEngine) -> None:
        results = [_make_result("skills", "", "Rust, Go")]
        assert resume_engine.build_context(results).startswith("[skills]")

    def test_context_ordered_by_section(self, resume_engine: SearchEngine) -> None:
        results = [
            _make_result("languages", "LANGUES", "Anglais courant", 0.9),
            _make_result("project", "TailwindWPF", "Bibliothèque WPF", 0.8),
            _make_result("profile", "À PROPOS", "Développeur passionné", 0.1),
        ]
        context = resume_engine.build_context(results)
        assert context.index("[À PROPOS]") < context.index("[TailwindWPF]")
        assert context.index("[TailwindWPF]") < context.index("[LANGUES]")

    def test_context_rank_order_when_disabled(self) -> None:
        config = AppConfig(retrieval=RetrievalConfig(order_context_by_section=False))
        index = _make_index([("skills", "Skills", "Python")])
        engine = SearchEngine(index, config=config)
        results = [
            _make_result("languages", "LANGUES", "Anglais courant"),
            _make_result("profile", "À PROPOS", "Développeur passionné"),
        ]
        assert engine.build_context(results).startswith("[LANGUES]")

    def test_context_capped(self) -> None:
        config = AppConfig(retrieval=RetrievalConfig(max_context_chars=60))
        engine = SearchEngine(_make_index([("skills", "Skills", "Python")]), config=config)
        results = [_make_result("skills", f"Skills {i}", "x" * 30) for i in range(5)]
        context = engine.build_context(results)
        assert len(context) <= 60
        assert context.startswith("[Skills 0]")

    def test_first_block_always_kept(self) -> None:
        config = AppConfig(retrieval=RetrievalConfig(max_context_chars=10))
        engine = SearchEngine(_make_index([("skills", "Skills", "Python")]), config=config)
        results = [
            _make_result("skills", "Skills", "x" * 100),
            _make_result("skills", "More", "y" * 5),
        ]
        assert engine.build_context(results) == "[Skills]\n" + "x" * 100

    def test_empty_context(self, resume_engine: SearchEngine) -> None:
        assert resume_engine.build_context([]) == ""

    def test_sources(self, resume_engine: SearchEngine) -> None:
        results = [
            _make_result("skills", "Skills", "a" * 150, similarity=0.456),
            _make_result("project", "", "short text", similarity=0.1),
        ]
        sources = resume_engine.build_sources(results)

        assert [s.index for s in sources] == [1, 2]
        assert sources[0].similarity == 46
        assert sources[0].preview == "a" * 100 + "..."
        assert sources[1].preview == "short text"
        assert sources[1].title == "Section 2"
        assert sources[1].word_count == 2

    def test_search_sources_match_results(self, resume_engine: SearchEngine) -> None:
        response = resume_engine.search("React TypeScript")
        assert len(response.sources) == len(response.results)
        assert [s.title for s in response.sources] == [r.title for r in response.results]


# ── Query expansion ─────────────────────────────────────────────────────────


class TestQueryExpansion:
    def test_expand_abbreviation(self, resume_engine: SearchEngine) -> None:
        assert resume_engine.expand_query("js skills") == ["js skills", "javascript skills"]

    def test_expand_multiple_synonyms(self, resume_engine: SearchEngine) -> None:
        assert resume_engine.expand_query("AI projects") == [
            "AI projects",
            "intelligence artificielle projects",
            "ia projects",
        ]

    def test_no_expansion_inside_words(self, resume_engine: SearchEngine) -> None:
        assert resume_engine.expand_query("maintain") == ["maintain"]

    def test_search_with_expansion(self) -> None:
        index = _make_index(
            [
                ("skills", "Skills", "Expert JavaScript developer"),
                ("languages", "Languages", "Français, anglais"),
            ]
        )
        response = SearchEngine(index).search_with_expansion("js")
        assert response.expanded_queries == ["js", "javascript"]
        assert response.has_results
        assert [r.type for r in response.results] == ["skills"]

    def test_expansion_deduplicates(self, resume_engine: SearchEngine) -> None:
        response = resume_engine.search_with_expansion(
            "dev web", SearchOptions(top_k=10, min_similarity=0.0)
        )
        keys = [(r.source, r.content[:50]) for r in response.results]
        assert len(keys) == len(set(keys))
        assert len(response.results) <= 10

    def test_expansion_blank_query(self, resume_engine: SearchEngine) -> None:
        response = resume_engine.search_with_expansion("  ")
        assert not response.has_results
        assert response.expanded_queries == []


# ── Extras ──────────────────────────────────────────────────────────────────


class TestEngineExtras:
    def test_index_stats(self, resume_engine: SearchEngine) -> None:
        stats = resume_engine.index_stats()
        assert stats["total_chunks"] == len(resume_engine.index.chunks)
        assert stats["embedding_dimensions"] == len(resume_engine.index.search_config.keywords)
        assert stats["documents"][0]["filename"] == "cv.txt"

    def test_suggestions_follow_sections(self, resume_engine: SearchEngine) -> None:
        suggestions = resume_engine.suggestions(limit=100)
        assert "Quelles technologies maîtrises-tu ?" in suggestions
        assert "Comment puis-je te contacter ?" in suggestions

    def test_suggestions_limit_and_shuffle(self, resume_engine: SearchEngine) -> None:
        assert len(resume_engine.suggestions()) == 6
        shuffled = resume_engine.suggestions(limit=100, rng=random.Random(1))
        assert sorted(shuffled) == sorted(resume_engine.suggestions(limit=100))

    def test_benchmark(self, resume_engine: SearchEngine) -> None:
        report = resume_engine.benchmark(["React", "Master"])
        assert report["total_queries"] == 2
        assert all(r["duration_ms"] >= 0 for r in report["results"])

"""Retrieval engine over a loaded résumé index."""

import logging
import math
import random
import re
import time
from pathlib import Path
from typing import Any

from resume_rag.config import AppConfig
from resume_rag.errors import ConfigurationError
from resume_rag.models.index import IndexArtifact
from resume_rag.models.search import (
    ExpandedSearchResponse,
    SearchOptions,
    SearchResponse,
    SearchResult,
    SearchSource,
    SearchStats,
)
from resume_rag.retrieval.scoring import BoostScorer, cosine_similarity
from resume_rag.retrieval.vectorizer import KeywordVectorizer, TextVectorizer
from resume_rag.storage.index_store import load_index, validate_index

logger = logging.getLogger(__name__)

# Entry chunks are ordered with the section they belong to.
SECTION_FAMILY: dict[str, str] = {
    "experience_entry": "experience",
    "education_entry": "education",
    "training_entry": "training",
    "project": "projects",
}

DEDUP_PREFIX_CHARS = 50

SUGGESTION_TEMPLATES: dict[str, list[str]] = {
    "experience": [
        "Quelle est ton expérience professionnelle ?",
        "Parle-moi de tes postes précédents",
        "Quelles entreprises as-tu rejoint ?",
    ],
    "skills": [
        "Quelles sont tes compétences techniques ?",
        "Quelles technologies maîtrises-tu ?",
        "Peux-tu me parler de ton stack technique ?",
    ],
    "projects": [
        "Quels projets as-tu réalisés ?",
        "Montre-moi tes réalisations",
        "Peux-tu détailler un projet intéressant ?",
    ],
    "education": [
        "Quel est ton parcours de formation ?",
        "Où as-tu étudié ?",
        "Quels diplômes as-tu obtenus ?",
    ],
}

GENERAL_SUGGESTIONS: list[str] = [
    "Peux-tu te présenter en quelques mots ?",
    "Qu'est-ce qui te passionne dans le développement ?",
    "Comment puis-je te contacter ?",
]

BENCHMARK_QUERIES: list[str] = [
    "expérience React",
    "compétences JavaScript",
    "projets IA",
    "formation développement",
]


def section_family(chunk_type: str) -> str:
    return SECTION_FAMILY.get(chunk_type, chunk_type)


class SearchEngine:
    """Scores every chunk of an index against a query.

    The index is validated once at construction and only read afterwards,
    so one engine can serve concurrent callers.

    Args:
        index: The loaded index artifact.
        config: Application config; boosts and retrieval settings are read
            from it. Defaults to ``AppConfig()``.
        vectorizer: Optional query vectorizer. Its vocabulary must equal the
            index vocabulary.

    Raises:
        ConfigurationError: If the index is inconsistent or the vectorizer
            vocabulary differs from the one the index was built with.
    """

    def __init__(
        self,
        index: IndexArtifact,
        config: AppConfig | None = None,
        vectorizer: TextVectorizer | None = None,
    ) -> None:
        validate_index(index)
        self._index = index
        self._config = config or AppConfig()
        self._retrieval = self._config.retrieval

        keywords = index.search_config.keywords
        if vectorizer is None:
            vectorizer = KeywordVectorizer.from_config(self._config.embedding, keywords=keywords)
        elif list(vectorizer.vocabulary) != keywords:
            raise ConfigurationError(
                "Vectorizer vocabulary differs from the index vocabulary",
                {"vectorizer": len(vectorizer.vocabulary), "index": len(keywords)},
            )
        self._vectorizer = vectorizer
        self._scorer = BoostScorer(self._config.boosts)

    @classmethod
    def from_file(cls, path: str | Path, config: AppConfig | None = None) -> "SearchEngine":
        """Load an index file and wrap it in an engine."""
        return cls(load_index(path), config=config)

    @property
    def index(self) -> IndexArtifact:
        return self._index

    def search(self, query: str, options: SearchOptions | None = None) -> SearchResponse:
        """Rank chunks for a query and assemble context and citations.

        A blank query returns an empty response without touching the index.

        Raises:
            ConfigurationError: If the query vector does not match the index dimensions.
        """
        options = options or SearchOptions()
        if not query or not query.strip():
            return SearchResponse(query="")

        top_k = self._top_k(options)
        min_similarity = (
            options.min_similarity
            if options.min_similarity is not None
            else self._index.search_config.min_similarity
        )

        scored = self._score_all(query, options.boost_sections)
        # sorted() is stable: ties keep index order
        results = sorted(
            (r for r in scored if r.similarity >= min_similarity),
            key=lambda r: r.similarity,
            reverse=True,
        )[: max(top_k, 0)]

        logger.debug(
            "Query %r: %d/%d chunks above %.3f",
            query,
            len(results),
            len(scored),
            min_similarity,
        )
        return SearchResponse(
            query=query,
            results=results,
            context=self.build_context(results),
            sources=self.build_sources(results),
            has_results=bool(results),
            stats=SearchStats(
                total_chunks=len(self._index.chunks),
                checked_chunks=len(scored),
                found_chunks=len(results),
            ),
        )

    def expand_query(self, query: str) -> list[str]:
        """Return the query followed by its abbreviation-expanded variants."""
        queries = [query]
        for abbrev, synonyms in self._retrieval.query_expansions.items():
            pattern = re.compile(rf"\b{re.escape(abbrev)}\b", re.IGNORECASE)
            if not pattern.search(query):
                continue
            for synonym in synonyms:
                variant = pattern.sub(lambda _m, s=synonym: s, query)
                if variant not in queries:
                    queries.append(variant)
        return queries

    def search_with_expansion(
        self, query: str, options: SearchOptions | None = None
    ) -> ExpandedSearchResponse:
        """Search the query and its expanded variants, merging the results.

        Each variant is searched with ``expansion_top_k``; results are
        deduplicated by source and content prefix, re-sorted and cut to
        the requested top_k.
        """
        options = options or SearchOptions()
        if not query or not query.strip():
            return ExpandedSearchResponse(query="")

        queries = self.expand_query(query)
        variant_options = options.model_copy(update={"top_k": self._retrieval.expansion_top_k})

        merged: list[SearchResult] = []
        seen: set[tuple[str, str]] = set()
        checked = 0
        for variant in queries[: self._retrieval.max_query_variants]:
            response = self.search(variant, variant_options)
            checked += response.stats.checked_chunks
            for result in response.results:
                key = (result.source, result.content[:DEDUP_PREFIX_CHARS])
                if key in seen:
                    continue
                seen.add(key)
                merged.append(result)

        results = sorted(merged, key=lambda r: r.similarity, reverse=True)[
            : max(self._top_k(options), 0)
        ]
        return ExpandedSearchResponse(
            query=query,
            expanded_queries=queries,
            results=results,
            context=self.build_context(results),
            sources=self.build_sources(results),
            has_results=bool(results),
            stats=SearchStats(
                total_chunks=len(self._index.chunks),
                checked_chunks=checked,
                found_chunks=len(results),
            ),
        )

    def build_context(self, results: list[SearchResult]) -> str:
        """Join ``[title]\\ncontent`` blocks up to ``max_context_chars``.

        The first block is always kept, even when it alone exceeds the cap.
        """
        if not results:
            return ""

        ordered = results
        if self._retrieval.order_context_by_section:
            priority = {name: i for i, name in enumerate(self._retrieval.section_priority)}
            ordered = sorted(
                results,
                key=lambda r: priority.get(section_family(r.type), len(priority)),
            )

        blocks: list[str] = []
        length = 0
        for result in ordered:
            block = f"[{result.title or result.type}]\n{result.content}"
            added = len(block) + (2 if blocks else 0)
            if blocks and length + added > self._retrieval.max_context_chars:
                break
            blocks.append(block)
            length += added

        return "\n\n".join(blocks)

    def build_sources(self, results: list[SearchResult]) -> list[SearchSource]:
        preview_chars = self._retrieval.preview_chars
        sources: list[SearchSource] = []
        for rank, result in enumerate(results, start=1):
            content = result.content
            preview = content[:preview_chars] + ("..." if len(content) > preview_chars else "")
            sources.append(
                SearchSource(
                    index=rank,
                    title=result.title or f"Section {rank}",
                    type=result.type,
                    source=result.source,
                    similarity=math.floor(result.similarity * 100 + 0.5),
                    preview=preview,
                    word_count=result.word_count or len(content.split()),
                )
            )
        return sources

    def index_stats(self) -> dict[str, Any]:
        return {
            "total_documents": self._index.total_documents,
            "total_chunks": self._index.total_chunks,
            "embedding_dimensions": self._index.embedding_dimensions,
            "build_at": self._index.build_at.isoformat(),
            "documents": [
                d.model_dump(mode="json", by_alias=True) for d in self._index.documents
            ],
        }

    def suggestions(self, limit: int = 6, rng: random.Random | None = None) -> list[str]:
        """Suggest questions for the sections present in the index.

        Order is deterministic unless ``rng`` is given to shuffle.
        """
        families = dict.fromkeys(section_family(c.type) for c in self._index.chunks)
        suggestions: list[str] = []
        for family in families:
            suggestions.extend(SUGGESTION_TEMPLATES.get(family, []))
        suggestions.extend(GENERAL_SUGGESTIONS)

        if rng is not None:
            rng.shuffle(suggestions)
        return suggestions[:limit]

    def benchmark(self, queries: list[str] | None = None) -> dict[str, Any]:
        """Time a batch of searches."""
        runs = []
        for query in queries or BENCHMARK_QUERIES:
            start = time.perf_counter()
            response = self.search(query)
            duration_ms = (time.perf_counter() - start) * 1000
            runs.append(
                {
                    "query": query,
                    "duration_ms": round(duration_ms, 3),
                    "results_count": len(response.results),
                    "has_results": response.has_results,
                }
            )

        average = sum(r["duration_ms"] for r in runs) / len(runs) if runs else 0.0
        return {
            "average_duration_ms": round(average, 3),
            "total_queries": len(runs),
            "results": runs,
        }

    def _top_k(self, options: SearchOptions) -> int:
        if options.top_k is not None:
            return options.top_k
        return self._index.search_config.default_top_k

    def _score_all(self, query: str, boost: bool) -> list[SearchResult]:
        query_vector = self._vectorizer.embed(query)
        if len(query_vector) != self._index.embedding_dimensions:
            raise ConfigurationError(
                "Query vector does not match index dimensions",
                {"query": len(query_vector), "index": self._index.embedding_dimensions},
            )

        scored: list[SearchResult] = []
        for position, chunk in enumerate(self._index.chunks):
            base = cosine_similarity(query_vector, chunk.embedding)
            similarity = self._scorer.apply(query, chunk, base) if boost else base
            scored.append(
                SearchResult(
                    content=chunk.content,
                    similarity=similarity,
                    original_similarity=base,
                    source=chunk.source,
                    type=chunk.type,
                    title=chunk.title,
                    word_count=chunk.word_count,
                    index=position,
                )
            )
        return scored

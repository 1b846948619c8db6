"""Data models for the résumé retrieval component."""

from resume_rag.models.chunk import Chunk, RawChunk
from resume_rag.models.index import DocumentInfo, IndexArtifact, SearchConfig
from resume_rag.models.search import (
    ExpandedSearchResponse,
    SearchOptions,
    SearchResponse,
    SearchResult,
    SearchSource,
    SearchStats,
)

__all__ = [
    "Chunk",
    "DocumentInfo",
    "ExpandedSearchResponse",
    "IndexArtifact",
    "RawChunk",
    "SearchConfig",
    "SearchOptions",
    "SearchResponse",
    "SearchResult",
    "SearchSource",
    "SearchStats",
]

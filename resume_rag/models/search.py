"""Search request and response models."""

from pydantic import BaseModel, Field


class SearchOptions(BaseModel):
    """Per-call search options. ``None`` falls back to the index defaults."""

    top_k: int | None = None
    min_similarity: float | None = None
    boost_sections: bool = True


class SearchResult(BaseModel):
    """A single retrieved chunk with its boosted similarity."""

    content: str
    similarity: float
    original_similarity: float = 0.0
    source: str
    type: str
    title: str
    word_count: int = 0
    index: int = 0  # position of the chunk in the index


class SearchSource(BaseModel):
    """Display-oriented citation of a retrieved chunk."""

    index: int  # 1-based rank
    title: str
    type: str
    source: str
    similarity: int  # percent
    preview: str
    word_count: int


class SearchStats(BaseModel):
    """Scan statistics of one search call."""

    total_chunks: int = 0
    checked_chunks: int = 0
    found_chunks: int = 0


class SearchResponse(BaseModel):
    """Ranked results plus the context and citations for a downstream prompt."""

    query: str
    results: list[SearchResult] = Field(default_factory=list)
    context: str = ""
    sources: list[SearchSource] = Field(default_factory=list)
    has_results: bool = False
    stats: SearchStats = Field(default_factory=SearchStats)


class ExpandedSearchResponse(SearchResponse):
    """A search response merged across abbreviation-expanded query variants."""

    expanded_queries: list[str] = Field(default_factory=list)

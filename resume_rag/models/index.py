"""Index artifact data models.

Serialized field names follow the camelCase layout shared with the
query side, so every model dumps with ``by_alias=True``.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from resume_rag.models.chunk import Chunk


class DocumentInfo(BaseModel):
    """Per-source metadata recorded at build time."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    filename: str
    processed_at: datetime = Field(alias="processedAt")
    chunks_count: int = Field(alias="chunksCount")
    sections: list[str] = Field(default_factory=list)


class SearchConfig(BaseModel):
    """Search defaults and the vocabulary frozen into the index."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    default_top_k: int = Field(alias="defaultTopK")
    min_similarity: float = Field(alias="minSimilarity")
    keywords: list[str]


class IndexArtifact(BaseModel):
    """The complete serialized retrieval state."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: str
    build_at: datetime = Field(alias="buildAt")
    total_documents: int = Field(alias="totalDocuments")
    total_chunks: int = Field(alias="totalChunks")
    embedding_dimensions: int = Field(alias="embeddingDimensions")
    documents: list[DocumentInfo] = Field(default_factory=list)
    chunks: list[Chunk] = Field(default_factory=list)
    search_config: SearchConfig = Field(alias="searchConfig")

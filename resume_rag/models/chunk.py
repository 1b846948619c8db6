"""Chunk data models."""

from pydantic import BaseModel, ConfigDict, Field


class RawChunk(BaseModel):
    """A labeled passage produced by the chunker, before vectorization."""

    model_config = ConfigDict(frozen=True)

    type: str  # "profile", "skills", "experience_entry", "project", "general", ...
    title: str
    content: str = ""
    source: str


class Chunk(BaseModel):
    """A retrievable passage of a résumé with its keyword embedding.

    Created once at index build time and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    type: str
    title: str
    content: str
    source: str
    word_count: int = Field(alias="wordCount")
    embedding: list[float]

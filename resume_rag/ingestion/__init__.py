"""Résumé ingestion: reading, chunking and index building."""

from resume_rag.ingestion.builder import IndexBuilder
from resume_rag.ingestion.chunker import ResumeChunker
from resume_rag.ingestion.reader import DocumentReader

__all__ = ["DocumentReader", "IndexBuilder", "ResumeChunker"]

"""Index builder: chunk a résumé and vectorize every chunk."""

import logging
from datetime import datetime, timezone
from pathlib import Path

from resume_rag.config import AppConfig
from resume_rag.errors import IndexBuildError, ResumeRagError
from resume_rag.ingestion.chunker import ResumeChunker
from resume_rag.ingestion.reader import DocumentReader
from resume_rag.models.chunk import Chunk, RawChunk
from resume_rag.models.index import DocumentInfo, IndexArtifact, SearchConfig
from resume_rag.retrieval.vectorizer import KeywordVectorizer, TextVectorizer

logger = logging.getLogger(__name__)

INDEX_VERSION = "1.0"


class IndexBuilder:
    """Builds an IndexArtifact from one résumé document.

    Args:
        config: Application config (chunking, embedding and retrieval defaults).
        vectorizer: Optional vectorizer; defaults to a KeywordVectorizer
            over ``config.embedding.keywords``.
        reader: Optional document reader.
    """

    def __init__(
        self,
        config: AppConfig,
        vectorizer: TextVectorizer | None = None,
        reader: DocumentReader | None = None,
    ) -> None:
        self._config = config
        self._vectorizer = vectorizer or KeywordVectorizer.from_config(config.embedding)
        self._reader = reader or DocumentReader()
        self._chunker = ResumeChunker(config.chunking)

    def build(self, file_path: str | Path) -> IndexArtifact:
        """Read, chunk and vectorize a résumé file.

        Raises:
            DocumentNotFoundError: If the file is missing.
            IndexBuildError: On any other read or processing failure.
        """
        path = Path(file_path)
        text = self._reader.read(path)
        return self.build_from_text(text, path.name)

    def build_from_text(self, text: str, source_id: str) -> IndexArtifact:
        """Build an index from already-loaded résumé text."""
        try:
            raw_chunks = self._chunker.chunk(text, source_id)
        except ResumeRagError:
            raise
        except Exception as exc:
            raise IndexBuildError(
                f"Failed to chunk {source_id}", {"error": str(exc)}
            ) from exc

        if not raw_chunks:
            raise IndexBuildError(f"No chunks produced from {source_id}")

        logger.info("Generating embeddings for %d chunks", len(raw_chunks))
        try:
            chunks = [
                self._to_chunk(raw, source_id, i) for i, raw in enumerate(raw_chunks)
            ]
        except ResumeRagError:
            raise
        except Exception as exc:
            raise IndexBuildError(
                f"Failed to embed chunks of {source_id}", {"error": str(exc)}
            ) from exc

        now = datetime.now(timezone.utc)
        document = DocumentInfo(
            filename=source_id,
            processed_at=now,
            chunks_count=len(chunks),
            sections=list(dict.fromkeys(c.type for c in chunks)),
        )
        keywords = list(self._vectorizer.vocabulary)

        index = IndexArtifact(
            version=INDEX_VERSION,
            build_at=now,
            total_documents=1,
            total_chunks=len(chunks),
            embedding_dimensions=len(keywords),
            documents=[document],
            chunks=chunks,
            search_config=SearchConfig(
                default_top_k=self._config.retrieval.top_k,
                min_similarity=self._config.retrieval.min_similarity,
                keywords=keywords,
            ),
        )
        logger.info(
            "Built index: %d chunks, %d dimensions, sections=%s",
            index.total_chunks,
            index.embedding_dimensions,
            ", ".join(document.sections),
        )
        return index

    def _to_chunk(self, raw: RawChunk, source_id: str, position: int) -> Chunk:
        return Chunk(
            id=f"{source_id}_{position}",
            type=raw.type,
            title=raw.title,
            content=raw.content,
            source=raw.source,
            word_count=len(raw.content.split()),
            embedding=self._vectorizer.embed(raw.content + " " + raw.title),
        )

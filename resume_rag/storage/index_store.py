"""JSON persistence of the index artifact."""

import logging
import math
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from resume_rag.errors import ConfigurationError, DocumentNotFoundError, IndexBuildError
from resume_rag.models.index import IndexArtifact

logger = logging.getLogger(__name__)


def validate_index(index: IndexArtifact) -> None:
    """Check the dimension invariants of an index artifact.

    Raises:
        ConfigurationError: If vocabulary size, declared dimensions and
            chunk embedding lengths disagree, or a component leaves [0, 1].
    """
    dimensions = index.embedding_dimensions
    keywords = index.search_config.keywords
    if dimensions != len(keywords):
        raise ConfigurationError(
            "Index dimensions do not match its vocabulary",
            {"embeddingDimensions": dimensions, "keywords": len(keywords)},
        )
    if index.total_chunks != len(index.chunks):
        raise ConfigurationError(
            "Index chunk count does not match its chunks",
            {"totalChunks": index.total_chunks, "chunks": len(index.chunks)},
        )
    for chunk in index.chunks:
        if len(chunk.embedding) != dimensions:
            raise ConfigurationError(
                "Chunk embedding has the wrong length",
                {"chunk": chunk.id, "length": len(chunk.embedding), "expected": dimensions},
            )
        if any(
            not math.isfinite(value) or value < 0.0 or value > 1.0
            for value in chunk.embedding
        ):
            raise ConfigurationError(
                "Chunk embedding component outside [0, 1]", {"chunk": chunk.id}
            )


def save_index(index: IndexArtifact, path: str | Path) -> Path:
    """Write the index as JSON, replacing any previous file atomically.

    Args:
        index: The artifact to persist.
        path: Destination file path. Parent directories are created.

    Returns:
        The written path.

    Raises:
        IndexBuildError: If the file cannot be written. No partial file is left.
    """
    target = Path(path)
    payload = index.model_dump_json(by_alias=True, indent=2)

    tmp_name: str | None = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=target.parent, suffix=".tmp", delete=False
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(payload)
        os.replace(tmp_name, target)
    except OSError as exc:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise IndexBuildError(
            f"Cannot write index to {target}", {"error": str(exc)}
        ) from exc

    logger.info("Index written to %s (%d KB)", target, round(len(payload.encode()) / 1024))
    return target


def load_index(path: str | Path) -> IndexArtifact:
    """Load and validate an index artifact.

    Raises:
        DocumentNotFoundError: If the file does not exist.
        ConfigurationError: If the file is malformed or inconsistent.
    """
    source = Path(path)
    if not source.is_file():
        raise DocumentNotFoundError(str(source))

    try:
        index = IndexArtifact.model_validate_json(source.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(
            f"Cannot read index artifact: {source}", {"error": str(exc)}
        ) from exc
    except ValidationError as exc:
        raise ConfigurationError(
            f"Malformed index artifact: {source}", {"errors": exc.error_count()}
        ) from exc

    validate_index(index)
    logger.info(
        "Loaded index %s: %d chunks, %d dimensions",
        source,
        index.total_chunks,
        index.embedding_dimensions,
    )
    return index

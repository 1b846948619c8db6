"""Résumé document reader with encoding detection."""

import logging
from pathlib import Path

import chardet

from resume_rag.errors import DocumentNotFoundError, IndexBuildError

logger = logging.getLogger(__name__)

# Supported file extensions mapped to format identifiers
SUPPORTED_FORMATS: dict[str, str] = {
    ".txt": "txt",
    ".md": "txt",
}

RESUME_NAME_HINTS: tuple[str, ...] = ("cv", "resume")


class DocumentReader:
    """Reads a flat-text résumé into a string.

    Only plain text and Markdown are supported; the chunker works on
    lines, so richer formats must be exported to text first.
    """

    def read(self, file_path: str | Path) -> str:
        """Read a résumé file.

        Args:
            file_path: Path to the résumé file.

        Returns:
            The file content as a string.

        Raises:
            DocumentNotFoundError: If file_path does not exist.
            IndexBuildError: If the file format is not supported.
        """
        path = Path(file_path)
        if not path.is_file():
            raise DocumentNotFoundError(str(path))

        ext = path.suffix.lower()
        if ext not in SUPPORTED_FORMATS:
            raise IndexBuildError(
                f"Unsupported file format: '{ext}'. "
                f"Supported: {', '.join(SUPPORTED_FORMATS.keys())}",
                {"path": str(path)},
            )

        text = self._read_text(path)
        logger.info("Read %s: %d characters", path.name, len(text))
        return text

    def find_resume(self, directory: str | Path) -> Path:
        """Locate the résumé in a documents directory.

        Picks the first supported file (by name) whose name mentions
        "cv" or "resume".

        Raises:
            DocumentNotFoundError: If the directory or a matching file is missing.
        """
        root = Path(directory)
        if not root.is_dir():
            raise DocumentNotFoundError(str(root), {"reason": "documents directory missing"})

        for candidate in sorted(root.iterdir()):
            name = candidate.name.lower()
            if (
                candidate.is_file()
                and candidate.suffix.lower() in SUPPORTED_FORMATS
                and any(hint in name for hint in RESUME_NAME_HINTS)
            ):
                logger.info("Found résumé file: %s", candidate.name)
                return candidate

        raise DocumentNotFoundError(
            str(root / "cv.txt"), {"reason": "no résumé file in documents directory"}
        )

    def _read_text(self, file_path: Path) -> str:
        """Read a text file, trying UTF-8 before chardet detection."""
        try:
            return file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            pass
        except OSError as exc:
            raise IndexBuildError(f"Cannot read {file_path}", {"error": str(exc)}) from exc

        raw_bytes = file_path.read_bytes()
        detected = chardet.detect(raw_bytes)
        encoding = detected.get("encoding") or "utf-8"
        confidence = detected.get("confidence", 0)

        if confidence < 0.7:
            logger.warning(
                "Low confidence encoding detection for %s: %s (%.0f%%)",
                file_path,
                encoding,
                confidence * 100,
            )

        try:
            return raw_bytes.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logger.error("Failed to decode file with %s: %s", encoding, file_path)
            return raw_bytes.decode("latin-1", errors="replace")

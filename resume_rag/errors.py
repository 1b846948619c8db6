"""Exception hierarchy for the résumé retrieval component.

Configuration errors halt the calling flow and must never be read as
"no matches". Build errors abort the whole index build.
"""

from typing import Any


class ResumeRagError(Exception):
    """Base exception for all résumé retrieval errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(ResumeRagError):
    """Raised when an index or vectorizer is inconsistent or malformed."""


class DocumentNotFoundError(ResumeRagError, FileNotFoundError):
    """Raised when a source document, directory or index file is missing."""

    def __init__(self, path: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["path"] = path
        super().__init__(f"File not found: {path}", details)


class IndexBuildError(ResumeRagError):
    """Raised when building or writing an index fails."""

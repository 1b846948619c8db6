"""Index artifact persistence."""

from resume_rag.storage.index_store import load_index, save_index, validate_index

__all__ = ["load_index", "save_index", "validate_index"]

"""Query-time retrieval: vectorization, scoring and search."""

from resume_rag.retrieval.engine import SearchEngine
from resume_rag.retrieval.scoring import BoostScorer, cosine_similarity
from resume_rag.retrieval.vectorizer import KeywordVectorizer, TextVectorizer, normalize_text

__all__ = [
    "BoostScorer",
    "KeywordVectorizer",
    "SearchEngine",
    "TextVectorizer",
    "cosine_similarity",
    "normalize_text",
]

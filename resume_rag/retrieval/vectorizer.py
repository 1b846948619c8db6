"""Keyword-frequency text vectorizer.

Maps text to a fixed-length vector over a frozen vocabulary. The same
vectorizer (same vocabulary, same order) must be used at build time and
at query time or the vectors are not comparable.
"""

import logging
import re
import unicodedata
from typing import Protocol, Sequence

from resume_rag.config import EmbeddingConfig

logger = logging.getLogger(__name__)

# Alternative spellings counted as the same term.
TERM_ALIASES: dict[str, tuple[str, ...]] = {
    "js": ("javascript",),
    "javascript": ("js",),
    "csharp": ("c#",),
    "c#": ("csharp",),
}


def normalize_text(text: str) -> str:
    """Lowercase text and strip diacritics ("Développeur" -> "developpeur")."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _term_variants(term: str) -> list[str]:
    """Return the distinct spellings matched for a vocabulary term."""
    base = normalize_text(term)
    variants = [base, re.sub(r"[.\-]", "", base), *TERM_ALIASES.get(base, ())]
    return list(dict.fromkeys(v for v in variants if v))


def _compile_term(term: str) -> list[re.Pattern[str]]:
    return [
        re.compile(rf"(?<!\w){re.escape(variant)}(?!\w)")
        for variant in _term_variants(term)
    ]


class TextVectorizer(Protocol):
    """Anything that turns text into a fixed-length vector."""

    @property
    def vocabulary(self) -> tuple[str, ...]: ...

    def embed(self, text: str) -> list[float]: ...


class KeywordVectorizer:
    """Sparse, interpretable stand-in for a learned embedding.

    Each component is the length-normalized match count of one vocabulary
    term, optionally boosted for primary terms, clamped to [0, 1].

    Args:
        keywords: Ordered vocabulary; defines the vector dimensions.
        chars_per_unit: Characters per length unit used to normalize counts.
        primary_terms: Terms whose score is multiplied by ``primary_boost``.
        primary_boost: Multiplier applied to primary terms.
    """

    def __init__(
        self,
        keywords: Sequence[str],
        chars_per_unit: int = 150,
        primary_terms: Sequence[str] = (),
        primary_boost: float = 1.3,
    ) -> None:
        if not keywords:
            raise ValueError("Vocabulary must not be empty")
        if chars_per_unit <= 0:
            raise ValueError("chars_per_unit must be positive")
        self._keywords = tuple(keywords)
        self._chars_per_unit = chars_per_unit
        self._primary = {normalize_text(t) for t in primary_terms}
        self._primary_boost = primary_boost
        self._patterns = [_compile_term(term) for term in self._keywords]

    @classmethod
    def from_config(
        cls, config: EmbeddingConfig, keywords: Sequence[str] | None = None
    ) -> "KeywordVectorizer":
        """Build a vectorizer from config, optionally with a frozen vocabulary."""
        return cls(
            keywords=keywords if keywords is not None else config.keywords,
            chars_per_unit=config.chars_per_unit,
            primary_terms=config.primary_terms,
            primary_boost=config.primary_boost,
        )

    @property
    def vocabulary(self) -> tuple[str, ...]:
        return self._keywords

    @property
    def dimensions(self) -> int:
        return len(self._keywords)

    def embed(self, text: str) -> list[float]:
        """Embed text as a vector of length ``len(vocabulary)``."""
        normalized = normalize_text(text)
        length_units = max(len(text) / self._chars_per_unit, 1)

        vector: list[float] = []
        for term, patterns in zip(self._keywords, self._patterns):
            matches = sum(len(p.findall(normalized)) for p in patterns)
            score = matches / length_units
            if score and normalize_text(term) in self._primary:
                score *= self._primary_boost
            vector.append(min(score, 1.0))
        return vector

"""Vector similarity and rank boosts."""

import math
from typing import Sequence

from resume_rag.config import BoostConfig
from resume_rag.errors import ConfigurationError
from resume_rag.models.chunk import Chunk
from resume_rag.retrieval.vectorizer import normalize_text


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Cosine similarity clamped to [0, 1].

    Zero-magnitude vectors have similarity 0.

    Raises:
        ConfigurationError: If the vectors differ in length.
    """
    if len(vec_a) != len(vec_b):
        raise ConfigurationError(
            "Vector dimension mismatch",
            {"left": len(vec_a), "right": len(vec_b)},
        )
    dot = sum(a * b for a, b in zip(vec_a, vec_b))
    magnitude_a = math.sqrt(sum(a * a for a in vec_a))
    magnitude_b = math.sqrt(sum(b * b for b in vec_b))
    if magnitude_a == 0 or magnitude_b == 0:
        return 0.0
    return max(0.0, min(1.0, dot / (magnitude_a * magnitude_b)))


class BoostScorer:
    """Multiplicative rank adjustments layered on top of cosine similarity.

    Every boost multiplies the running score, so their order does not
    matter. The result is capped at 1.0.

    Args:
        config: BoostConfig with section multipliers and step sizes.
    """

    def __init__(self, config: BoostConfig) -> None:
        self._config = config
        self._notable = [normalize_text(term) for term in config.notable_terms]

    def query_words(self, query: str) -> list[str]:
        """Distinct normalized query words long enough to count as matches."""
        words = normalize_text(query).split()
        return list(
            dict.fromkeys(w for w in words if len(w) >= self._config.min_word_length)
        )

    def apply(self, query: str, chunk: Chunk, base_similarity: float) -> float:
        score = base_similarity

        multiplier = self._config.section_multipliers.get(chunk.type)
        if multiplier is not None:
            score *= multiplier

        words = self.query_words(query)
        content = normalize_text(chunk.content)
        title = normalize_text(chunk.title)

        exact_matches = sum(1 for w in words if w in content)
        if exact_matches:
            score *= 1 + exact_matches * self._config.exact_match_step

        title_matches = sum(1 for w in words if w in title)
        if title_matches:
            score *= 1 + title_matches * self._config.title_match_step

        notable_in_content = sum(1 for term in self._notable if term in content)
        if notable_in_content and any(w in self._notable for w in words):
            score *= 1 + notable_in_content * self._config.notable_step

        return max(0.0, min(score, 1.0))

"""Section-aware chunker for flat-text résumés."""

import logging
import re
from typing import Callable

from pydantic import BaseModel, ConfigDict

from resume_rag.config import ChunkingConfig
from resume_rag.models.chunk import RawChunk
from resume_rag.retrieval.vectorizer import normalize_text

logger = logging.getLogger(__name__)

FALLBACK_TYPE = "general"

# Section headers, matched against the accent-folded, upper-cased line.
# The alternatives are mutually exclusive: "FORMATION" alone opens
# education, "FORMATIONS COMPLEMENTAIRES" opens training. A bare
# "DIPLOME" only counts as a whole line ("Diplômé en ..." is body text).
SECTION_PATTERNS: dict[str, re.Pattern[str]] = {
    "profile": re.compile(r"^(A PROPOS|PROFIL|PROFILE|PRESENTATION|SUMMARY|ABOUT ME)\b"),
    "training": re.compile(
        r"^(FORMATIONS? COMPLEMENTAIRES?|FORMATION CONTINUE|CERTIFICATIONS?\s*:?$)"
    ),
    "education": re.compile(
        r"^(DIPLOMES\b|EDUCATION\b|ETUDES\b|FORMATION ACADEMIQUE\b"
        r"|(DIPLOME|FORMATIONS?)\s*:?$)"
    ),
    "skills": re.compile(r"^(COMPETENCES|TECHNOLOGIES|SKILLS|TECHNICAL SKILLS)\b"),
    "experience": re.compile(
        r"^(EXPERIENCES?|WORK EXPERIENCE|PROFESSIONAL EXPERIENCE)\b"
    ),
    "projects": re.compile(r"^(PROJETS?|PROJECTS?|REALISATIONS)\b"),
    "languages": re.compile(r"^(LANGUES|LANGUAGES)\b"),
    "contact": re.compile(r"^(CONTACT|COORDONNEES)\b"),
}

# Lines that carry inline content ("Languages: French, English") are never headers.
INLINE_CONTENT = re.compile(r":\s*\S")

EDUCATION_ENTRY = re.compile(r"^(MASTER|BACHELOR|LICENCE|BTS|DUT|DOCTORAT|PHD|MSC|BSC)\b")
EXPERIENCE_ENTRY = re.compile(
    r"^(DEVELOPPEUR|DEVELOPER|STAGE|STAGIAIRE|INTERN|CONSULTANT|INGENIEUR|ENGINEER)\b"
)
TRAINING_ENTRY = re.compile(r"^(FORMATION|CERTIFICATION|CERTIFICAT|COURS|MOOC)\b")


def match_section(line: str) -> str | None:
    """Return the section label a header line opens, or None."""
    if INLINE_CONTENT.search(line):
        return None
    folded = normalize_text(line).upper()
    for section_type, pattern in SECTION_PATTERNS.items():
        if pattern.match(folded):
            return section_type
    return None


class ChunkerState(BaseModel):
    """Chunker state between two lines.

    ``section`` is the last section header seen; it outlives the open
    chunk so consecutive sub-entries of one section each start a chunk.
    """

    model_config = ConfigDict(frozen=True)

    section: str | None = None
    current: RawChunk | None = None


class ResumeChunker:
    """Splits a résumé into labeled chunks, one line at a time.

    For every line, in priority order:
    1. A section header closes the open chunk and opens a section chunk.
    2. Inside a section, a sub-entry line (degree, job title, training,
       project name) closes the open chunk and opens an entry chunk.
    3. Anything else is appended to the open chunk.

    Args:
        config: ChunkingConfig with the minimum chunk length.
    """

    def __init__(self, config: ChunkingConfig) -> None:
        self._config = config
        self._entry_rules: dict[str, tuple[str, Callable[[str], bool]]] = {
            "education": ("education_entry", self._matches(EDUCATION_ENTRY)),
            "experience": ("experience_entry", self._matches(EXPERIENCE_ENTRY)),
            "training": ("training_entry", self._matches(TRAINING_ENTRY)),
            "projects": ("project", self._looks_like_project_title),
        }

    def chunk(self, text: str, source_id: str) -> list[RawChunk]:
        """Split résumé text into an ordered list of chunks.

        Args:
            text: Raw résumé text.
            source_id: Identifier stamped on every chunk (usually the filename).

        Returns:
            Chunks in document order, trimmed, without too-short ones.
        """
        lines = [line.strip() for line in text.splitlines() if line.strip()]

        state = ChunkerState()
        emitted: list[RawChunk] = []
        for line in lines:
            state, chunk = self.advance(state, line, source_id)
            if chunk is not None:
                emitted.append(chunk)

        last = self._close(state.current)
        if last is not None:
            emitted.append(last)

        chunks = [
            chunk.model_copy(
                update={"content": chunk.content.strip(), "title": chunk.title.strip()}
            )
            for chunk in emitted
            if len(chunk.content.strip()) >= self._config.min_chunk_chars
        ]

        logger.info("Chunked %s: %d chunks", source_id, len(chunks))
        for i, chunk in enumerate(chunks, start=1):
            logger.debug("  %d. [%s] %s", i, chunk.type, chunk.title)
        return chunks

    def advance(
        self, state: ChunkerState, line: str, source_id: str
    ) -> tuple[ChunkerState, RawChunk | None]:
        """Consume one trimmed line.

        Returns:
            The next state and the chunk closed by this line, if any.
        """
        if len(line) < 2:
            return state, None

        section = match_section(line)
        if section is not None:
            opened = RawChunk(type=section, title=line, source=source_id)
            return ChunkerState(section=section, current=opened), self._close(state.current)

        if state.section is not None and state.section in self._entry_rules:
            entry_type, is_entry = self._entry_rules[state.section]
            if is_entry(line):
                opened = RawChunk(type=entry_type, title=line, source=source_id)
                return (
                    ChunkerState(section=state.section, current=opened),
                    self._close(state.current),
                )

        if state.current is None:
            # Text before any header: collected under the fallback label
            opened = RawChunk(
                type=FALLBACK_TYPE, title=line, content=line + "\n", source=source_id
            )
            return ChunkerState(section=None, current=opened), None

        appended = state.current.model_copy(
            update={"content": state.current.content + line + "\n"}
        )
        return ChunkerState(section=state.section, current=appended), None

    @staticmethod
    def _close(chunk: RawChunk | None) -> RawChunk | None:
        if chunk is None or not chunk.content.strip():
            return None
        return chunk

    @staticmethod
    def _matches(pattern: re.Pattern[str]) -> Callable[[str], bool]:
        return lambda line: bool(pattern.match(normalize_text(line).upper()))

    def _looks_like_project_title(self, line: str) -> bool:
        """A short capitalized line without a colon or final period names a project."""
        return (
            line[0].isupper()
            and ":" not in line
            and not line.endswith(".")
            and len(line) < self._config.max_project_title_chars
        )

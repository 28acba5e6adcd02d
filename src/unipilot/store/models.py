"""Domain models for the unipilot document store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

SECTION_LABELS: tuple[str, ...] = (
    "admissions",
    "fees",
    "programs",
    "accommodation",
    "contact",
    "application_process",
)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def empty_sections() -> dict[str, str]:
    return {label: "" for label in SECTION_LABELS}


@dataclass
class Chunk:
    """A contiguous slice of normalized text, before it becomes a Document.

    ``start`` and ``end`` are offsets into the normalized text the chunk was
    cut from; ``end`` may exceed the text length for the final window.
    """

    text: str
    index: int
    total_chunks: int
    start: int = 0
    end: int = 0


@dataclass(frozen=True)
class Document:
    """One processed unit of source material (a whole prospectus or one chunk of it)."""

    identifier: str
    source_name: str
    display_name: str
    content: str
    sections: dict[str, str] = field(default_factory=empty_sections)
    chunk_index: int | None = None
    total_chunks: int | None = None
    summary: str = ""
    key_phrases: tuple[str, ...] = ()
    last_updated: str = field(default_factory=utc_now)

    @property
    def word_count(self) -> int:
        return len(self.content.split())

    def to_dict(self) -> dict:
        return {
            "identifier": self.identifier,
            "source_name": self.source_name,
            "display_name": self.display_name,
            "content": self.content,
            "sections": dict(self.sections),
            "word_count": self.word_count,
            "chunk_index": self.chunk_index,
            "total_chunks": self.total_chunks,
            "summary": self.summary,
            "key_phrases": list(self.key_phrases),
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Document:
        sections = empty_sections()
        sections.update(data.get("sections") or {})
        return cls(
            identifier=data["identifier"],
            source_name=data["source_name"],
            display_name=data.get("display_name", ""),
            content=data.get("content", ""),
            sections=sections,
            chunk_index=data.get("chunk_index"),
            total_chunks=data.get("total_chunks"),
            summary=data.get("summary", ""),
            key_phrases=tuple(data.get("key_phrases") or ()),
            last_updated=data.get("last_updated") or utc_now(),
        )

"""Ingestion pipeline: raw text or PDF bytes → normalized, chunked Documents in the store.

Per source:
  1. Extract text (PDF sources only; failure → placeholder Document).
  2. Normalize.
  3. Chunk when the text is longer than one window; drop chunks shorter than
     ``min_substantial_length``.
  4. Derive sections, summary and key phrases per Document.
  5. Replace all previous records of the source in one snapshot write.

Bulk loads run in batches with a pause between batches.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from unipilot.config import ChunkingCfg, SourceMapping
from unipilot.ingest.chunker import TextChunker
from unipilot.ingest.cleaner import normalize
from unipilot.ingest.pdf import PdfTextExtractor
from unipilot.ingest.sections import (
    UNKNOWN_INSTITUTION,
    detect_institution,
    extract_sections,
    key_phrases,
    summarize_chunk,
)
from unipilot.ingest.storage import BlobStorage
from unipilot.store.models import Document
from unipilot.store.repository import DocumentStore

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = "Text extraction failed for"


def is_placeholder(docs: list[Document]) -> bool:
    """True if *docs* is the single failure-note record stored for an unreadable source."""
    return len(docs) == 1 and docs[0].content.startswith(PLACEHOLDER_PREFIX)


@dataclass
class IngestReport:
    """Outcome of a bulk ingestion run.

    Attributes:
        ingested: source name → number of Documents stored.
        placeholders: sources stored as a failure note because no text was extracted.
        failed: source name → reason, for sources that could not be fetched.
    """

    ingested: dict[str, int] = field(default_factory=dict)
    placeholders: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def document_count(self) -> int:
        return sum(self.ingested.values())


class Ingestor:
    """Turn source material into Documents and write them to *store*.

    Args:
        store: Document store that receives the records.
        chunking: Window configuration; defaults to ``ChunkingCfg()``.
        section_chars: Maximum length of each section excerpt.
        storage: Byte source for ``ingest_file`` / ``ingest_sources``.
        extractor: PDF text extractor.
    """

    def __init__(
        self,
        store: DocumentStore,
        chunking: ChunkingCfg | None = None,
        section_chars: int = 1000,
        storage: BlobStorage | None = None,
        extractor: PdfTextExtractor | None = None,
    ) -> None:
        self._store = store
        self._cfg = chunking or ChunkingCfg()
        self._section_chars = section_chars
        self._storage = storage
        self._extractor = extractor or PdfTextExtractor()
        self._chunker = TextChunker(
            chunk_size=self._cfg.chunk_size,
            overlap=self._cfg.chunk_overlap,
            break_threshold=self._cfg.break_threshold,
            min_length=self._cfg.min_chunk_length,
        )

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def add_document(
        self, source_name: str, raw_text: str, display_name: str | None = None
    ) -> list[Document]:
        """Normalize, chunk if needed, and store *raw_text* as *source_name*.

        Re-ingesting a source replaces all of its earlier records. Returns the
        stored Documents in chunk order.
        """
        text = normalize(raw_text)
        institution = display_name or detect_institution(text)
        if not text:
            return self._store_placeholder(source_name, institution)

        if len(text) <= self._cfg.chunk_size:
            docs = [self._build(source_name, source_name, institution, text)]
        else:
            chunks = self._chunker.chunk(text)
            docs = [
                self._build(
                    f"{source_name}#{c.index}",
                    source_name,
                    institution,
                    c.text,
                    chunk_index=c.index,
                    total_chunks=c.total_chunks,
                )
                for c in chunks
                if len(c.text) >= self._cfg.min_substantial_length
            ]
            if not docs:
                docs = [self._build(source_name, source_name, institution, text)]

        stored = self._store.replace_source(source_name, docs)
        logger.info("Stored %s as %d document(s) (%s)", source_name, len(stored), institution)
        return stored

    def ingest_pdf(
        self, source_name: str, data: bytes, display_name: str | None = None
    ) -> list[Document]:
        """Extract text from PDF *data* and store it; unreadable PDFs become a placeholder."""
        text = self._extractor.extract(data)
        if not text.strip():
            logger.warning("No text extracted from %s; storing placeholder", source_name)
            return self._store_placeholder(source_name, display_name or UNKNOWN_INSTITUTION)
        return self.add_document(source_name, text, display_name)

    def ingest_file(self, source_name: str, display_name: str | None = None) -> list[Document]:
        """Fetch *source_name* from storage and ingest it as a PDF.

        Raises:
            RuntimeError: If no storage was configured.
            FileNotFoundError, OSError, ValueError: Propagated from storage.
        """
        if self._storage is None:
            raise RuntimeError("No storage configured for file ingestion")
        data = self._storage.fetch(source_name)
        return self.ingest_pdf(source_name, data, display_name)

    def ingest_sources(
        self,
        sources: Iterable[SourceMapping],
        batch_size: int = 5,
        pause_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> IngestReport:
        """Ingest *sources* sequentially in batches, pausing between batches.

        A source that cannot be fetched is recorded in ``report.failed`` and
        the run continues.
        """
        mappings = list(sources)
        report = IngestReport()
        for offset in range(0, len(mappings), batch_size):
            for mapping in mappings[offset : offset + batch_size]:
                try:
                    docs = self.ingest_file(mapping.file, mapping.institution)
                except (OSError, ValueError) as exc:
                    logger.error("Failed to ingest %s: %s", mapping.file, exc)
                    report.failed[mapping.file] = str(exc)
                    continue
                report.ingested[mapping.file] = len(docs)
                if is_placeholder(docs):
                    report.placeholders.append(mapping.file)
            if offset + batch_size < len(mappings) and pause_seconds > 0:
                sleep(pause_seconds)
        logger.info(
            "Ingestion finished: %d source(s), %d document(s), %d failure(s)",
            len(report.ingested),
            report.document_count,
            len(report.failed),
        )
        return report

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _build(
        self,
        identifier: str,
        source_name: str,
        institution: str,
        text: str,
        chunk_index: int | None = None,
        total_chunks: int | None = None,
    ) -> Document:
        return Document(
            identifier=identifier,
            source_name=source_name,
            display_name=institution,
            content=text,
            sections=extract_sections(text, self._section_chars),
            chunk_index=chunk_index,
            total_chunks=total_chunks,
            summary=summarize_chunk(text, institution),
            key_phrases=tuple(key_phrases(text)),
        )

    def _store_placeholder(self, source_name: str, institution: str) -> list[Document]:
        note = f"{PLACEHOLDER_PREFIX} {source_name}: no readable text was found in the document."
        doc = Document(
            identifier=source_name,
            source_name=source_name,
            display_name=institution,
            content=note,
        )
        return self._store.replace_source(source_name, [doc])

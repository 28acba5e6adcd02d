"""UniversitySearchService: the entry points the CLI (or an embedding application) calls.

The service is constructed explicitly with its collaborators and has an
explicit lifecycle::

    service = UniversitySearchService.from_config(cfg)
    service.start()          # loads the snapshot, starts the completion pool
    service.add_document("uct.pdf", text)
    result = service.search_with_ai("What are the fees at UCT?")
    service.close()

It is also a context manager that calls ``start()`` / ``close()``.
"""

from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass
from pathlib import Path

from unipilot.config import SourceMapping, UnipilotConfig
from unipilot.ingest.pdf import PdfTextExtractor
from unipilot.ingest.pipeline import Ingestor, IngestReport
from unipilot.ingest.storage import BlobStorage, LocalFileStorage
from unipilot.rag.answer import AnswerConfig, AnswerGenerator, AnswerResult, CompletionModel
from unipilot.rag.assembler import AssemblerConfig
from unipilot.rag.llm_client import LiteLLMCompletionModel
from unipilot.rag.scorer import ScorerConfig
from unipilot.store.models import Document
from unipilot.store.repository import DocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentSummary:
    source_name: str
    display_name: str
    word_count: int
    last_updated: str
    chunks: int = 1

    def to_dict(self) -> dict:
        return {
            "sourceName": self.source_name,
            "displayName": self.display_name,
            "wordCount": self.word_count,
            "lastUpdated": self.last_updated,
            "chunks": self.chunks,
        }


@dataclass(frozen=True)
class DocumentListing:
    total_documents: int
    per_document: tuple[DocumentSummary, ...]

    def to_dict(self) -> dict:
        return {
            "totalDocuments": self.total_documents,
            "perDocument": [d.to_dict() for d in self.per_document],
        }


class UniversitySearchService:
    """Ingestion, management and question answering over one document store."""

    def __init__(
        self,
        store: DocumentStore,
        completion: CompletionModel,
        config: UnipilotConfig | None = None,
        storage: BlobStorage | None = None,
        extractor: PdfTextExtractor | None = None,
    ) -> None:
        self._config = config or UnipilotConfig()
        self._store = store
        self._completion = completion
        self._storage = storage
        self._ingestor = Ingestor(
            store,
            chunking=self._config.chunking,
            section_chars=self._config.retrieval.section_chars,
            storage=storage,
            extractor=extractor,
        )
        self._executor: concurrent.futures.ThreadPoolExecutor | None = None
        self._generator: AnswerGenerator | None = None

    @classmethod
    def from_config(
        cls,
        config: UnipilotConfig,
        completion: CompletionModel | None = None,
    ) -> UniversitySearchService:
        """Wire the default collaborators: JSON snapshot store, local PDFs, LiteLLM."""
        gen = config.generation
        return cls(
            store=DocumentStore(Path(config.storage.snapshot_path)),
            completion=completion
            or LiteLLMCompletionModel(
                model=gen.model,
                max_tokens=gen.max_tokens,
                temperature=gen.temperature,
                num_retries=gen.num_retries,
                timeout=gen.timeout_seconds,
            ),
            config=config,
            storage=LocalFileStorage(config.storage.data_dir),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._executor is not None:
            return
        self._store.load()
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="unipilot-completion"
        )
        r = self._config.retrieval
        self._generator = AnswerGenerator(
            self._completion,
            AnswerConfig(
                scorer=ScorerConfig(
                    top_k=r.top_k, name_bonus=r.name_bonus, topic_bonus=r.topic_bonus
                ),
                assembler=AssemblerConfig(
                    budget=r.context_budget, general_info_chars=r.general_info_chars
                ),
                timeout_seconds=self._config.generation.timeout_seconds,
                excerpt_chars=r.excerpt_chars,
            ),
            executor=self._executor,
        )

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
        self._executor = None
        self._generator = None

    def __enter__(self) -> UniversitySearchService:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def add_document(
        self, source_name: str, raw_text: str, display_name: str | None = None
    ) -> list[Document]:
        return self._ingestor.add_document(source_name, raw_text, display_name)

    def add_pdf(
        self, source_name: str, data: bytes, display_name: str | None = None
    ) -> list[Document]:
        return self._ingestor.ingest_pdf(source_name, data, display_name)

    def ingest_file(self, source_name: str, display_name: str | None = None) -> list[Document]:
        return self._ingestor.ingest_file(source_name, display_name)

    def ingest_sources(self, sources: list[SourceMapping] | None = None) -> IngestReport:
        """Bulk-load *sources*.

        Defaults to ``ingest.sources`` from config, or to every PDF in the data
        directory when no sources are configured.
        """
        cfg = self._config.ingest
        if sources is None:
            sources = cfg.sources or self.discover_sources()
        return self._ingestor.ingest_sources(
            sources,
            batch_size=cfg.batch_size,
            pause_seconds=cfg.batch_pause_seconds,
        )

    def discover_sources(self) -> list[SourceMapping]:
        """One mapping per PDF found in storage; empty when there is no storage."""
        if self._storage is None:
            return []
        return [SourceMapping(file=name) for name in self._storage.list_names()]

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def search_with_ai(self, query: str, top_k: int | None = None) -> AnswerResult:
        """Answer *query* from the stored documents. Never raises for model failures.

        Raises:
            RuntimeError: If the service has not been started.
            ValueError: If *top_k* is less than 1.
        """
        if self._generator is None:
            raise RuntimeError("UniversitySearchService.start() has not been called")
        result = self._generator.search(query, self._store.list_documents(), top_k=top_k)
        logger.info(
            "Query answered: %s (%d relevant of %d)",
            type(result).__name__,
            result.relevant_documents,
            result.documents_searched,
        )
        return result

    # ------------------------------------------------------------------
    # Management
    # ------------------------------------------------------------------

    def list_documents(self) -> DocumentListing:
        """Summarize stored material per source file (chunks folded together)."""
        per_source: dict[str, list[Document]] = {}
        docs = self._store.list_documents()
        for doc in docs:
            per_source.setdefault(doc.source_name, []).append(doc)

        summaries = tuple(
            DocumentSummary(
                source_name=name,
                display_name=group[0].display_name,
                word_count=sum(d.word_count for d in group),
                last_updated=max(d.last_updated for d in group),
                chunks=len(group),
            )
            for name, group in per_source.items()
        )
        return DocumentListing(total_documents=len(docs), per_document=summaries)

    def remove_document(self, source_name: str) -> bool:
        """Remove every record of *source_name*. Returns False if there were none."""
        removed = self._store.remove_source(source_name)
        if removed:
            logger.info("Removed %s (%d document(s))", source_name, removed)
        return removed > 0

    def get_document(self, identifier: str) -> Document | None:
        return self._store.get(identifier)

    @property
    def document_count(self) -> int:
        return self._store.size()

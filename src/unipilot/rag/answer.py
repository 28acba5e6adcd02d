"""Answer generation: score → assemble → complete, with a tagged result per query.

Every query ends in exactly one of four results:
  NoData      the store is empty
  NoMatch     no document scored above zero
  ModelError  the completion call failed or timed out (``error_kind`` says how)
  Answered    the model answered from the assembled context

``AnswerGenerator.search`` never raises for model failures; scorer and
assembler errors are bugs and propagate.
"""

from __future__ import annotations

import concurrent.futures
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Protocol

import litellm

from unipilot.rag.assembler import AssemblerConfig, assemble
from unipilot.rag.scorer import ScorerConfig, ScoredDocument, query_tokens, score
from unipilot.store.models import Document

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = (
    "No documents have been loaded yet. Add university prospectus PDFs "
    "before asking questions."
)
NO_MATCH_MESSAGE = (
    "I couldn't find information about that in these documents. Try rephrasing "
    "the question or naming a specific university."
)
NO_MATCH_EXCERPT = "No content matching the question was found in this document."
APOLOGY_MESSAGE = (
    "I apologize, but I encountered an error while generating a response. "
    "Please try again."
)

SYSTEM_PROMPT = (
    "You are a helpful assistant for South African university information. "
    "Answer using ONLY the context from university documents supplied by the user. "
    "If the information is not in the context, say clearly that the documents do "
    "not contain it. Cite the source document (university and file name) for the "
    "facts you use. Be accurate and specific."
)

_USER_PROMPT = """\
Question: {query}

Context from university documents:
{context}

Answer the question using only the context above and cite the source documents."""


class CompletionModel(Protocol):
    def complete(self, system: str, user: str) -> str: ...


class ErrorKind(str, Enum):
    TIMEOUT = "timeout"
    CONNECTIVITY = "connectivity"
    QUOTA = "quota"
    UNKNOWN = "unknown"


# ------------------------------------------------------------------
# Result types
# ------------------------------------------------------------------


@dataclass(frozen=True)
class SourceCitation:
    source_name: str
    display_name: str
    excerpt: str

    def to_dict(self) -> dict:
        return {
            "sourceName": self.source_name,
            "displayName": self.display_name,
            "excerpt": self.excerpt,
        }


@dataclass(frozen=True)
class AnswerResult:
    answer: str
    sources: tuple[SourceCitation, ...] = ()
    documents_searched: int = 0
    relevant_documents: int = 0

    success: ClassVar[bool] = False

    def to_dict(self) -> dict:
        return {
            "answer": self.answer,
            "sources": [s.to_dict() for s in self.sources],
            "documentsSearched": self.documents_searched,
            "relevantDocuments": self.relevant_documents,
            "success": self.success,
        }


@dataclass(frozen=True)
class NoData(AnswerResult):
    pass


@dataclass(frozen=True)
class NoMatch(AnswerResult):
    pass


@dataclass(frozen=True)
class ModelError(AnswerResult):
    error_kind: ErrorKind = ErrorKind.UNKNOWN
    error: str = ""

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["error"] = self.error
        data["errorKind"] = self.error_kind.value
        return data


@dataclass(frozen=True)
class Answered(AnswerResult):
    scored: tuple[ScoredDocument, ...] = field(default=(), repr=False, compare=False)

    success: ClassVar[bool] = True


# ------------------------------------------------------------------
# Error classification
# ------------------------------------------------------------------

_TIMEOUT_WORDS = ("timeout", "timed out")
_QUOTA_WORDS = ("quota", "rate limit", "ratelimit", "429", "insufficient_quota")
_CONNECTIVITY_WORDS = (
    "connection", "connect", "network", "enotfound", "econnrefused",
    "econnreset", "name resolution", "unreachable",
)


def classify_error(exc: BaseException) -> ErrorKind:
    """Bucket a completion failure as timeout, quota, connectivity, or unknown."""
    if isinstance(exc, (litellm.Timeout, TimeoutError, concurrent.futures.TimeoutError)):
        return ErrorKind.TIMEOUT
    if isinstance(exc, litellm.RateLimitError):
        return ErrorKind.QUOTA
    if isinstance(exc, (litellm.APIConnectionError, ConnectionError)):
        return ErrorKind.CONNECTIVITY

    message = str(exc).lower()
    if any(w in message for w in _TIMEOUT_WORDS):
        return ErrorKind.TIMEOUT
    if any(w in message for w in _QUOTA_WORDS):
        return ErrorKind.QUOTA
    if any(w in message for w in _CONNECTIVITY_WORDS):
        return ErrorKind.CONNECTIVITY
    return ErrorKind.UNKNOWN


# ------------------------------------------------------------------
# Excerpts
# ------------------------------------------------------------------

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")


def get_relevant_excerpt(content: str, query: str, max_chars: int = 200) -> str:
    """Return the sentence of *content* containing the most distinct query tokens.

    Ties keep the earliest sentence. The result is cut to *max_chars* and
    followed by an ellipsis. Only used for citations, never for ranking.
    """
    tokens = set(query_tokens(query))
    sentences = [s.strip() for s in _SENTENCE_SPLIT_RE.split(content) if s.strip()]
    if not sentences:
        return content.strip()[:max_chars] + "..."

    best = sentences[0]
    best_hits = -1
    for sentence in sentences:
        lower = sentence.lower()
        hits = sum(1 for t in tokens if t in lower)
        if hits > best_hits:
            best, best_hits = sentence, hits
    return best[:max_chars] + "..."


# ------------------------------------------------------------------
# Generator
# ------------------------------------------------------------------


@dataclass
class AnswerConfig:
    scorer: ScorerConfig = field(default_factory=ScorerConfig)
    assembler: AssemblerConfig = field(default_factory=AssemblerConfig)
    timeout_seconds: float = 15.0
    excerpt_chars: int = 200


class AnswerGenerator:
    """Run one query against a set of documents and shape the result.

    Args:
        completion: Model used to write the answer.
        config: Scoring, assembly, timeout and excerpt settings.
        executor: Pool the completion call runs on so it can be raced against
            the timeout. The caller owns its lifecycle.
    """

    def __init__(
        self,
        completion: CompletionModel,
        config: AnswerConfig | None = None,
        executor: concurrent.futures.Executor | None = None,
    ) -> None:
        self._completion = completion
        self._config = config or AnswerConfig()
        self._executor = executor

    def answer(self, query: str, context: str) -> str:
        """Ask the completion model to answer *query* from *context*. Raises on model failure."""
        user = _USER_PROMPT.format(query=query, context=context)
        return self._completion.complete(SYSTEM_PROMPT, user)

    def search(
        self, query: str, documents: list[Document], top_k: int | None = None
    ) -> AnswerResult:
        """Score, assemble and answer *query* over *documents*.

        Raises:
            ValueError: If *top_k* is given and is less than 1.
        """
        if top_k is not None and top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {top_k}")
        if not documents:
            return NoData(answer=NO_DATA_MESSAGE)

        scorer_cfg = self._config.scorer
        if top_k is not None:
            scorer_cfg = ScorerConfig(
                top_k=top_k,
                name_bonus=scorer_cfg.name_bonus,
                topic_bonus=scorer_cfg.topic_bonus,
                bonus_topics=scorer_cfg.bonus_topics,
            )
        scored = score(query, documents, scorer_cfg)

        if not scored:
            return NoMatch(
                answer=NO_MATCH_MESSAGE,
                sources=tuple(
                    SourceCitation(d.source_name, d.display_name, NO_MATCH_EXCERPT)
                    for d in documents
                ),
                documents_searched=len(documents),
            )

        context = assemble(scored, query, self._config.assembler)
        try:
            text = self._run_with_timeout(query, context)
        except Exception as exc:
            kind = classify_error(exc)
            logger.error("Completion failed (%s): %s", kind.value, exc)
            return ModelError(
                answer=APOLOGY_MESSAGE,
                documents_searched=len(documents),
                relevant_documents=len(scored),
                error_kind=kind,
                error=str(exc) or type(exc).__name__,
            )

        return Answered(
            answer=text,
            sources=tuple(
                SourceCitation(
                    sd.document.source_name,
                    sd.document.display_name,
                    get_relevant_excerpt(sd.document.content, query, self._config.excerpt_chars),
                )
                for sd in scored
            ),
            documents_searched=len(documents),
            relevant_documents=len(scored),
            scored=tuple(scored),
        )

    def _run_with_timeout(self, query: str, context: str) -> str:
        if self._executor is None:
            return self.answer(query, context)
        future = self._executor.submit(self.answer, query, context)
        try:
            return future.result(timeout=self._config.timeout_seconds)
        except concurrent.futures.TimeoutError:
            future.cancel()
            logger.warning(
                "Completion did not finish within %.1fs", self._config.timeout_seconds
            )
            raise

"""Lexical relevance scorer.

score(doc) = Σ occurrences of each query token (len > 2) in doc.content
           + name_bonus   if doc.content contains the whole query,
                          or the query contains doc.display_name
           + topic_bonus  for each bonus topic the query mentions whose
                          section in doc is non-empty

Matching is case-insensitive literal substring counting. Documents scoring
zero are dropped. Ties keep store insertion order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from unipilot.rag.topics import SECTION_FOR_TOPIC, Topic, classify_query
from unipilot.store.models import Document


@dataclass
class ScorerConfig:
    top_k: int = 5
    name_bonus: int = 10
    topic_bonus: int = 5
    bonus_topics: frozenset[Topic] = field(
        default_factory=lambda: frozenset([Topic.FEES, Topic.ADMISSIONS])
    )


@dataclass(frozen=True)
class ScoredDocument:
    document: Document
    relevance_score: int


def query_tokens(query: str) -> list[str]:
    """Lowercased whitespace tokens of *query* longer than two characters."""
    return [t for t in query.lower().split() if len(t) > 2]


def score_document(
    query: str,
    document: Document,
    config: ScorerConfig,
    topics: Iterable[Topic] | None = None,
) -> int:
    query_lower = query.lower()
    content_lower = document.content.lower()

    score = sum(content_lower.count(token) for token in query_tokens(query))

    name = document.display_name.lower()
    if (query_lower and query_lower in content_lower) or (name and name in query_lower):
        score += config.name_bonus

    for topic in topics if topics is not None else classify_query(query):
        section = SECTION_FOR_TOPIC.get(topic)
        if topic in config.bonus_topics and section and document.sections.get(section):
            score += config.topic_bonus

    return score


def score(
    query: str,
    documents: list[Document],
    config: ScorerConfig | None = None,
) -> list[ScoredDocument]:
    """Return documents with a positive score, best first, at most ``config.top_k``."""
    config = config or ScorerConfig()
    if not documents:
        return []

    topics = classify_query(query)
    scored = [
        ScoredDocument(document=doc, relevance_score=s)
        for doc in documents
        if (s := score_document(query, doc, config, topics)) > 0
    ]
    scored.sort(key=lambda sd: sd.relevance_score, reverse=True)
    return scored[: config.top_k]

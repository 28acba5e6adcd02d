"""Query topic classification shared by the scorer and the context assembler."""

from __future__ import annotations

from enum import Enum


class Topic(str, Enum):
    FEES = "fees"
    ADMISSIONS = "admissions"
    PROGRAMS = "programs"
    ACCOMMODATION = "accommodation"
    GENERAL = "general"


# Keywords are matched as substrings of the lowercased query.
_KEYWORDS: dict[Topic, tuple[str, ...]] = {
    Topic.FEES: ("fee", "cost", "cheap"),
    Topic.ADMISSIONS: ("admission", "requirement"),
    Topic.PROGRAMS: ("program", "course", "degree"),
    Topic.ACCOMMODATION: ("accommodation", "residence", "housing"),
}

# Document section each topic reads from.
SECTION_FOR_TOPIC: dict[Topic, str] = {
    Topic.FEES: "fees",
    Topic.ADMISSIONS: "admissions",
    Topic.PROGRAMS: "programs",
    Topic.ACCOMMODATION: "accommodation",
}

# Heading used for the topic's block in the assembled context.
CONTEXT_LABELS: dict[Topic, str] = {
    Topic.FEES: "FEES INFORMATION",
    Topic.ADMISSIONS: "ADMISSION REQUIREMENTS",
    Topic.PROGRAMS: "PROGRAMS OFFERED",
    Topic.ACCOMMODATION: "ACCOMMODATION",
}


def classify_query(query: str) -> frozenset[Topic]:
    """Return every specific topic *query* mentions, or ``{Topic.GENERAL}`` if none."""
    lower = query.lower()
    topics = frozenset(
        topic for topic, words in _KEYWORDS.items() if any(w in lower for w in words)
    )
    return topics or frozenset([Topic.GENERAL])

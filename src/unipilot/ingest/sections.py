"""Best-effort metadata derived from prospectus text.

Section excerpts, institution detection, and the per-chunk summary and key
phrases stored alongside each Document. All heuristics are plain regex and
word counting; nothing here calls a model.
"""

from __future__ import annotations

import re
from collections import Counter

from unipilot.store.models import SECTION_LABELS, empty_sections

UNKNOWN_INSTITUTION = "Unknown University"

KNOWN_INSTITUTIONS: tuple[str, ...] = (
    "University of Cape Town",
    "University of the Witwatersrand",
    "Stellenbosch University",
    "University of Pretoria",
    "University of KwaZulu-Natal",
    "University of the Free State",
    "Rhodes University",
)

_SECTION_PATTERNS: dict[str, re.Pattern[str]] = {
    "admissions": re.compile(
        r"admission requirements?|entry requirements?|minimum requirements?"
        r"|admission point score|\bAPS\b",
        re.IGNORECASE,
    ),
    "fees": re.compile(
        r"tuition fees?|annual fees?|cost of study|\btuition\b|\bfees?\b|\bcosts?\b",
        re.IGNORECASE,
    ),
    "programs": re.compile(
        r"programmes? offered|\bprogram(?:me)?s?\b|\bdegrees?\b|\bfacult(?:y|ies)\b",
        re.IGNORECASE,
    ),
    "accommodation": re.compile(r"accommodation|\bresidences?\b|\bhousing\b", re.IGNORECASE),
    "contact": re.compile(
        r"contact us|contact details|\be-?mail\b|\btel(?:ephone)?\b",
        re.IGNORECASE,
    ),
    "application_process": re.compile(
        r"how to apply|apply online|application process|applications? (?:open|close)",
        re.IGNORECASE,
    ),
}

# How far back from a keyword hit an excerpt may start, looking for a sentence start.
_LOOKBACK = 200

_STOP_WORDS = frozenset(
    [
        "and", "the", "for", "are", "you", "will", "can", "may", "must",
        "have", "this", "that", "with", "from",
    ]
)


def extract_sections(content: str, max_chars: int = 1000) -> dict[str, str]:
    """Return one excerpt (≤ *max_chars*) per section label; ``""`` where nothing matched."""
    sections = empty_sections()
    for label in SECTION_LABELS:
        match = _SECTION_PATTERNS[label].search(content)
        if match is None:
            continue
        floor = max(0, match.start() - _LOOKBACK)
        sentence_start = content.rfind(". ", floor, match.start())
        start = sentence_start + 2 if sentence_start != -1 else floor
        sections[label] = content[start : start + max_chars].strip()
    return sections


def detect_institution(text: str) -> str:
    """Return the first known institution named in *text*, else ``UNKNOWN_INSTITUTION``."""
    for name in KNOWN_INSTITUTIONS:
        if name in text:
            return name
    return UNKNOWN_INSTITUTION


def summarize_chunk(text: str, institution: str) -> str:
    """One-line description: content type, institution, and the chunk's first sentence."""
    lower = text.lower()
    if "admission" in lower or "application" in lower:
        content_type = "Admission requirements"
    elif "fee" in lower or "cost" in lower:
        content_type = "Fees and costs"
    elif "program" in lower or "course" in lower or "degree" in lower:
        content_type = "Academic programs"
    elif "accommodation" in lower or "residence" in lower:
        content_type = "Accommodation information"
    elif "bursary" in lower or "financial aid" in lower:
        content_type = "Financial aid information"
    elif "faculty" in lower or "department" in lower:
        content_type = "Faculty information"
    else:
        content_type = "General information"

    first_sentence = text.split(".")[0]
    return f"{content_type} for {institution}: {first_sentence[:150]}..."


def key_phrases(text: str, limit: int = 5) -> list[str]:
    """Most frequent words longer than three characters, stop words removed."""
    words = [w for w in re.sub(r"[^\w\s]", " ", text.lower()).split() if len(w) > 3]
    top = [word for word, _ in Counter(words).most_common(10)]
    return [w for w in top if w not in _STOP_WORDS][:limit]

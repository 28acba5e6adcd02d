"""Text cleanup for text extracted from prospectus PDFs."""

from __future__ import annotations

import re

_PAGE_LABEL_RE = re.compile(r"Page\s+\d+", re.IGNORECASE)
_DIGIT_LINE_RE = re.compile(r"^\d+\s*$", re.MULTILINE)
_WHITESPACE_RE = re.compile(r"\s+")
_DOTS_RE = re.compile(r"\.{3,}")
_DASHES_RE = re.compile(r"-{3,}")
# PDF extraction often drops the space between words: "admissionRequirements"
_JOINED_WORDS_RE = re.compile(r"([a-z])([A-Z])")


def normalize(raw: str) -> str:
    """Return *raw* with PDF extraction artifacts removed.

    Page labels ("Page 12") and digit-only lines are dropped, whitespace runs
    collapse to one space, dot and dash leaders shrink to three characters and
    a space is put back between a lowercase letter and a following uppercase
    one. Never raises; empty input gives an empty string.
    """
    text = _PAGE_LABEL_RE.sub("", raw)
    text = _DIGIT_LINE_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text)
    text = _DOTS_RE.sub("...", text)
    text = _DASHES_RE.sub("---", text)
    text = _JOINED_WORDS_RE.sub(r"\1 \2", text)
    return text.strip()

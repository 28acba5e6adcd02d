"""Tests for AnswerGenerator and the tagged answer results."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import litellm
import pytest

from unipilot.rag.answer import (
    APOLOGY_MESSAGE,
    NO_DATA_MESSAGE,
    NO_MATCH_EXCERPT,
    NO_MATCH_MESSAGE,
    SYSTEM_PROMPT,
    AnswerConfig,
    Answered,
    AnswerGenerator,
    ErrorKind,
    ModelError,
    NoData,
    NoMatch,
    classify_error,
    get_relevant_excerpt,
)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _corpus(make_doc):
    return [
        make_doc(
            "uct.pdf",
            content="The University of Cape Town charges tuition fees of R65000. Campus is lovely.",
            display_name="University of Cape Town",
            fees="Tuition fees of R65000.",
        ),
        make_doc(
            "up.pdf",
            content="Pretoria offers engineering degrees. Residence is available.",
            display_name="University of Pretoria",
        ),
    ]


class _BlockingCompletion:
    def __init__(self):
        self.release = threading.Event()

    def complete(self, system: str, user: str) -> str:
        self.release.wait(5)
        return "too late"


# ------------------------------------------------------------------
# search()
# ------------------------------------------------------------------


def test_search_empty_store_is_no_data(fake_completion):
    result = AnswerGenerator(fake_completion).search("fees?", [])
    assert isinstance(result, NoData)
    assert result.answer == NO_DATA_MESSAGE
    assert result.success is False
    assert result.sources == ()
    assert result.documents_searched == 0
    assert fake_completion.calls == []


def test_search_no_match_lists_every_document(fake_completion, make_doc):
    docs = _corpus(make_doc)
    result = AnswerGenerator(fake_completion).search("xylophone quartet", docs)
    assert isinstance(result, NoMatch)
    assert result.answer == NO_MATCH_MESSAGE
    assert [s.source_name for s in result.sources] == ["uct.pdf", "up.pdf"]
    assert all(s.excerpt == NO_MATCH_EXCERPT for s in result.sources)
    assert result.documents_searched == 2
    assert result.relevant_documents == 0
    assert fake_completion.calls == []


def test_search_answered(fake_completion, make_doc):
    result = AnswerGenerator(fake_completion).search("What are the tuition fees?", _corpus(make_doc))
    assert isinstance(result, Answered)
    assert result.success is True
    assert result.answer == "Fees are R65000."
    assert result.documents_searched == 2
    assert result.relevant_documents == 1
    assert result.sources[0].source_name == "uct.pdf"
    assert result.sources[0].excerpt.startswith("The University of Cape Town charges tuition fees")


def test_search_prompt_contains_query_and_context(fake_completion, make_doc):
    AnswerGenerator(fake_completion).search("What are the tuition fees?", _corpus(make_doc))
    system, user = fake_completion.calls[0]
    assert system == SYSTEM_PROMPT
    assert "What are the tuition fees?" in user
    assert "=== University of Cape Town (uct.pdf) ===" in user
    assert "FEES INFORMATION:\nTuition fees of R65000." in user


def test_search_top_k_override(fake_completion, make_doc):
    docs = [make_doc(f"d{i}.pdf", content="fees " * (i + 1), display_name="") for i in range(6)]
    result = AnswerGenerator(fake_completion).search("fees", docs, top_k=2)
    assert [s.source_name for s in result.sources] == ["d5.pdf", "d4.pdf"]
    assert result.relevant_documents == 2


def test_search_model_error(completion_cls, make_doc):
    completion = completion_cls(error=RuntimeError("connection refused"))
    result = AnswerGenerator(completion).search("tuition fees", _corpus(make_doc))
    assert isinstance(result, ModelError)
    assert result.answer == APOLOGY_MESSAGE
    assert result.error_kind is ErrorKind.CONNECTIVITY
    assert result.error == "connection refused"
    assert result.sources == ()
    assert result.documents_searched == 2
    assert result.relevant_documents == 1
    data = result.to_dict()
    assert data["success"] is False
    assert data["errorKind"] == "connectivity"


def test_search_model_error_is_logged(completion_cls, make_doc, caplog):
    completion = completion_cls(error=RuntimeError("boom"))
    with caplog.at_level("ERROR", logger="unipilot.rag.answer"):
        AnswerGenerator(completion).search("tuition fees", _corpus(make_doc))
    assert "Completion failed (unknown): boom" in caplog.text


def test_search_times_out(make_doc):
    completion = _BlockingCompletion()
    with ThreadPoolExecutor(max_workers=1) as pool:
        generator = AnswerGenerator(
            completion, AnswerConfig(timeout_seconds=0.05), executor=pool
        )
        result = generator.search("tuition fees", _corpus(make_doc))
        completion.release.set()
    assert isinstance(result, ModelError)
    assert result.error_kind is ErrorKind.TIMEOUT


def test_answered_to_dict(fake_completion, make_doc):
    data = AnswerGenerator(fake_completion).search("tuition fees", _corpus(make_doc)).to_dict()
    assert data["success"] is True
    assert data["documentsSearched"] == 2
    assert data["sources"][0]["sourceName"] == "uct.pdf"
    assert data["sources"][0]["displayName"] == "University of Cape Town"
    assert "errorKind" not in data


# ------------------------------------------------------------------
# classify_error()
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    "exc, kind",
    [
        (TimeoutError(), ErrorKind.TIMEOUT),
        (RuntimeError("Request timed out"), ErrorKind.TIMEOUT),
        (RuntimeError("Rate limit reached: 429"), ErrorKind.QUOTA),
        (RuntimeError("You exceeded your current quota"), ErrorKind.QUOTA),
        (ConnectionError("reset"), ErrorKind.CONNECTIVITY),
        (RuntimeError("getaddrinfo ENOTFOUND api.openai.com"), ErrorKind.CONNECTIVITY),
        (ValueError("something odd"), ErrorKind.UNKNOWN),
    ],
)
def test_classify_error(exc, kind):
    assert classify_error(exc) is kind


def test_classify_litellm_rate_limit():
    exc = litellm.RateLimitError(message="slow down", llm_provider="openai", model="gpt-4o-mini")
    assert classify_error(exc) is ErrorKind.QUOTA


# ------------------------------------------------------------------
# get_relevant_excerpt()
# ------------------------------------------------------------------


def test_excerpt_picks_sentence_with_most_tokens():
    content = "Campus is green. Tuition fees are R65000 per year. Fees rise yearly."
    assert get_relevant_excerpt(content, "tuition fees per year") == (
        "Tuition fees are R65000 per year..."
    )


def test_excerpt_ties_keep_first_sentence():
    content = "Alpha beta. Gamma delta."
    assert get_relevant_excerpt(content, "nothing matches") == "Alpha beta..."


def test_excerpt_truncated():
    assert get_relevant_excerpt("x" * 500, "x", max_chars=200) == "x" * 200 + "..."


def test_excerpt_empty_content():
    assert get_relevant_excerpt("", "fees") == "..."


def test_fees_question_puts_fees_block_in_prompt(fake_completion, make_doc):
    doc = make_doc(
        "uct.pdf",
        content="Annual tuition is R65000 for undergraduate study.",
        display_name="University of Cape Town",
        fees="Annual tuition is R65000.",
    )
    result = AnswerGenerator(fake_completion).search("what are the fees", [doc])
    assert isinstance(result, Answered)
    assert result.relevant_documents == 1
    assert len(fake_completion.calls) == 1
    assert "FEES INFORMATION:\nAnnual tuition is R65000." in fake_completion.calls[0][1]


@pytest.mark.parametrize("top_k", [0, -1])
def test_search_rejects_top_k_below_one(fake_completion, make_doc, top_k):
    with pytest.raises(ValueError, match="top_k must be >= 1"):
        AnswerGenerator(fake_completion).search("fees", _corpus(make_doc), top_k=top_k)
    assert fake_completion.calls == []

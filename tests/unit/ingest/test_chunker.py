"""Tests for the sentence-aware overlapping chunker."""

from __future__ import annotations

import pytest

from unipilot.ingest.chunker import TextChunker, chunk
from unipilot.store.models import Chunk


def _sentences(n: int) -> str:
    return " ".join(f"Sentence number {i} describes a programme offered." for i in range(n))


def test_chunker_defaults():
    chunker = TextChunker()
    assert chunker.chunk_size == 2000
    assert chunker.overlap == 200
    assert chunker.break_threshold == pytest.approx(0.5)
    assert chunker.min_length == 50


def test_chunker_rejects_bad_size():
    with pytest.raises(ValueError):
        TextChunker(chunk_size=0)


def test_chunker_rejects_negative_overlap():
    with pytest.raises(ValueError):
        TextChunker(overlap=-1)


def test_chunk_empty_text():
    assert chunk("") == []


def test_chunk_short_text_single_chunk():
    text = "The University of Cape Town offers undergraduate degrees in many faculties."
    chunks = chunk(text, size=2000, overlap=200)
    assert len(chunks) == 1
    assert chunks[0].text == text
    assert chunks[0].index == 0
    assert chunks[0].total_chunks == 1


def test_chunk_returns_chunk_objects():
    chunks = chunk(_sentences(100), size=500, overlap=50)
    assert all(isinstance(c, Chunk) for c in chunks)
    assert [c.index for c in chunks] == list(range(len(chunks)))
    assert all(c.total_chunks == len(chunks) for c in chunks)


def test_chunk_hard_cut_5000_chars_gives_three_chunks():
    text = "x" * 5000
    chunks = chunk(text, size=2000, overlap=200)
    assert len(chunks) == 3
    assert [c.start for c in chunks] == [0, 1800, 3600]
    assert chunks[1].start <= chunks[0].end
    assert [len(c.text) for c in chunks] == [2000, 2000, 1400]


def test_chunk_prefers_sentence_break_past_threshold():
    text = "A" * 1500 + "." + "B" * 1000
    chunks = chunk(text, size=2000, overlap=200)
    assert chunks[0].text.endswith(".")
    assert len(chunks[0].text) == 1501
    assert chunks[1].start == 1301


def test_chunk_ignores_sentence_break_before_threshold():
    text = "A" * 500 + "." + "B" * 2000
    chunks = chunk(text, size=2000, overlap=200)
    assert len(chunks[0].text) == 2000


def test_chunk_breaks_on_newline():
    text = "A" * 1600 + "\n" + "B" * 1000
    chunks = TextChunker(chunk_size=2000, overlap=0).chunk(text)
    assert chunks[0].end == 1601
    assert chunks[1].text == "B" * 1000


def test_chunk_drops_short_trailing_window():
    text = "z" * 120
    chunks = TextChunker(chunk_size=100, overlap=0).chunk(text)
    assert len(chunks) == 1
    assert chunks[0].text == "z" * 100


def test_chunk_retained_chunks_exceed_min_length():
    chunks = TextChunker(chunk_size=80, overlap=10).chunk(_sentences(40))
    assert chunks
    assert all(len(c.text) > 50 for c in chunks)


def test_chunk_overlap_larger_than_size_terminates():
    text = "y" * 300
    chunks = TextChunker(chunk_size=100, overlap=150).chunk(text)
    assert 0 < len(chunks) <= len(text)
    starts = [c.start for c in chunks]
    assert starts == sorted(set(starts))


def test_chunk_size_one_terminates():
    chunks = TextChunker(chunk_size=1, overlap=0, min_length=0).chunk("abc")
    assert [c.text for c in chunks] == ["a", "b", "c"]


def test_chunk_consecutive_windows_leave_no_gap():
    chunks = chunk(_sentences(200), size=700, overlap=100)
    assert len(chunks) > 2
    for prev, nxt in zip(chunks, chunks[1:]):
        assert nxt.start <= prev.end
        assert prev.end - nxt.start <= 100


def test_chunk_text_is_slice_of_source():
    text = _sentences(120)
    for c in chunk(text, size=600, overlap=80):
        assert c.text == text[c.start : c.end].strip()

"""Shared pytest fixtures."""

from __future__ import annotations

import logging

import pytest

from unipilot.store.models import Document, empty_sections
from unipilot.store.repository import DocumentStore


class FakeCompletion:
    """Completion model double: records prompts, returns a canned answer or raises."""

    def __init__(self, answer: str = "Fees are R65000.", error: Exception | None = None):
        self.answer = answer
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def complete(self, system: str, user: str) -> str:
        self.calls.append((system, user))
        if self.error is not None:
            raise self.error
        return self.answer


def _make_doc(
    identifier: str = "doc.pdf",
    content: str = "General prospectus content.",
    display_name: str = "Test University",
    source_name: str | None = None,
    **sections: str,
) -> Document:
    secs = empty_sections()
    secs.update(sections)
    return Document(
        identifier=identifier,
        source_name=source_name or identifier,
        display_name=display_name,
        content=content,
        sections=secs,
    )


@pytest.fixture
def fake_completion() -> FakeCompletion:
    return FakeCompletion()


@pytest.fixture
def snapshot_path(tmp_path):
    return tmp_path / "processed" / "documents.json"


@pytest.fixture
def store(snapshot_path) -> DocumentStore:
    """Snapshot-backed store in tmp_path, already loaded (empty)."""
    s = DocumentStore(snapshot_path)
    s.load()
    return s


@pytest.fixture(autouse=True)
def _reset_unipilot_logger():
    """Undo handlers/propagation the CLI installs so caplog keeps working."""
    yield
    logger = logging.getLogger("unipilot")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def make_doc():
    """Factory: make_doc(identifier, content, display_name, source_name, **sections)."""
    return _make_doc


@pytest.fixture
def completion_cls():
    return FakeCompletion

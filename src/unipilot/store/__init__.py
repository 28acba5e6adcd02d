"""Unipilot document store."""

from unipilot.store.models import SECTION_LABELS, Chunk, Document
from unipilot.store.repository import DocumentStore

__all__ = [
    "Chunk",
    "Document",
    "DocumentStore",
    "SECTION_LABELS",
]

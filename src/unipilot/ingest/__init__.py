"""Unipilot ingest pipeline: extraction, normalization, chunking, section excerpts."""

from unipilot.ingest.chunker import TextChunker
from unipilot.ingest.cleaner import normalize
from unipilot.ingest.pdf import PdfTextExtractor
from unipilot.ingest.pipeline import Ingestor, IngestReport
from unipilot.ingest.storage import LocalFileStorage

__all__ = [
    "IngestReport",
    "Ingestor",
    "LocalFileStorage",
    "PdfTextExtractor",
    "TextChunker",
    "normalize",
]

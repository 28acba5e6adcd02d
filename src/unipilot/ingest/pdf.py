"""PDF text extraction via pypdf.

This is an I/O boundary: a corrupt or unreadable PDF yields ``""`` (or the
text of the pages that could be read) instead of an exception.
"""

from __future__ import annotations

import logging
from io import BytesIO

import pypdf

logger = logging.getLogger(__name__)


class PdfTextExtractor:
    """Extract plain text from PDF bytes, page by page."""

    def extract(self, data: bytes) -> str:
        """Return the concatenated page text of *data*.

        Pages that yield no text (scanned images, etc.) are skipped. Pages that
        fail to extract are logged and skipped.
        """
        try:
            reader = pypdf.PdfReader(BytesIO(data))
            pages = list(reader.pages)
        except Exception as exc:  # pypdf raises a wide range of errors on bad input
            logger.warning("Could not open PDF (%d bytes): %s", len(data), exc)
            return ""

        parts: list[str] = []
        for number, page in enumerate(pages, start=1):
            try:
                page_text = page.extract_text() or ""
            except Exception as exc:
                logger.warning("Could not extract text from page %d: %s", number, exc)
                continue
            stripped = page_text.strip()
            if stripped:
                parts.append(stripped)
        return "\n\n".join(parts)

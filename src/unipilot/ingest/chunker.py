"""Sentence-aware overlapping window chunker."""

from __future__ import annotations

from unipilot.store.models import Chunk


class TextChunker:
    """Split normalized text into overlapping windows that prefer sentence ends.

    Each window starts ``chunk_size`` characters long. When more text follows,
    the window is pulled back to the last ``.`` or newline at or before the
    cutoff, provided that break lies beyond ``break_threshold * chunk_size``
    from the window start; otherwise the hard cutoff is kept. The next window
    starts ``overlap`` characters before the previous end, and always at least
    one character after the previous start.

    Windows whose trimmed text is ``min_length`` characters or shorter are
    dropped.
    """

    def __init__(
        self,
        chunk_size: int = 2000,
        overlap: int = 200,
        break_threshold: float = 0.5,
        min_length: int = 50,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if overlap < 0:
            raise ValueError("overlap must be >= 0")
        if not 0.0 <= break_threshold <= 1.0:
            raise ValueError("break_threshold must be in [0.0, 1.0]")
        self.chunk_size = chunk_size
        self.overlap = overlap
        self.break_threshold = break_threshold
        self.min_length = min_length

    def chunk(self, text: str) -> list[Chunk]:
        """Return the retained windows of *text* with sequential indexes."""
        spans = self._split(text)
        return [
            Chunk(text=t, index=i, total_chunks=len(spans), start=s, end=e)
            for i, (t, s, e) in enumerate(spans)
        ]

    def _split(self, text: str) -> list[tuple[str, int, int]]:
        spans: list[tuple[str, int, int]] = []
        length = len(text)
        start = 0

        while start < length:
            end = start + self.chunk_size

            if end < length:
                breakpoint_ = max(text.rfind(".", 0, end + 1), text.rfind("\n", 0, end + 1))
                if breakpoint_ > start + self.chunk_size * self.break_threshold:
                    end = breakpoint_ + 1

            segment = text[start:end].strip()
            if len(segment) > self.min_length:
                spans.append((segment, start, end))

            start = max(start + 1, end - self.overlap)

        return spans


def chunk(text: str, size: int = 2000, overlap: int = 200) -> list[Chunk]:
    """Chunk *text* with the default break threshold and minimum length."""
    return TextChunker(chunk_size=size, overlap=overlap).chunk(text)

"""Raw PDF storage: list source names and fetch their bytes."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class BlobStorage(Protocol):
    def fetch(self, name: str) -> bytes: ...

    def list_names(self, suffix: str = ".pdf") -> list[str]: ...


class LocalFileStorage:
    """Read source files from a local directory.

    Names are resolved relative to *root*; names that escape it are rejected.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def fetch(self, name: str) -> bytes:
        """Return the bytes of *name*.

        Raises:
            FileNotFoundError: If *name* does not exist under the root.
            ValueError: If *name* resolves outside the root.
        """
        root = self.root.resolve()
        path = (root / name).resolve()
        if root not in path.parents and path != root:
            raise ValueError(f"Source name escapes storage root: {name!r}")
        if not path.is_file():
            raise FileNotFoundError(f"No such source file: {path}")
        return path.read_bytes()

    def list_names(self, suffix: str = ".pdf") -> list[str]:
        """Return the sorted names of files under the root ending in *suffix*."""
        if not self.root.is_dir():
            return []
        return sorted(
            p.name for p in self.root.iterdir() if p.is_file() and p.suffix.lower() == suffix
        )

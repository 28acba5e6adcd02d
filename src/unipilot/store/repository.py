"""Document store: the single owner of processed Document records.

Records live in a dict that is never mutated after publication. Writers build a
new dict under ``_write_lock`` and swap the reference; readers grab whatever
dict is current and never block. Every mutation is followed by a write of the
whole store to a JSON snapshot (temp file + atomic rename).

A failed snapshot write is logged and swallowed: in-memory state stays
authoritative for the lifetime of the process.
"""

from __future__ import annotations

import copy
import dataclasses
import json
import logging
import os
import tempfile
import threading
from pathlib import Path

from unipilot.store.models import Document, utc_now

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class DocumentStore:
    """Mapping of identifier → Document with whole-store snapshot persistence.

    Args:
        snapshot_path: JSON file to load from and write to. ``None`` keeps the
            store purely in memory.
    """

    def __init__(self, snapshot_path: Path | str | None = None) -> None:
        self.snapshot_path = Path(snapshot_path) if snapshot_path is not None else None
        self._docs: dict[str, Document] = {}
        self._write_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> int:
        """Replace in-memory state with the snapshot on disk. Returns the record count.

        A missing snapshot is not an error and yields an empty store. An
        unreadable snapshot is logged and also yields an empty store.
        """
        docs: dict[str, Document] = {}
        if self.snapshot_path is not None and self.snapshot_path.exists():
            try:
                raw = json.loads(self.snapshot_path.read_text(encoding="utf-8"))
                records = raw.get("documents", {}) if isinstance(raw, dict) else {}
                for identifier, record in records.items():
                    docs[identifier] = Document.from_dict(record)
            except (OSError, ValueError, KeyError, TypeError) as exc:
                logger.error(
                    "Could not read snapshot %s (%s); starting with an empty store",
                    self.snapshot_path,
                    exc,
                )
                docs = {}
        with self._write_lock:
            self._docs = docs
        logger.info("Loaded %d document(s) from snapshot", len(docs))
        return len(docs)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, identifier: str) -> Document | None:
        doc = self._docs.get(identifier)
        return copy.deepcopy(doc) if doc is not None else None

    def list_documents(self) -> list[Document]:
        """Return copies of all records in insertion order."""
        return [copy.deepcopy(d) for d in self._docs.values()]

    def list_by_source(self, source_name: str) -> list[Document]:
        return [copy.deepcopy(d) for d in self._docs.values() if d.source_name == source_name]

    def size(self) -> int:
        return len(self._docs)

    def __len__(self) -> int:
        return len(self._docs)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._docs

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add(self, identifier: str, document: Document) -> Document:
        """Upsert *document* under *identifier* and persist. Returns the stored copy."""
        stored = dataclasses.replace(
            copy.deepcopy(document), identifier=identifier, last_updated=utc_now()
        )
        with self._write_lock:
            docs = dict(self._docs)
            docs[identifier] = stored
            self._publish(docs)
        return copy.deepcopy(stored)

    def remove(self, identifier: str) -> bool:
        """Delete *identifier*. Returns False (and writes nothing) if it was absent."""
        with self._write_lock:
            if identifier not in self._docs:
                return False
            docs = dict(self._docs)
            del docs[identifier]
            self._publish(docs)
        return True

    def replace_source(self, source_name: str, documents: list[Document]) -> list[Document]:
        """Swap every record of *source_name* for *documents* in one snapshot write.

        Readers see either all of the old records or all of the new ones.
        """
        now = utc_now()
        stored = [
            dataclasses.replace(copy.deepcopy(d), source_name=source_name, last_updated=now)
            for d in documents
        ]
        with self._write_lock:
            docs = {k: v for k, v in self._docs.items() if v.source_name != source_name}
            for d in stored:
                docs[d.identifier] = d
            self._publish(docs)
        return [copy.deepcopy(d) for d in stored]

    def remove_source(self, source_name: str) -> int:
        """Delete every record of *source_name*. Returns the number removed."""
        with self._write_lock:
            docs = {k: v for k, v in self._docs.items() if v.source_name != source_name}
            removed = len(self._docs) - len(docs)
            if removed:
                self._publish(docs)
        return removed

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _publish(self, docs: dict[str, Document]) -> None:
        """Make *docs* current and write it out. Caller holds ``_write_lock``."""
        self._docs = docs
        self._persist(docs)

    def _persist(self, docs: dict[str, Document]) -> None:
        if self.snapshot_path is None:
            return
        payload = {
            "version": SNAPSHOT_VERSION,
            "documents": {k: v.to_dict() for k, v in docs.items()},
        }
        try:
            self.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.snapshot_path.parent, prefix=".snapshot-", suffix=".json"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(payload, fh, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self.snapshot_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.error(
                "Failed to write snapshot %s: %s (in-memory state kept)",
                self.snapshot_path,
                exc,
            )

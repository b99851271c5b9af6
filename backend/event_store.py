"""
Event store: JSON-file persistence for `visits` and `actions`.

This file contains only storage code. It maps the on-disk document to
`StorageDocument` and back. Keep aggregation rules out of this module.

Important notes:
- Every mutation reads the whole document, appends in memory and
  rewrites the whole file. Cost grows with the number of stored events,
  so this suits personal sites and small deployments only.
- Writes go to a temp file in the same directory followed by
  `os.replace`, so readers see either the old or the new document.
- A `threading.Lock` serializes read-modify-write inside one process.
  Two processes pointed at the same file can still race; the last
  writer wins.
- A bare JSON array on disk is the legacy format (visits only). It is
  read as `{visits: <array>, actions: []}` and the next write stores the
  container form.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import List, Protocol, Tuple

from pydantic import TypeAdapter, ValidationError

from models import Action, StorageDocument, Visit

logger = logging.getLogger(__name__)

_legacy_visits = TypeAdapter(List[Visit])


class StorageError(Exception):
    """Persisted document is unreadable. Never repaired automatically."""


class VisitStore(Protocol):
    def record_visit(self, visit: Visit) -> None: ...

    def get_all_visits(self) -> List[Visit]: ...


class ActionStore(Protocol):
    def record_action(self, action: Action) -> None: ...

    def get_all_actions(self) -> List[Action]: ...


def decode_document(raw: str) -> Tuple[StorageDocument, bool]:
    """Decode file content; returns the document and whether it was legacy.

    The container shape is tried first, then the bare visits array.
    Raises `StorageError` when neither matches.
    """
    try:
        return StorageDocument.model_validate_json(raw), False
    except ValidationError as container_error:
        try:
            visits = _legacy_visits.validate_json(raw)
        except ValidationError:
            raise StorageError(f"Unreadable storage document: {container_error}") from container_error
        return StorageDocument(visits=visits), True


def encode_document(doc: StorageDocument) -> str:
    return json.dumps(doc.to_dict(), indent=2, ensure_ascii=False)


class JsonEventStore:
    """Visit and action store backed by one JSON file.

    The file is not touched at construction. The first read or write
    creates it (with an empty container) when missing; the existence
    check runs once per instance.
    """

    def __init__(self, file_path: str):
        self.path = Path(file_path)
        self._checked = False
        self._lock = threading.Lock()
        logger.info("JsonEventStore initialized with path: %s", self.path)

    def _ensure_file(self) -> None:
        if self._checked:
            return
        if not self.path.exists():
            logger.info("Storage file missing, creating: %s", self.path)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write(StorageDocument())
        self._checked = True

    def _read(self) -> Tuple[StorageDocument, bool]:
        self._ensure_file()
        raw = self.path.read_text(encoding="utf-8")
        return decode_document(raw)

    def _write(self, doc: StorageDocument) -> None:
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(encode_document(doc))
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        logger.debug(
            "Wrote %s (%d visits, %d actions)", self.path, len(doc.visits), len(doc.actions)
        )

    def _append(self, collection: str, record) -> None:
        with self._lock:
            doc, legacy = self._read()
            if legacy:
                logger.info("Upgrading legacy visits array in %s to container format", self.path)
            getattr(doc, collection).append(record)
            self._write(doc)

    def load(self) -> StorageDocument:
        """Whole document, decoded. Reading never rewrites the file."""
        with self._lock:
            return self._read()[0]

    def get_all_visits(self) -> List[Visit]:
        return self.load().visits

    def record_visit(self, visit: Visit) -> None:
        self._append("visits", visit)

    def get_all_actions(self) -> List[Action]:
        return self.load().actions

    def record_action(self, action: Action) -> None:
        self._append("actions", action)

    def upgrade(self) -> bool:
        """Rewrite a legacy document in container form.

        Returns True when the file was changed.
        """
        with self._lock:
            doc, legacy = self._read()
            if legacy:
                logger.info("Upgrading legacy visits array in %s to container format", self.path)
                self._write(doc)
            return legacy

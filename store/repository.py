"""
File-backed document repository and query interface.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from envelope import codec
from envelope.errors import NotFoundError

from .database import initialize_file, read_file, write_file
from .rotation import change_password as _rotate
from .schemas import Document, StoreConfig


logger = logging.getLogger(__name__)

ID_FIELD = "id"


def _is_id(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _values_match(expected: object, actual: object) -> bool:
    # True == 1 in Python; stored JSON booleans and numbers must stay distinct.
    if isinstance(expected, bool) or isinstance(actual, bool):
        return type(expected) is type(actual) and expected == actual
    if isinstance(expected, Mapping) and isinstance(actual, Mapping):
        return expected.keys() == actual.keys() and all(
            _values_match(value, actual[key]) for key, value in expected.items()
        )
    if isinstance(expected, (list, tuple)) and isinstance(actual, (list, tuple)):
        return len(expected) == len(actual) and all(
            _values_match(a, b) for a, b in zip(expected, actual)
        )
    return expected == actual


def matches(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    """True if every query field is present in *document* with an equal value."""
    for key, expected in query.items():
        if key not in document:
            return False
        if not _values_match(expected, document[key]):
            return False
    return True


def next_id(documents: Iterable[Mapping[str, Any]]) -> int:
    """Millisecond timestamp, bumped past the largest id already in use."""
    candidate = time.time_ns() // 1_000_000
    existing = [doc[ID_FIELD] for doc in documents if _is_id(doc.get(ID_FIELD))]
    if existing:
        candidate = max(candidate, max(existing) + 1)
    return candidate


class DocumentStore:
    """Insert/find/update/delete over a single JSON file.

    Every operation reads and decodes the whole file; mutations re-encode and
    replace it. The per-instance lock only serialises callers in this process.
    """

    path: Path
    config: StoreConfig

    def __init__(self, path: str | Path, config: StoreConfig | None = None) -> None:
        self.path = Path(path).resolve()
        self.config = config if config is not None else StoreConfig()
        self._lock = threading.RLock()
        with self._lock:
            created = initialize_file(self.path, lambda: codec.encode([], self.config))
            if not created:
                # Fail at open time on a wrong password or an unreadable file.
                self._read()
        logger.debug(f"Opened store {self.path} with {self.config.describe()}")

    def __repr__(self) -> str:
        return f"DocumentStore(path={str(self.path)!r}, encrypted={self.config.encrypted})"

    def __len__(self) -> int:
        with self._lock:
            return len(self._read())

    def _read(self, config: StoreConfig | None = None) -> list[Document]:
        settings = config if config is not None else self.config
        documents = codec.decode(read_file(self.path), settings)
        logger.debug(f"Read {len(documents)} document(s) from {self.path}")
        return documents

    def _write(self, documents: list[Document], config: StoreConfig | None = None) -> None:
        settings = config if config is not None else self.config
        write_file(self.path, codec.encode(documents, settings))

    def insert(self, document: Mapping[str, Any]) -> Document:
        """Store a copy of *document* under a newly assigned id and return it."""
        if not isinstance(document, Mapping):
            raise TypeError("document must be a mapping")
        with self._lock:
            documents = self._read()
            stored: Document = dict(document)
            stored[ID_FIELD] = next_id(documents)
            documents.append(stored)
            self._write(documents)
        return dict(stored)

    def find(self, query: Mapping[str, Any] | None = None) -> list[Document]:
        """Return documents matching every field of *query*, in store order."""
        query = query or {}
        with self._lock:
            documents = self._read()
        return [doc for doc in documents if matches(doc, query)]

    def all(self) -> list[Document]:
        return self.find()

    def get(self, document_id: int) -> Document:
        with self._lock:
            documents = self._read()
        for doc in documents:
            if _values_match(document_id, doc.get(ID_FIELD)):
                return doc
        raise NotFoundError(document_id)

    def update(self, document_id: int, updates: Mapping[str, Any]) -> Document:
        """Merge *updates* into the document with *document_id*.

        The stored ``id`` is kept even if *updates* carries a different one.

        Raises:
            NotFoundError: No document has that id; the file is not rewritten
        """
        if not isinstance(updates, Mapping):
            raise TypeError("updates must be a mapping")
        with self._lock:
            documents = self._read()
            for index, doc in enumerate(documents):
                if _values_match(document_id, doc.get(ID_FIELD)):
                    merged: Document = {**doc, **updates, ID_FIELD: doc[ID_FIELD]}
                    documents[index] = merged
                    self._write(documents)
                    return dict(merged)
        raise NotFoundError(document_id)

    def delete(self, document_id: int) -> bool:
        """Remove the document with *document_id*; return whether one was removed."""
        with self._lock:
            documents = self._read()
            remaining = [
                doc for doc in documents if not _values_match(document_id, doc.get(ID_FIELD))
            ]
            self._write(remaining)
        return len(remaining) != len(documents)

    def change_password(self, old_password: str | None, new_password: str) -> None:
        """Re-encrypt the whole store under *new_password*.

        See :func:`store.rotation.change_password`.
        """
        _rotate(self, old_password, new_password)


def open_store(
    path: str | Path,
    config: StoreConfig | Mapping[str, object] | None = None,
    **options: object,
) -> DocumentStore:
    """Open (creating if needed) the store at *path*.

    *options* accepts the same names as :class:`StoreConfig` (``password``,
    ``iterations``, ``digest``, ``algorithm``) and overrides *config*.
    """
    if isinstance(config, StoreConfig):
        base: dict[str, object] = config.model_dump()
    else:
        base = dict(config or {})
    base.update({key: value for key, value in options.items() if value is not None})
    return DocumentStore(path, StoreConfig.from_dict(base))

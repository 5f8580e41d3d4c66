"""
In-process document collections.

Each collection keeps pydantic documents in insertion order, enforces its
declared unique fields and serialises every mutation behind one re-entrant
lock, so read-modify-write helpers such as ``find_one_and_update`` and
``increment`` are atomic with respect to concurrent requests.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Iterator, Sequence, TypeVar

from pydantic import BaseModel

from ..errors import DuplicateError, NotFoundError, ValidationError

T = TypeVar("T", bound=BaseModel)

SortSpec = Sequence[tuple[str, bool]]  # (dotted attribute path, descending)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _resolve(doc: Any, path: str) -> Any:
    value = doc
    for part in path.split("."):
        value = getattr(value, part)
    return value


def _unique_key(value: Any) -> str:
    if hasattr(value, "value"):
        value = value.value
    return str(value).strip().lower()


class Collection(Generic[T]):
    def __init__(self, name: str, label: str, unique: Sequence[str] = ()) -> None:
        self.name = name
        self.label = label
        self._unique = tuple(unique)
        self._docs: dict[str, T] = {}
        self._lock = threading.RLock()

    # ── Locking ──────────────────────────────────────────────────────────

    @contextmanager
    def atomic(self) -> Iterator["Collection[T]"]:
        """Hold the collection lock across several calls."""
        with self._lock:
            yield self

    # ── Reads ────────────────────────────────────────────────────────────

    def get(self, doc_id: str) -> T | None:
        with self._lock:
            return self._docs.get(doc_id)

    def require(self, doc_id: str) -> T:
        doc = self.get(doc_id)
        if doc is None:
            raise NotFoundError(f"{self.label} not found")
        return doc

    def find(
        self,
        where: Callable[[T], bool] | None = None,
        *,
        sort: SortSpec = (),
        skip: int = 0,
        limit: int | None = None,
    ) -> list[T]:
        if skip < 0 or (limit is not None and limit < 0):
            raise ValidationError("skip and limit must not be negative")
        with self._lock:
            docs = [d for d in self._docs.values() if where is None or where(d)]
        # Python's sort is stable, so sorting by the last key first yields a
        # lexicographic multi-key order.
        for path, descending in reversed(list(sort)):
            docs.sort(key=lambda d, p=path: _resolve(d, p), reverse=descending)
        end = None if limit is None else skip + limit
        return docs[skip:end]

    def find_one(self, where: Callable[[T], bool]) -> T | None:
        with self._lock:
            for doc in self._docs.values():
                if where(doc):
                    return doc
        return None

    def count(self, where: Callable[[T], bool] | None = None) -> int:
        with self._lock:
            if where is None:
                return len(self._docs)
            return sum(1 for d in self._docs.values() if where(d))

    def all(self) -> list[T]:
        with self._lock:
            return list(self._docs.values())

    # ── Writes ───────────────────────────────────────────────────────────

    def _check_unique(self, doc: T) -> None:
        doc_id = getattr(doc, "id")
        for field in self._unique:
            key = _unique_key(getattr(doc, field))
            for other in self._docs.values():
                if other.id != doc_id and _unique_key(getattr(other, field)) == key:
                    raise DuplicateError(f"{self.label} with this {field} already exists")

    def insert(self, doc: T) -> T:
        with self._lock:
            if doc.id in self._docs:
                raise DuplicateError(f"{self.label} already exists")
            self._check_unique(doc)
            self._docs[doc.id] = doc
            return doc

    def find_one_and_update(self, doc_id: str, mutate: Callable[[T], T]) -> T:
        """Apply ``mutate`` to the current document and store its result atomically."""
        with self._lock:
            current = self.require(doc_id)
            updated = mutate(current)
            if "updated_at" in type(updated).model_fields:
                updated = updated.model_copy(update={"updated_at": utcnow()})
            self._check_unique(updated)
            self._docs[doc_id] = updated
            return updated

    def update(self, doc_id: str, changes: dict[str, Any]) -> T:
        return self.find_one_and_update(doc_id, lambda d: d.model_copy(update=changes))

    def increment(self, doc_id: str, field: str, amount: int = 1) -> T:
        return self.find_one_and_update(
            doc_id,
            lambda d: d.model_copy(update={field: getattr(d, field) + amount}),
        )

    def delete(self, doc_id: str) -> T:
        with self._lock:
            doc = self._docs.pop(doc_id, None)
        if doc is None:
            raise NotFoundError(f"{self.label} not found")
        return doc

    def clear(self) -> None:
        with self._lock:
            self._docs.clear()

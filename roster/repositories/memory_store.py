"""
In-memory record store.

Records are plain dicts carrying an integer ``id``. The store keeps them in
insertion order for the life of the process; nothing is written to disk.
Every method takes the store lock, and every record handed out is a deep
copy, so callers cannot mutate stored state outside these operations.
"""

from __future__ import annotations

import copy
import itertools
import logging
import threading
from typing import Any, Callable, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

Record = dict[str, Any]
RecordId = int


class RecordNotFound(LookupError):
    """Raised when an operation needs a record id that is not stored."""

    def __init__(self, record_id: Any) -> None:
        super().__init__(f"Record {record_id!r} not found")
        self.record_id = record_id


class RecordStore:
    """Ordered, uniquely identified collection of records."""

    def __init__(self, seed: Optional[Iterable[Mapping[str, Any]]] = None) -> None:
        self._records: list[Record] = []
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        if seed:
            self._load_seed(seed)

    def _load_seed(self, seed: Iterable[Mapping[str, Any]]) -> None:
        seeded = [dict(item) for item in seed]
        taken: set = set()
        for item in seeded:
            if "id" not in item:
                continue
            record_id = item["id"]
            # Seed ids share the counter's int space.
            if not isinstance(record_id, int) or isinstance(record_id, bool):
                raise ValueError(f"Seed id {record_id!r} must be an integer")
            if record_id in taken:
                raise ValueError(f"Duplicate seed id {record_id!r}")
            taken.add(record_id)
        self._ids = itertools.count(max([0, *taken]) + 1)
        for item in seeded:
            if "id" not in item:
                item["id"] = self._next_id()
            self._records.append(copy.deepcopy(item))
        logger.debug("Seeded record store with %d records", len(self._records))

    def _next_id(self) -> RecordId:
        return next(self._ids)

    def _index_of(self, record_id: Any) -> int:
        for index, record in enumerate(self._records):
            if record["id"] == record_id:
                return index
        raise RecordNotFound(record_id)

    @staticmethod
    def _without_id(candidate: Mapping[str, Any]) -> Record:
        return {key: copy.deepcopy(value) for key, value in candidate.items() if key != "id"}

    # -------------------------- reads --------------------------
    def find_all(self) -> list[Record]:
        with self._lock:
            return copy.deepcopy(self._records)

    def find_by_id(self, record_id: Any) -> Record:
        with self._lock:
            return copy.deepcopy(self._records[self._index_of(record_id)])

    def find(self, predicate: Callable[[Record], Any]) -> list[Record]:
        """Return copies of every record matching ``predicate``, in insertion order."""
        with self._lock:
            snapshot = copy.deepcopy(self._records)
        return [record for record in snapshot if predicate(record)]

    # -------------------------- writes --------------------------
    def insert(self, candidate: Mapping[str, Any]) -> Record:
        with self._lock:
            record = {"id": self._next_id(), **self._without_id(candidate)}
            self._records.append(record)
            logger.debug("Inserted record %s", record["id"])
            return copy.deepcopy(record)

    def replace(self, record_id: Any, candidate: Mapping[str, Any]) -> Record:
        with self._lock:
            index = self._index_of(record_id)
            original_id = self._records[index]["id"]
            record = {"id": original_id, **self._without_id(candidate)}
            self._records[index] = record
            logger.debug("Replaced record %s", original_id)
            return copy.deepcopy(record)

    def update(self, record_id: Any, partial: Mapping[str, Any]) -> Record:
        with self._lock:
            index = self._index_of(record_id)
            merged = {**self._records[index], **self._without_id(partial)}
            self._records[index] = merged
            logger.debug("Updated record %s fields=%s", merged["id"], sorted(k for k in partial if k != "id"))
            return copy.deepcopy(merged)

    def delete(self, record_id: Any) -> bool:
        with self._lock:
            index = self._index_of(record_id)
            del self._records[index]
            logger.debug("Deleted record %s", record_id)
            return True

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        with self._lock:
            return any(record["id"] == record_id for record in self._records)

"""Member use cases on top of the in-memory record store."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from roster.domain.members import email_taken, matches_query, normalize_email, present
from roster.repositories.memory_store import RecordStore

logger = logging.getLogger(__name__)


class MemberError(Exception):
    """Base exception for member workflows."""


class DuplicateEmailError(MemberError):
    def __init__(self, email: str):
        super().__init__(f"E-mail {email} is already used by another member")
        self.email = email


class EmptyUpdateError(MemberError):
    def __init__(self):
        super().__init__("No fields to update")


@dataclass
class MemberPage:
    items: list[dict]
    total: int
    offset: int
    limit: int


def load_seed_file(path: str | Path) -> list[dict]:
    """Read a JSON list of member records used to pre-populate the store."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        raise ValueError(f"Seed file {path} must contain a JSON list of objects")
    return raw


class MemberService:
    """CRUD over member records; the store is handed in by whoever builds the app."""

    def __init__(self, store: Optional[RecordStore] = None, *, page_size: int = 20) -> None:
        self.store = store if store is not None else RecordStore()
        self.page_size = page_size
        # Uniqueness check and write must not interleave with another writer.
        self._write_lock = threading.Lock()

    def _clean(self, payload: Mapping[str, Any]) -> dict:
        data = dict(payload)
        if "email" in data:
            data["email"] = normalize_email(data["email"])
        return data

    def _ensure_unique_email(self, email: str | None, exclude_id: Optional[int] = None) -> None:
        if email and email_taken(self.store.find_all(), email, exclude_id=exclude_id):
            raise DuplicateEmailError(email)

    def list_members(self, *, offset: int = 0, limit: Optional[int] = None, q: str | None = None) -> MemberPage:
        limit = limit or self.page_size
        records = self.store.find(lambda record: matches_query(record, q))
        window = records[offset : offset + limit]
        return MemberPage(items=[present(r) for r in window], total=len(records), offset=offset, limit=limit)

    def get_member(self, member_id: int) -> dict:
        return present(self.store.find_by_id(member_id))

    def create_member(self, payload: Mapping[str, Any]) -> dict:
        data = self._clean(payload)
        with self._write_lock:
            self._ensure_unique_email(data.get("email"))
            record = self.store.insert(data)
        logger.info("Member %s created", record["id"])
        return present(record)

    def replace_member(self, member_id: int, payload: Mapping[str, Any]) -> dict:
        data = self._clean(payload)
        # 404 takes precedence over a conflicting e-mail.
        with self._write_lock:
            self.store.find_by_id(member_id)
            self._ensure_unique_email(data.get("email"), exclude_id=member_id)
            record = self.store.replace(member_id, data)
        logger.info("Member %s replaced", member_id)
        return present(record)

    def update_member(self, member_id: int, partial: Mapping[str, Any]) -> dict:
        data = self._clean({k: v for k, v in partial.items() if v is not None})
        with self._write_lock:
            self.store.find_by_id(member_id)
            if not data:
                raise EmptyUpdateError()
            self._ensure_unique_email(data.get("email"), exclude_id=member_id)
            record = self.store.update(member_id, data)
        logger.info("Member %s updated (%s)", member_id, ", ".join(sorted(data)))
        return present(record)

    def delete_member(self, member_id: int) -> bool:
        with self._write_lock:
            deleted = self.store.delete(member_id)
        logger.info("Member %s deleted", member_id)
        return deleted

"""Domain helpers for member records (normalization, uniqueness, derived fields)."""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

ROLES = ("member", "admin")
SEARCH_FIELDS = ("first_name", "last_name", "email")


def normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


def email_taken(records: Iterable[Mapping[str, Any]], email: str | None, exclude_id: Optional[int] = None) -> bool:
    """Return True when another record already uses ``email``."""
    wanted = normalize_email(email)
    if not wanted:
        return False
    for record in records:
        if record.get("id") == exclude_id:
            continue
        if normalize_email(record.get("email")) == wanted:
            return True
    return False


def full_name(record: Mapping[str, Any]) -> str:
    """Virtual field computed on read; never stored."""
    parts = (record.get("first_name") or "", record.get("last_name") or "")
    return " ".join(p.strip() for p in parts if p and p.strip())


def matches_query(record: Mapping[str, Any], query: str | None) -> bool:
    needle = (query or "").strip().lower()
    if not needle:
        return True
    return any(needle in str(record.get(field) or "").lower() for field in SEARCH_FIELDS)


def present(record: Mapping[str, Any]) -> dict:
    """Shape a stored record for output, adding derived fields."""
    shaped = dict(record)
    shaped["full_name"] = full_name(record)
    return shaped

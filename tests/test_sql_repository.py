"""
Smoke tests for the SQLRepository against a temporary SQLite database.
"""
from __future__ import annotations

from roster.db.create_tables import create_all, drop_all
from roster.repositories.sql_repository import SQLRepository


def test_account_lifecycle(db_env):
    repo = SQLRepository()
    assert repo.get_account("alice@example.com") is None

    repo.create_account("alice@example.com", password_hash="hash")
    account = repo.get_account("alice@example.com")
    assert account is not None
    assert account.role == "member"
    assert account.password_hash == "hash"

    repo.update_password("alice@example.com", "hash2")
    assert repo.get_account("alice@example.com").password_hash == "hash2"

    assert repo.set_role("alice@example.com", "admin") is True
    assert repo.get_account("alice@example.com").role == "admin"
    assert repo.set_role("nobody@example.com", "admin") is False

    repo.delete_account("alice@example.com")
    assert repo.get_account("alice@example.com") is None


def test_list_accounts(db_env):
    repo = SQLRepository()
    repo.create_account("b@example.com", password_hash="h")
    repo.create_account("a@example.com", password_hash="h", role="admin")
    emails = {a.email for a in repo.list_accounts()}
    assert emails == {"a@example.com", "b@example.com"}


def test_drop_and_recreate_schema_empties_accounts(db_env):
    repo = SQLRepository()
    repo.create_account("gone@example.com", password_hash="h")
    drop_all()
    create_all()
    assert repo.list_accounts() == []

"""Account data access backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select, update

from roster.db.models import Account
from roster.db.session import get_session


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    def get_account(self, email: str) -> Optional[Account]:
        with get_session() as session:
            return session.get(Account, email)

    def list_accounts(self) -> list[Account]:
        with get_session() as session:
            stmt = select(Account).order_by(Account.created_at, Account.email)
            return list(session.execute(stmt).scalars().all())

    def create_account(self, email: str, password_hash: str, role: str = "member") -> Account:
        now = datetime.now(timezone.utc)
        entity = Account(
            email=email,
            password_hash=password_hash,
            role=role,
            created_at=now,
            updated_at=now,
        )
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def update_password(self, email: str, password_hash: str) -> None:
        with get_session() as session:
            stmt = (
                update(Account)
                .where(Account.email == email)
                .values(password_hash=password_hash, updated_at=datetime.now(timezone.utc))
            )
            session.execute(stmt)
            session.commit()

    def set_role(self, email: str, role: str) -> bool:
        with get_session() as session:
            stmt = (
                update(Account)
                .where(Account.email == email)
                .values(role=role, updated_at=datetime.now(timezone.utc))
            )
            result = session.execute(stmt)
            session.commit()
            return result.rowcount > 0

    def delete_account(self, email: str) -> None:
        with get_session() as session:
            session.execute(delete(Account).where(Account.email == email))
            session.commit()

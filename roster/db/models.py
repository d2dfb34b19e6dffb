"""SQLAlchemy models for login accounts."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, String, Text, func

from .session import Base


class Account(Base):
    __tablename__ = "accounts"

    email = Column(String(255), primary_key=True)
    password_hash = Column(Text, nullable=False)
    role = Column(String(32), default="member", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

"""
Authentication and identity related use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError

from roster.core.config import get_settings
from roster.core.security import (
    TokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from roster.db.models import Account
from roster.domain.members import ROLES, normalize_email
from roster.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AuthError(Exception):
    """Base class for authentication-related exceptions."""


class RegistrationError(AuthError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AccountExistsError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


class TokenInvalidError(AuthError):
    pass


class AccountNotFoundError(AuthError):
    pass


@dataclass
class LoginSuccess:
    email: str
    role: str
    access_token: str
    expires_in: int


@dataclass
class AuthService:
    """Handles registration, login and bearer-token resolution."""

    repository: Optional[SQLRepository] = None

    def __post_init__(self):
        self.settings = get_settings()
        if self.repository is None:
            self.repository = SQLRepository()

    def _role_for(self, email: str) -> str:
        return "admin" if email in self.settings.admin_emails else "member"

    def register(self, email: str, password: str) -> Account:
        email = normalize_email(email)
        if not email or "@" not in email:
            raise RegistrationError("A valid e-mail is required")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise RegistrationError(f"Password must have at least {MIN_PASSWORD_LENGTH} characters")
        if self.repository.get_account(email):
            raise AccountExistsError(email)
        try:
            account = self.repository.create_account(email, hash_password(password), role=self._role_for(email))
        except IntegrityError as exc:
            # Concurrent registration of the same address.
            raise AccountExistsError(email) from exc
        logger.info("Account registered: %s (%s)", email, account.role)
        return account

    def authenticate(self, email: str, password: str) -> Account:
        email = normalize_email(email)
        account = self.repository.get_account(email) if email else None
        if not account or not verify_password(password or "", account.password_hash):
            logger.warning("Failed login for %s", email or "<empty>")
            raise InvalidCredentialsError()
        return account

    def login(self, email: str, password: str) -> LoginSuccess:
        account = self.authenticate(email, password)
        ttl = self.settings.access_token_ttl_seconds
        token = create_access_token(account.email, role=account.role, ttl_seconds=ttl)
        logger.info("Login ok: %s", account.email)
        return LoginSuccess(email=account.email, role=account.role, access_token=token, expires_in=ttl)

    def account_for_token(self, token: str) -> Account:
        if not token:
            raise TokenInvalidError("Missing token")
        try:
            claims = decode_access_token(token)
        except TokenError as exc:
            raise TokenInvalidError(str(exc)) from exc
        account = self.repository.get_account(claims["sub"])
        if not account:
            raise TokenInvalidError("Account no longer exists")
        return account

    def change_password(self, email: str, current_password: str, new_password: str) -> None:
        account = self.authenticate(email, current_password)
        if len(new_password or "") < MIN_PASSWORD_LENGTH:
            raise RegistrationError(f"Password must have at least {MIN_PASSWORD_LENGTH} characters")
        self.repository.update_password(account.email, hash_password(new_password))
        logger.info("Password changed for %s", account.email)

    def set_role(self, email: str, role: str) -> None:
        if role not in ROLES:
            raise RegistrationError(f"Unknown role {role!r}")
        if not self.repository.set_role(normalize_email(email), role):
            raise AccountNotFoundError(email)

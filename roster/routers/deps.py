"""Request-scoped dependencies: service lookup and authorization guards."""
from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from roster.db.models import Account
from roster.services.auth_service import AuthService, TokenInvalidError
from roster.services.member_service import MemberService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)

_BEARER = {"WWW-Authenticate": "Bearer"}


def get_member_service(request: Request) -> MemberService:
    svc = getattr(getattr(request.app, "state", None), "member_service", None)
    if not svc:
        raise RuntimeError("MemberService not configured")
    return svc


def get_auth_service(request: Request) -> AuthService:
    svc = getattr(getattr(request.app, "state", None), "auth_service", None)
    if not svc:
        raise RuntimeError("AuthService not configured")
    return svc


def current_account(
    token: str | None = Depends(oauth2_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Account:
    if not token:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Not authenticated", headers=_BEARER)
    try:
        return auth.account_for_token(token)
    except TokenInvalidError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid or expired token", headers=_BEARER)


def require_role(*roles: str):
    """Guard factory: the current account must hold one of ``roles``."""
    allowed = set(roles)

    def _guard(account: Account = Depends(current_account)) -> Account:
        if account.role not in allowed:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "Insufficient role")
        return account

    return _guard

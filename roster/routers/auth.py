from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from roster.core.rate_limiter import throttle
from roster.db.models import Account
from roster.models.schemas import (
    AccountOut,
    Action,
    ApiResponse,
    PasswordChange,
    RegisterRequest,
    TokenResponse,
    envelope,
)
from roster.routers.deps import current_account, get_auth_service
from roster.services.auth_service import (
    AccountExistsError,
    AuthService,
    InvalidCredentialsError,
    RegistrationError,
)

router = APIRouter(prefix="/auth", tags=["auth"])

_register_limit = throttle("register", limit=10, window_seconds=3600)
_login_limit = throttle("login", limit=20, window_seconds=300)


@router.post(
    "/register",
    response_model=ApiResponse[AccountOut],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(_register_limit)],
)
def register(body: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    try:
        account = auth.register(body.email, body.password)
    except AccountExistsError:
        raise HTTPException(status.HTTP_409_CONFLICT, "An account with this e-mail already exists")
    except RegistrationError as exc:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, exc.message)
    return envelope(Action.insert, "Account created", AccountOut.model_validate(account).model_dump())


@router.post("/login", response_model=TokenResponse, dependencies=[Depends(_login_limit)])
def login(form: OAuth2PasswordRequestForm = Depends(), auth: AuthService = Depends(get_auth_service)):
    try:
        result = auth.login(form.username, form.password)
    except InvalidCredentialsError:
        raise HTTPException(
            status.HTTP_401_UNAUTHORIZED,
            "Incorrect e-mail or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenResponse(access_token=result.access_token, expires_in=result.expires_in)


@router.get("/me", response_model=ApiResponse[AccountOut])
def me(account: Account = Depends(current_account)):
    return envelope(Action.read, "Current account", AccountOut.model_validate(account).model_dump())


@router.post("/password", response_model=ApiResponse[bool], dependencies=[Depends(_login_limit)])
def change_password(
    body: PasswordChange,
    account: Account = Depends(current_account),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        auth.change_password(account.email, body.current_password, body.new_password)
    except InvalidCredentialsError:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Current password is incorrect")
    except RegistrationError as exc:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, exc.message)
    return envelope(Action.update, "Password changed", True)

"""
Roster API: application factory.

Run with::

    uvicorn roster.app:app --reload

Then open http://localhost:8000/docs for the interactive Swagger UI.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from roster import __version__
from roster.core.config import Settings, get_settings
from roster.db.create_tables import create_all
from roster.domain.members import email_taken, normalize_email
from roster.models.schemas import Action, MemberCreate, envelope
from roster.repositories.memory_store import RecordNotFound, RecordStore
from roster.routers import auth as auth_router
from roster.routers import members as members_router
from roster.services.auth_service import AuthService
from roster.services.member_service import (
    DuplicateEmailError,
    EmptyUpdateError,
    MemberService,
    load_seed_file,
)

logger = logging.getLogger(__name__)

_METHOD_ACTIONS = {
    "POST": Action.insert,
    "PUT": Action.update,
    "PATCH": Action.update,
    "DELETE": Action.delete,
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (CSP, anti clickjacking, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; "
            "img-src 'self' data: https://fastapi.tiangolo.com; "
            "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
            "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
        )
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def configure_logging(level: str) -> None:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("roster").setLevel(level)


def _action_for(request: Request) -> Action:
    return _METHOD_ACTIONS.get(request.method.upper(), Action.read)


def _error(request: Request, status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    body = envelope(_action_for(request), message, None, success=False)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _seed_records(settings: Settings) -> list[dict]:
    if not settings.seed_file:
        return []
    raw = load_seed_file(settings.seed_file)
    records: list[dict] = []
    for item in raw:
        record = MemberCreate.model_validate({k: v for k, v in item.items() if k != "id"}).model_dump()
        record["email"] = normalize_email(record["email"])
        if email_taken(records, record["email"]):
            raise ValueError(f"Seed e-mail {record['email']} appears more than once")
        if "id" in item:
            seed_id = item["id"]
            if not isinstance(seed_id, int) or isinstance(seed_id, bool):
                raise ValueError(f"Seed id {seed_id!r} must be an integer")
            record["id"] = seed_id
        records.append(record)
    logger.info("Loaded %d seed members from %s", len(records), settings.seed_file)
    return records


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RecordNotFound)
    async def _not_found(request: Request, exc: RecordNotFound):
        return _error(request, status.HTTP_404_NOT_FOUND, f"Member {exc.record_id} not found")

    @app.exception_handler(DuplicateEmailError)
    async def _duplicate(request: Request, exc: DuplicateEmailError):
        return _error(request, status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(EmptyUpdateError)
    async def _empty(request: Request, exc: EmptyUpdateError):
        return _error(request, status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))

    @app.exception_handler(RequestValidationError)
    async def _invalid(request: Request, exc: RequestValidationError):
        body = envelope(_action_for(request), "Validation failed", None, success=False)
        body["errors"] = jsonable_encoder(exc.errors())
        return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=body)

    @app.exception_handler(StarletteHTTPException)
    async def _http(request: Request, exc: StarletteHTTPException):
        return _error(request, exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[RecordStore] = None,
    auth_service: Optional[AuthService] = None,
) -> FastAPI:
    """Build a fresh application; tests pass their own store/settings."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        create_all()
        logger.info("Roster API ready (env=%s, members=%d)", settings.app_env, len(member_service.store))
        yield

    app = FastAPI(title="Roster API", version=__version__, lifespan=lifespan)

    if store is None:
        store = RecordStore(seed=_seed_records(settings))
    member_service = MemberService(store, page_size=settings.page_size)
    app.state.settings = settings
    app.state.member_service = member_service
    app.state.auth_service = auth_service or AuthService()

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    _install_error_handlers(app)
    app.include_router(auth_router.router)
    app.include_router(members_router.router)

    @app.get("/health", tags=["system"])
    def health():
        return {"status": "ok", "version": __version__, "members": len(member_service.store)}

    return app


app = create_app()

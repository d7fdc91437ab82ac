"""FastAPI application for the task tracker."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .database import get_store
from .errors import MissingFieldError, StoreUnavailableError
from .security.api_auth import AUTH_HINT, AuthenticationError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = app.dependency_overrides.get(get_store, get_store)()
    store.create_all()
    if settings.is_production and not settings.auth_enabled:
        logger.warning("API authentication is disabled in production")
    logger.info("Task tracker ready (%s store)", store.name)
    yield


app = FastAPI(title=settings.app_title, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str, /, **extra) -> JSONResponse:
    return JSONResponse({"success": False, "error": message, **extra}, status_code=status_code)


@app.exception_handler(AuthenticationError)
async def _auth_error(request: Request, exc: AuthenticationError):
    return _error(401, "Unauthorized", message=exc.message, hint=AUTH_HINT)


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return _error(422, "; ".join(parts) or "Invalid request")


@app.exception_handler(MissingFieldError)
async def _missing_field(request: Request, exc: MissingFieldError):
    return _error(422, str(exc))


@app.exception_handler(StoreUnavailableError)
async def _store_unavailable(request: Request, exc: StoreUnavailableError):
    logger.error("Store unavailable during %s %s: %s", request.method, request.url.path, exc)
    return _error(500, str(exc))


# Import and register routers
from .routers import health, notes, people, stats, tasks  # noqa: E402

app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks"])
app.include_router(notes.router, prefix="/api/notes", tags=["notes"])
app.include_router(people.router, prefix="/api/people", tags=["people"])
app.include_router(stats.router, prefix="/api", tags=["stats"])
app.include_router(health.router)

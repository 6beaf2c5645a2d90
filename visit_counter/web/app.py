"""
FastAPI application exposing the visit counter over HTTP.

Routes:
    GET /                 record the visit, render map + scoreboard (HTML)
    GET /worker-version   deployment version string
    GET /locate           airport;country;city;lat;lon, no persistence
    GET /users            example_users as {"columns", "rows"} JSON
    GET /add-user?email=  insert one example_users row

A database connection is opened per request by the `get_connection`
dependency and closed when the request finishes. VisitCounterError
subclasses are turned into plain-text responses with their status code.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Dict, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from visit_counter import __version__
from visit_counter.config import Settings, get_settings
from visit_counter.errors import (
    ConfigurationError,
    PersistenceError,
    ValidationError,
    VisitCounterError,
)
from visit_counter.infrastructure.db_factory import DatabaseConnection, open_connection
from visit_counter.orchestrator import add_user, list_users, locate, render_visit_page
from visit_counter.utils.logging import configure_logging, get_logger
from visit_counter.web.geo import region_from_headers, visit_facts_from_headers

log = get_logger(__name__)


async def get_connection(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[DatabaseConnection]:
    db = await open_connection(settings)
    try:
        yield db
    finally:
        try:
            await db.close()
        except PersistenceError as exc:
            log.warning(f"Closing database connection failed: {exc}")


def require_email(email: Optional[str] = Query(None)) -> str:
    if email is None:
        raise ValidationError("No email")
    return email


async def _visit_counter_error(request: Request, exc: VisitCounterError) -> Response:
    return PlainTextResponse(str(exc), status_code=exc.status_code)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    `settings` only drives logging setup; request handlers resolve their own
    Settings through the `get_settings` dependency.
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    app = FastAPI(title="Visit Counter", version=__version__)
    app.add_exception_handler(VisitCounterError, _visit_counter_error)

    @app.middleware("http")
    async def log_request(request: Request, call_next):
        facts = visit_facts_from_headers(request.headers)
        region = region_from_headers(request.headers)
        log.info(
            f"[{request.url.path}], located at: {facts.coordinates}, within: {region}",
            extra={"path": request.url.path, "region": region},
        )
        return await call_next(request)

    @app.get("/", response_class=HTMLResponse)
    async def index(
        request: Request,
        settings: Settings = Depends(get_settings),
        db: DatabaseConnection = Depends(get_connection),
    ) -> Response:
        facts = visit_facts_from_headers(request.headers)
        try:
            html = await render_visit_page(db, facts)
        except PersistenceError as exc:
            if settings.legacy_error_status:
                log.warning(f"Reporting failed visit with status 200: {exc}")
                return PlainTextResponse(f"Error: {exc}", status_code=200)
            return PlainTextResponse(f"Error: {exc}", status_code=500)
        return HTMLResponse(html)

    @app.get("/worker-version", response_class=PlainTextResponse)
    async def worker_version(settings: Settings = Depends(get_settings)) -> str:
        if not settings.worker_version:
            raise ConfigurationError("WORKER_VERSION is not configured")
        return settings.worker_version

    @app.get("/locate", response_class=PlainTextResponse)
    async def locate_visitor(request: Request) -> str:
        return locate(visit_facts_from_headers(request.headers))

    @app.get("/users")
    async def users(db: DatabaseConnection = Depends(get_connection)) -> Dict[str, Any]:
        return await list_users(db)

    @app.get("/add-user")
    async def add_user_route(
        email: str = Depends(require_email),
        db: DatabaseConnection = Depends(get_connection),
    ) -> Dict[str, str]:
        return await add_user(db, email)

    return app


__all__ = ["create_app", "get_connection", "require_email"]

from __future__ import annotations

import asyncio
import sys
from typing import Awaitable, Callable, Optional, TypeVar

import typer
import uvicorn

from visit_counter.config import get_settings
from visit_counter.domain.models import VisitFacts
from visit_counter.errors import VisitCounterError
from visit_counter.infrastructure.db_factory import DatabaseConnection, open_connection
from visit_counter.orchestrator import scoreboard as counter_scoreboard
from visit_counter.recorder import ensure_schema, record_visit
from visit_counter.reporter import print_scoreboard
from visit_counter.utils.logging import configure_logging

app = typer.Typer(help="Visit Counter CLI.")

T = TypeVar("T")


def _run_with_connection(work: Callable[[DatabaseConnection], Awaitable[T]]) -> T:
    """
    Open a connection from settings, run `work`, and close it.

    VisitCounterError is reported on stderr and exits with status 1.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    async def _runner() -> T:
        db = await open_connection(settings)
        try:
            return await work(db)
        finally:
            await db.close()

    try:
        return asyncio.run(_runner())
    except VisitCounterError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    token = "set" if settings.libsql_client_token else "unset"
    typer.echo(
        f"DB={settings.libsql_client_url or '<unset>'} token={token} "
        f"timeout={settings.db_timeout_seconds:g}s | env={settings.app_env} "
        f"version={settings.worker_version or '<unset>'} "
        f"legacy_error_status={settings.legacy_error_status}"
    )


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from settings)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port (default from settings)."),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes."),
) -> None:
    """
    Serve the HTTP endpoints with uvicorn.
    """
    settings = get_settings()
    uvicorn.run(
        "visit_counter.web.app:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_config=None,
    )


@app.command()
def migrate() -> None:
    """
    Create the counter and coordinates tables if they are missing.
    """
    _run_with_connection(ensure_schema)
    typer.echo("Schema is up to date.")


@app.command()
def record(
    airport: str = typer.Argument(..., help="Serving airport / colo code."),
    country: str = typer.Argument(..., help="Visitor country code."),
    city: str = typer.Argument(..., help="Visitor city."),
    latitude: float = typer.Argument(..., help="Visitor latitude."),
    longitude: float = typer.Argument(..., help="Visitor longitude."),
) -> None:
    """
    Record one visit, as if it had arrived through the HTTP endpoint.
    """
    facts = VisitFacts(
        airport=airport,
        country=country,
        city=city,
        latitude=latitude,
        longitude=longitude,
    )
    _run_with_connection(lambda db: record_visit(db, facts))
    typer.echo(f"Recorded visit from {city or '?'}, {country or '?'} via {airport}.")


@app.command()
def scoreboard() -> None:
    """
    Print the per-city visit counter table.
    """

    async def _load(db: DatabaseConnection) -> None:
        print_scoreboard(await counter_scoreboard(db))

    _run_with_connection(_load)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()

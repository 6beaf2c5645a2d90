"""
Request orchestrator: composes recording and rendering into response bodies.

Usage (example from a route handler):
    from visit_counter.orchestrator import render_visit_page

    html = await render_visit_page(db, facts)

The user-list endpoints bypass the recorder and assume `example_users`
already exists; no schema is created for it.
"""

from __future__ import annotations

from typing import Any, Dict

from visit_counter import rendering
from visit_counter.domain.cells import format_real
from visit_counter.domain.models import ResultSet, VisitFacts
from visit_counter.infrastructure.db_factory import DatabaseConnection
from visit_counter.recorder import record_visit

COUNTER_QUERY = "SELECT * FROM counter"
COORDINATES_QUERY = "SELECT airport, lat, long FROM coordinates"
LIST_USERS_QUERY = "SELECT * FROM example_users"
ADD_USER_SQL = "INSERT INTO example_users VALUES (?)"

PAGE_TEMPLATE = """
        <body>
        {canvas} Database powered by <a href="https://chiselstrike.com/">Turso</a>.
        <br /> Scoreboard: <br /> {scoreboard}
        <footer>Map data from OpenStreetMap (https://tile.osm.org/)</footer>
        </body>
        """


async def render_visit_page(db: DatabaseConnection, facts: VisitFacts) -> str:
    """
    Record the visit, then render the scoreboard table and the map canvas.

    Raises
    ------
    PersistenceError
        If recording or either read-back fails; nothing is rendered.
    """
    await record_visit(db, facts)
    scoreboard = rendering.to_html_table(await db.query(COUNTER_QUERY))
    canvas = rendering.to_map_canvas(await db.query(COORDINATES_QUERY))
    return PAGE_TEMPLATE.format(canvas=canvas, scoreboard=scoreboard)


async def scoreboard(db: DatabaseConnection) -> ResultSet:
    """Counter table as an unconsumed ResultSet."""
    return await db.query(COUNTER_QUERY)


async def list_users(db: DatabaseConnection) -> Dict[str, Any]:
    return rendering.to_json(await db.query(LIST_USERS_QUERY))


async def add_user(db: DatabaseConnection, email: str) -> Dict[str, str]:
    await db.execute(ADD_USER_SQL, (email,))
    return {"result": "Added"}


def locate(facts: VisitFacts) -> str:
    """`airport;country;city;lat;lon` for the current visitor, without persisting."""
    return ";".join(
        [
            facts.airport,
            facts.country,
            facts.city,
            format_real(facts.latitude),
            format_real(facts.longitude),
        ]
    )


__all__ = [
    "render_visit_page",
    "scoreboard",
    "list_users",
    "add_user",
    "locate",
]

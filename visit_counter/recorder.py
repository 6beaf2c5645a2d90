"""
Visit recorder: persists one visit into the counter and coordinates tables.

Steps run strictly in order and stop at the first failure:

1. ensure both tables exist (one atomic batch),
2. seed the (country, city) counter at zero if absent,
3. increment that counter with a single UPDATE,
4. seed the (lat, long) coordinate if absent.

Concurrency guarantees come from the store: the seeds rely on the primary key
with ON CONFLICT DO NOTHING, and the increment is one atomic statement, so
parallel visits for the same key never lose an update or raise on the seed.
"""

from __future__ import annotations

from visit_counter.domain.models import VisitFacts
from visit_counter.errors import PersistenceError
from visit_counter.infrastructure.db_factory import DatabaseConnection
from visit_counter.utils.logging import get_logger

log = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS counter(country TEXT, city TEXT, value INTEGER NOT NULL DEFAULT 0, PRIMARY KEY (country, city));
CREATE TABLE IF NOT EXISTS coordinates(lat DOUBLE PRECISION, long DOUBLE PRECISION, airport TEXT, PRIMARY KEY (lat, long));
"""

SEED_COUNTER_SQL = "INSERT INTO counter(country, city, value) VALUES (?, ?, 0) ON CONFLICT DO NOTHING"
INCREMENT_COUNTER_SQL = "UPDATE counter SET value = value + 1 WHERE country = ? AND city = ?"
SEED_COORDINATE_SQL = (
    "INSERT INTO coordinates(lat, long, airport) VALUES (?, ?, ?) ON CONFLICT DO NOTHING"
)


async def ensure_schema(db: DatabaseConnection) -> None:
    """
    Create the counter and coordinates tables if they do not exist yet.

    Raises
    ------
    PersistenceError
        If the batch fails; logged here since nothing downstream runs.
    """
    try:
        await db.execute_batch(SCHEMA_SQL)
    except PersistenceError as exc:
        log.error(f"Error creating table: {exc}")
        raise


async def seed_counter(db: DatabaseConnection, country: str, city: str) -> None:
    await db.execute(SEED_COUNTER_SQL, (country, city))


async def increment_counter(db: DatabaseConnection, country: str, city: str) -> None:
    await db.execute(INCREMENT_COUNTER_SQL, (country, city))


async def seed_coordinate(
    db: DatabaseConnection, latitude: float, longitude: float, airport: str
) -> None:
    await db.execute(SEED_COORDINATE_SQL, (latitude, longitude, airport))


async def record_visit(db: DatabaseConnection, facts: VisitFacts) -> None:
    """
    Record one visit described by `facts`.

    Parameters
    ----------
    db : DatabaseConnection
        Open connection for the current request.
    facts : VisitFacts
        Where the visitor came from.

    Raises
    ------
    PersistenceError
        From the first failing step; later steps are not attempted.
    """
    await ensure_schema(db)
    await seed_counter(db, facts.country, facts.city)
    await increment_counter(db, facts.country, facts.city)
    await seed_coordinate(db, facts.latitude, facts.longitude, facts.airport)
    log.debug(
        "Visit recorded",
        extra={
            "airport": facts.airport,
            "country": facts.country,
            "city": facts.city,
        },
    )


__all__ = [
    "SCHEMA_SQL",
    "ensure_schema",
    "seed_counter",
    "increment_counter",
    "seed_coordinate",
    "record_visit",
]

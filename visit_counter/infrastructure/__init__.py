"""
Infrastructure package for the visit counter.

Centralizes database connectivity (the connection contract and its libSQL and
PostgreSQL implementations). Keep this layer focused on I/O, decoupled from
recording and rendering logic.
"""

from visit_counter.infrastructure.db_factory import (
    DatabaseConnection,
    LibsqlConnection,
    PostgresConnection,
    open_connection,
)

__all__ = [
    "DatabaseConnection",
    "LibsqlConnection",
    "PostgresConnection",
    "open_connection",
]

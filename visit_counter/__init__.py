"""
Visit Counter - geolocation visit statistics backed by a remote SQL store.

Each visit to the primary endpoint is recorded in two tables:

- `counter`: one row per (country, city) with an atomically incremented count
- `coordinates`: one row per distinct (lat, long) with the serving airport code

The accumulated data is rendered back as an HTML scoreboard, a p5.js map
overlay, or JSON. libSQL/Turso is the primary store; PostgreSQL works through
the same connection contract.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from visit_counter.config import Settings, get_settings
from visit_counter.domain import ResultSet, VisitFacts
from visit_counter.errors import (
    ConfigurationError,
    PersistenceError,
    ValidationError,
    VisitCounterError,
)
from visit_counter.recorder import ensure_schema, record_visit
from visit_counter.rendering import to_html_table, to_json, to_map_canvas
from visit_counter.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "ResultSet",
    "VisitFacts",
    # Errors
    "VisitCounterError",
    "ConfigurationError",
    "PersistenceError",
    "ValidationError",
    # Recording and rendering
    "ensure_schema",
    "record_visit",
    "to_html_table",
    "to_map_canvas",
    "to_json",
    # Logging
    "configure_logging",
    "get_logger",
]

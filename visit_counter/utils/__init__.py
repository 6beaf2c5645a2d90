"""
Utilities package for the visit counter.

Exports the shared logging helpers. Keep this package free of domain logic.
"""

from visit_counter.utils.logging import JsonFormatter, configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "JsonFormatter",
]

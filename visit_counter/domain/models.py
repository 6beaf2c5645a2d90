"""
Domain models for the visit counter.

`ResultSet` is the tabular shape every renderer consumes: ordered column names
plus a forward-only row iterator. `VisitFacts` carries the geolocation facts
of one inbound request.
"""
from __future__ import annotations

from typing import Any, Iterable, Iterator, Sequence, Tuple

from pydantic import BaseModel, Field

from visit_counter.domain.cells import Cell, cell_from_value
from visit_counter.errors import PersistenceError, ResultSetConsumedError

Row = Tuple[Cell, ...]


class ResultSet:
    """
    Ordered columns plus a single-pass stream of rows.

    The row iterator is handed out exactly once. Exceptions raised while
    producing a row propagate to the consumer unchanged.
    """

    def __init__(self, columns: Sequence[str | None], rows: Iterable[Row]) -> None:
        self.columns: Tuple[str, ...] = tuple(name or "" for name in columns)
        self._rows: Iterator[Row] = iter(rows)
        self._consumed = False

    @classmethod
    def from_values(
        cls, columns: Sequence[str | None], rows: Iterable[Sequence[Any]]
    ) -> "ResultSet":
        """
        Build a ResultSet from driver-native rows, converting lazily.

        A value with no Cell counterpart surfaces as a PersistenceError when
        its row is reached.
        """
        return cls(columns, _convert_rows(rows))

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def __iter__(self) -> Iterator[Row]:
        if self._consumed:
            raise ResultSetConsumedError("result set rows have already been consumed")
        self._consumed = True
        return self._rows

    def __repr__(self) -> str:
        return f"ResultSet(columns={list(self.columns)!r}, consumed={self._consumed})"


def _convert_rows(rows: Iterable[Sequence[Any]]) -> Iterator[Row]:
    for raw in rows:
        try:
            yield tuple(cell_from_value(value) for value in raw)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"unreadable row value: {exc}") from exc


class VisitFacts(BaseModel):
    """
    Geolocation facts about the visitor of one request.
    """

    airport: str = Field("", description="Serving data-center (colo) code.")
    country: str = Field("", description="ISO country code; empty when unknown.")
    city: str = Field("", description="City name; empty when unknown.")
    latitude: float = Field(0.0, description="Visitor latitude; 0 when unknown.")
    longitude: float = Field(0.0, description="Visitor longitude; 0 when unknown.")

    model_config = {
        "frozen": True,
    }

    @property
    def coordinates(self) -> Tuple[float, float]:
        return self.latitude, self.longitude


__all__ = ["Row", "ResultSet", "VisitFacts"]

"""
Cell value model for query results.

A Cell is one value from a result row and is exactly one of five variants:
NullCell, IntegerCell, RealCell, TextCell or BlobCell. The union is closed;
every consumer switches over these five and raises TypeError for anything
else, so adding a storage type means touching each renderer on purpose.
"""
from __future__ import annotations

import base64
import math
from decimal import Decimal
from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, Field

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_FROZEN = {"frozen": True, "strict": True}


class NullCell(BaseModel):
    kind: Literal["null"] = "null"

    model_config = _FROZEN


class IntegerCell(BaseModel):
    kind: Literal["integer"] = "integer"
    value: int = Field(..., ge=INT64_MIN, le=INT64_MAX)

    model_config = _FROZEN


class RealCell(BaseModel):
    kind: Literal["real"] = "real"
    value: float

    model_config = _FROZEN


class TextCell(BaseModel):
    kind: Literal["text"] = "text"
    value: str

    model_config = _FROZEN


class BlobCell(BaseModel):
    kind: Literal["blob"] = "blob"
    value: bytes

    model_config = _FROZEN


Cell = Annotated[
    Union[NullCell, IntegerCell, RealCell, TextCell, BlobCell],
    Field(discriminator="kind"),
]

NULL = NullCell()


def _b64(data: bytes) -> str:
    """Standard alphabet, padding stripped."""
    return base64.b64encode(data).decode("ascii").rstrip("=")


def format_real(value: float) -> str:
    """
    Render a float as the shortest decimal text that reads back to the same value.

    Never uses exponent notation, and drops a trailing ".0" on integral values
    (3.0 -> "3", 1e20 -> "100000000000000000000").
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def to_display(cell: Any) -> str:
    """Scalar string for tabular rendering."""
    if isinstance(cell, NullCell):
        return ""
    if isinstance(cell, IntegerCell):
        return str(cell.value)
    if isinstance(cell, RealCell):
        return format_real(cell.value)
    if isinstance(cell, TextCell):
        return cell.value
    if isinstance(cell, BlobCell):
        return _b64(cell.value)
    raise TypeError(f"unsupported cell variant: {type(cell).__name__}")


def to_json(cell: Any) -> Union[None, int, float, str, Dict[str, str]]:
    """JSON-compatible value; blobs become {"base64": ...}."""
    if isinstance(cell, NullCell):
        return None
    if isinstance(cell, (IntegerCell, RealCell, TextCell)):
        return cell.value
    if isinstance(cell, BlobCell):
        return {"base64": _b64(cell.value)}
    raise TypeError(f"unsupported cell variant: {type(cell).__name__}")


def cell_from_value(value: Any) -> Cell:
    """
    Wrap a driver-native Python value in the matching Cell variant.

    Raises
    ------
    TypeError
        If the value has no Cell counterpart (dates, lists, ...).
    """
    if value is None:
        return NULL
    if isinstance(value, bool):
        return IntegerCell(value=int(value))
    if isinstance(value, int):
        return IntegerCell(value=value)
    if isinstance(value, float):
        return RealCell(value=value)
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return IntegerCell(value=int(value))
        return RealCell(value=float(value))
    if isinstance(value, str):
        return TextCell(value=value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BlobCell(value=bytes(value))
    raise TypeError(f"no cell variant for value of type {type(value).__name__}")


def decode_blob(encoded: str) -> bytes:
    """Inverse of the un-padded base64 used for BlobCell renderings."""
    padding = "=" * (-len(encoded) % 4)
    return base64.b64decode(encoded + padding)


__all__ = [
    "Cell",
    "NullCell",
    "IntegerCell",
    "RealCell",
    "TextCell",
    "BlobCell",
    "NULL",
    "format_real",
    "to_display",
    "to_json",
    "cell_from_value",
    "decode_blob",
]

"""Column-type agnostic decoding of metric result sets.

Every cell is first reduced to the text a database client would print for it,
then promoted to an integer when that text is an integer literal. Metrics
return heterogeneous shapes (a label and a count, a single count, an average)
and this lets expected matrices be written with plain literals.
"""
import datetime as dt
import re
from decimal import Decimal
from typing import Any, Iterable, Iterator, Optional, Sequence

from .models import Cell, Matrix, Row

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INTEGER_LITERAL = re.compile(r"[+-]?[0-9]+")


def raw_text(value: Any) -> Optional[str]:
    """Return the textual form of a driver value, ``None`` when absent.

    Raises:
        UnicodeDecodeError: If a binary value is not valid UTF-8.
    """
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    if isinstance(value, bool):
        return "t" if value else "f"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dt.datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (dt.date, dt.time)):
        return value.isoformat()
    return str(value)


def decode_text(text: Optional[str]) -> Cell:
    """Promote ``text`` to an int when it is a 64-bit integer literal."""
    if text is None:
        return None
    if _INTEGER_LITERAL.fullmatch(text):
        number = int(text)
        if INT64_MIN <= number <= INT64_MAX:
            return number
    return text


def decode_cell(value: Any) -> Cell:
    """Decode one driver value into an Integer, Text or Absent cell."""
    return decode_text(raw_text(value))


def decode_row(row: Sequence[Any]) -> Row:
    return [decode_cell(value) for value in row]


def iter_rows(rows: Iterable[Sequence[Any]]) -> Iterator[Row]:
    """Lazily decode rows in the order the result set yields them."""
    for row in rows:
        yield decode_row(row)


def decode(rows: Iterable[Sequence[Any]]) -> Matrix:
    """Decode a whole result set."""
    return list(iter_rows(rows))

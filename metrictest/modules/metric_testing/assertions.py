"""Exact comparison of expected and actual result matrices.

Cells are compared after decoding, so ``7`` and ``"7"`` differ and row order
is significant. Metrics that need a deterministic order must sort in SQL.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .models import CellKind, Matrix

logger = logging.getLogger(__name__)


@dataclass
class ComparisonResult:
    """Outcome of comparing two matrices."""
    passed: bool
    expected: Matrix
    actual: Matrix
    message: str


def _kind(value) -> str:
    try:
        return CellKind.of(value).value
    except TypeError:
        return type(value).__name__


def _cells_equal(expected, actual) -> bool:
    return type(expected) is type(actual) and expected == actual


def describe_mismatch(expected: Matrix, actual: Matrix) -> Optional[str]:
    """Describe the first difference between two matrices, None when equal."""
    if len(expected) != len(actual):
        return f"expected {len(expected)} rows, got {len(actual)}"

    for row_no, (expected_row, actual_row) in enumerate(zip(expected, actual), start=1):
        if len(expected_row) != len(actual_row):
            return (
                f"row {row_no}: expected {len(expected_row)} columns, "
                f"got {len(actual_row)}"
            )
        for col_no, (want, got) in enumerate(zip(expected_row, actual_row), start=1):
            if not _cells_equal(want, got):
                return (
                    f"row {row_no}, column {col_no}: expected {want!r} "
                    f"({_kind(want)}), got {got!r} ({_kind(got)})"
                )
    return None


def matrices_equal(expected: Matrix, actual: Matrix) -> bool:
    """Structural equality: same shape, same cells, same order."""
    return describe_mismatch(expected, actual) is None


def compare(expected: Matrix, actual: Matrix) -> ComparisonResult:
    """Compare and build a result with a readable message."""
    mismatch = describe_mismatch(expected, actual)
    if mismatch is not None:
        logger.debug(f"Result mismatch: {mismatch}")
        return ComparisonResult(False, expected, actual, mismatch)
    return ComparisonResult(True, expected, actual, f"{len(actual)} rows match")

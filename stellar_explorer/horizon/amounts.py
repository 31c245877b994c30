"""
Stroop / XLM conversion.

1 XLM = 10,000,000 stroops. Absent or invalid inputs degrade to zero; NaN
never reaches a response.
"""

from __future__ import annotations

import math
from typing import Any

STROOPS_PER_XLM = 10_000_000
XLM_DECIMALS = 7
ZERO_XLM = "0.0000000"


def _to_finite_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def stroops_to_xlm(stroops: Any) -> float:
    """Convert an integer-like stroop amount to XLM; 0.0 for missing/invalid input."""
    number = _to_finite_float(stroops)
    if not number:
        return 0.0
    return number / STROOPS_PER_XLM


def format_xlm(value: Any) -> str:
    """Render an XLM amount with exactly 7 decimals; '0.0000000' for missing/invalid input."""
    number = _to_finite_float(value)
    if not number:
        return ZERO_XLM
    return f"{number:.{XLM_DECIMALS}f}"


def parse_stroops(value: Any) -> int | None:
    """Parse an integer stroop field (int or numeric string); None when not an integer."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None

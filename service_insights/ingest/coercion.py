from __future__ import annotations

import math
from typing import Any

"""Cell value coercion shared by the reader, validator and analytics.

Cells hold one of number (int/float), bool or str. The numeric check is an
explicit parse that rejects empty input, so "" never becomes 0.
"""

__all__ = [
    "CellValue",
    "to_number",
    "infer_value",
    "cell_text",
    "TRUE_WORDS",
    "FALSE_WORDS",
]

CellValue = int | float | bool | str

TRUE_WORDS = frozenset({"true", "yes"})
FALSE_WORDS = frozenset({"false", "no"})


def _parse_number_text(text: str) -> float | None:
    stripped = text.strip()
    # float() accepts "1_000"; a CSV cell with underscores is text
    if not stripped or "_" in stripped:
        return None
    try:
        number = float(stripped)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def to_number(value: Any) -> float | None:
    """Return ``value`` as a finite float, or None when it is not numeric.

    Booleans are not numbers here even though ``bool`` subclasses ``int``.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        return _parse_number_text(value)
    return None


def infer_value(raw: str) -> CellValue:
    """Infer the type of a single raw CSV cell.

    Order: number, then true/yes, then false/no, then the trimmed string.
    """
    text = raw.strip()
    number = _parse_number_text(text)
    if number is not None:
        try:
            return int(text)
        except ValueError:
            return number
    lowered = text.lower()
    if lowered in TRUE_WORDS:
        return True
    if lowered in FALSE_WORDS:
        return False
    return text


def cell_text(value: Any) -> str:
    """String form of a cell as an operator would see it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

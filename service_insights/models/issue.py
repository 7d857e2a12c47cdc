from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Issue and ConfirmedException models.

Issues are derived values: recomputed from scratch on every validation pass
and never persisted. Two issues are equal when their content is equal.
"""

__all__ = [
    "Issue",
    "ConfirmedException",
]


@dataclass(frozen=True)
class Issue:
    """One validation failure for one cell."""
    row_index: int  # 0-based position in the dataset at validation time
    row_id: int  # synthetic id, stable across deletes of other rows
    column: str  # CSV column name
    rule: str  # logical rule field (engagement, score, cost, date, category)
    value: Any  # offending raw value
    reason: str
    row: dict[str, Any] = field(default_factory=dict, hash=False)  # snapshot
    confirmable: bool = False

    @property
    def display_row(self) -> int:
        """1-based row number shown to operators."""
        return self.row_index + 1

    def exception_key(self) -> ConfirmedException:
        return ConfirmedException(row_id=self.row_id, column=self.column, value=self.value)


@dataclass(frozen=True)
class ConfirmedException:
    """Operator acceptance of one exact value in one exact cell.

    Keyed on the value: editing the cell to a different value exposes it to
    validation again.
    """
    row_id: int
    column: str
    value: Any

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any

from ..ingest.coercion import cell_text
from .issue import Issue

"""IssueRecord model for the JSON Lines issue log.

Fixed key set, enforced by contracts/issue_log_schema.json. ``row`` is the
1-based row number an operator sees; ``value`` is the cell as text.
"""

__all__ = [
    "IssueRecord",
]


@dataclass(frozen=True)
class IssueRecord:
    """One exported validation issue.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: source CSV name (or "-" when the dataset came from the store)
        row: 1-based row number
        column: CSV column name
        value: offending value as text
        reason: human-readable rule failure
        confirmable: whether the operator may accept the value as-is
    """
    timestamp: str
    file: str
    row: int
    column: str
    value: str
    reason: str
    confirmable: bool

    @staticmethod
    def create(file: str, row: int, column: str, value: Any, reason: str, confirmable: bool = False) -> IssueRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return IssueRecord(
            timestamp=ts,
            file=file,
            row=row,
            column=column,
            value=cell_text(value),
            reason=reason,
            confirmable=confirmable,
        )

    @staticmethod
    def from_issue(issue: Issue, file: str = "-") -> IssueRecord:
        return IssueRecord.create(
            file=file,
            row=issue.display_row,
            column=issue.column,
            value=issue.value,
            reason=issue.reason,
            confirmable=issue.confirmable,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.issue import Issue
from ..models.issue_record import IssueRecord

"""Issue export buffer.

Records collect in memory and are written as JSON Lines (fixed key set, see
contracts/issue_log_schema.json) on flush. A buffer owns one
``issues-YYYYMMDD-HHMMSS.log`` file, stamped in UTC and created lazily.
Not thread-safe.
"""

__all__ = [
    "IssueRecord",
    "IssueLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class IssueLogBuffer:
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._logs_dir = logs_dir or LOGS_DIR
        self._pending: list[IssueRecord] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"issues-{stamp}.log"
        return self._file_path

    def append(self, record: IssueRecord) -> None:
        self._pending.append(record)

    def extend(self, records: Iterable[IssueRecord]) -> None:
        self._pending.extend(records)

    def add_issues(self, issues: Iterable[Issue], source: str = "-") -> int:
        """Queue one record per validation issue; returns how many were queued."""
        records = [IssueRecord.from_issue(i, source) for i in issues]
        self._pending.extend(records)
        return len(records)

    def __len__(self) -> int:
        return len(self._pending)

    def flush(self) -> Path:
        """Append pending records to the log file and return its path.

        Nothing is written (and the file is not created) when the buffer is empty.
        """
        path = self.file_path
        if not self._pending:
            return path
        lines = "".join(r.to_json_line() + "\n" for r in self._pending)
        with path.open("a", encoding="utf-8") as f:
            f.write(lines)
        self._pending.clear()
        return path

from __future__ import annotations

from pathlib import Path

from ..errors import FileConstraintError, ParseError
from ..models.dataset import Dataset, Record
from .coercion import infer_value

"""CSV reader with per-cell type inference.

Supported input: UTF-8, one record per line, comma-separated, no quoting.
The first non-empty line is the header; later non-blank lines are data.
Extension and size checks run before any parsing.
"""

__all__ = [
    "ParseError",
    "FileConstraintError",
    "DEFAULT_MAX_BYTES",
    "parse_csv_text",
    "check_file_constraints",
    "read_csv_file",
]

DEFAULT_MAX_BYTES = 5 * 1024 * 1024
ACCEPTED_SUFFIX = ".csv"


def _split_lines(text: str) -> list[str]:
    # CRLF exports leave a trailing \r on each line
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


def parse_csv_text(text: str) -> Dataset:
    """Parse raw CSV text into a Dataset.

    Duplicate header names are kept in ``headers``; per row the later column
    overwrites the earlier value under the same key.

    Raises:
        ParseError: header line missing/empty, or no data rows.
    """
    lines = _split_lines(text)
    header_at = next((i for i, line in enumerate(lines) if line.strip()), None)
    if header_at is None:
        raise ParseError("CSV has no header line")
    headers = [h.strip() for h in lines[header_at].split(",")]
    if not any(headers):
        raise ParseError("CSV header line has no column names")

    rows: list[Record] = []
    for line in lines[header_at + 1:]:
        if not line.strip():
            continue
        values = line.split(",")
        row: Record = {}
        for i, header in enumerate(headers):
            raw = values[i] if i < len(values) else ""
            row[header] = infer_value(raw)
        rows.append(row)

    if not rows:
        raise ParseError("No data found in the CSV file or the file format is incorrect.")
    return Dataset(headers=headers, rows=rows)


def check_file_constraints(path: Path, max_bytes: int = DEFAULT_MAX_BYTES) -> None:
    """Reject wrong extensions and oversized files before reading them."""
    if path.suffix.lower() != ACCEPTED_SUFFIX:
        raise FileConstraintError(f"Please upload a CSV file: {path.name}")
    try:
        size = path.stat().st_size
    except OSError as e:
        raise FileConstraintError(f"cannot access {path}: {e}") from e
    if size > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        raise FileConstraintError(f"File size exceeds the limit of {limit_mb:g}MB: {path.name}")


def read_csv_file(path: Path, max_bytes: int = DEFAULT_MAX_BYTES) -> Dataset:
    check_file_constraints(path, max_bytes)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(f"{path.name} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise FileConstraintError(f"cannot read {path}: {e}") from e
    return parse_csv_text(text)

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from itertools import count
from typing import Any

import pandas as pd

from ..ingest.coercion import CellValue

"""Dataset model: ordered records sharing one header.

Row position is the operator-facing identity (issues report ``row_index``),
while ``row_ids`` carries a synthetic id assigned when the row enters the
session. Ids survive deletes of earlier rows, positions do not.
"""

__all__ = [
    "Record",
    "Dataset",
]

Record = dict[str, CellValue]

_ROW_IDS = count(1)


def _next_row_ids(n: int) -> list[int]:
    return [next(_ROW_IDS) for _ in range(n)]


@dataclass
class Dataset:
    """Ordered records plus ordered column names (headers).

    Owned by one session, mutated in place by the resolution session and
    replaced wholesale by a new parse.
    """
    headers: list[str]
    rows: list[Record]
    row_ids: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.row_ids:
            self.row_ids = _next_row_ids(len(self.rows))
        if len(self.row_ids) != len(self.rows):
            raise ValueError("row_ids must align with rows")

    @classmethod
    def from_records(cls, headers: list[str], records: list[dict[str, Any]]) -> Dataset:
        """Build a dataset from plain dicts, filling absent columns with ""."""
        keys = list(dict.fromkeys(headers))
        rows = [{k: rec.get(k, "") for k in keys} for rec in records]
        return cls(headers=list(headers), rows=rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.rows)

    def row(self, index: int) -> Record:
        return self.rows[index]

    def row_id(self, index: int) -> int:
        return self.row_ids[index]

    def set_cell(self, index: int, column: str, value: CellValue) -> None:
        """Overwrite a single cell. Other cells of the row are untouched."""
        self.rows[index][column] = value

    def delete_row(self, index: int) -> Record:
        """Remove the row at ``index``; later rows shift down by one."""
        del self.row_ids[index]
        return self.rows.pop(index)

    def column_values(self, column: str) -> list[Any]:
        return [r.get(column) for r in self.rows]

    def to_records(self) -> list[Record]:
        return [dict(r) for r in self.rows]

    def to_frame(self) -> pd.DataFrame:
        """Rows as a DataFrame (object dtype, one column per unique header)."""
        columns = list(dict.fromkeys(self.headers))
        return pd.DataFrame(self.to_records(), columns=columns, dtype=object)

    def copy(self) -> Dataset:
        return Dataset(
            headers=list(self.headers),
            rows=self.to_records(),
            row_ids=list(self.row_ids),
        )

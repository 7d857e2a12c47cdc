from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from ..errors import StorageError
from ..models.dataset import Dataset

"""Key-value persistence for the working dataset.

The dataset and its header list are saved as two independent JSON values
under two keys. There are no transactional guarantees: load on start, save
on every mutation, clear removes both keys.
"""

__all__ = [
    "DATA_KEY",
    "HEADERS_KEY",
    "JsonFileStore",
    "DatasetStore",
]

logger = logging.getLogger(__name__)

DATA_KEY = "csv_data"
HEADERS_KEY = "csv_headers"

_KEY_RE = re.compile(r"[A-Za-z0-9_.-]+")


class JsonFileStore:
    """One ``<key>.json`` file per key under a base directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _KEY_RE.fullmatch(key) or key.startswith("."):
            raise ValueError(f"invalid store key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise StorageError(f"corrupt value for key '{key}': {e}") from e
        except OSError as e:
            raise StorageError(f"cannot read key '{key}': {e}") from e

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(value, ensure_ascii=False), encoding="utf-8")
        except (OSError, TypeError) as e:
            raise StorageError(f"cannot write key '{key}': {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"cannot delete key '{key}': {e}") from e

    def keys(self) -> list[str]:
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json"))


class DatasetStore:
    """Saves and restores a Dataset through a key-value store."""

    def __init__(self, kv: JsonFileStore) -> None:
        self.kv = kv

    def save(self, dataset: Dataset) -> None:
        self.kv.set(DATA_KEY, dataset.to_records())
        self.kv.set(HEADERS_KEY, list(dataset.headers))
        logger.debug(f"saved dataset rows={len(dataset)} dir={self.kv.directory}")

    def load(self) -> Dataset | None:
        """Return the stored dataset, or None when nothing is stored.

        A dataset whose rows were all deleted loads back with zero rows.
        """
        records = self.kv.get(DATA_KEY)
        headers = self.kv.get(HEADERS_KEY)
        if records is None or headers is None:
            return None
        if not isinstance(records, list) or not isinstance(headers, list):
            raise StorageError("stored dataset has an unexpected shape")
        if not all(isinstance(r, dict) for r in records):
            raise StorageError("stored rows must be JSON objects")
        return Dataset.from_records([str(h) for h in headers], records)

    def clear(self) -> None:
        self.kv.delete(DATA_KEY)
        self.kv.delete(HEADERS_KEY)

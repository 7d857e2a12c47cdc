from __future__ import annotations

"""Exception hierarchy shared across ingest, resolution and storage.

Validation issues are not errors: they are the expected output of a
successful validation pass (see services.validator).
"""

__all__ = [
    "ServiceInsightsError",
    "ParseError",
    "FileConstraintError",
    "ResolutionError",
    "EditRejected",
    "ConfirmRejected",
    "StaleIssueError",
    "StorageError",
]


class ServiceInsightsError(Exception):
    """Base exception for recoverable errors at an operation boundary."""


class ParseError(ServiceInsightsError):
    """Raised when CSV text has no header line or no data rows."""


class FileConstraintError(ServiceInsightsError):
    """Raised when an input file has the wrong extension or exceeds the size limit."""


class ResolutionError(ServiceInsightsError):
    """Base exception for rejected operator actions. No mutation is performed."""


class EditRejected(ResolutionError):
    """Raised when an edited value cannot be coerced to the column's type."""


class ConfirmRejected(ResolutionError):
    """Raised when confirming an issue that is not confirmable."""


class StaleIssueError(ResolutionError):
    """Raised when an action references an issue missing from the current pass."""


class StorageError(ServiceInsightsError):
    """Raised when persisted state cannot be read or written."""

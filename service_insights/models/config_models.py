from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the service insights tool.

These are the typed form of config/insights.yml after loading and
validation in service_insights.config.loader.
"""

__all__ = [
    "FIELDS",
    "ColumnMapping",
    "ValidationSettings",
    "VariabilitySettings",
    "StorageSettings",
    "InsightsConfig",
]

# Logical fields in rule evaluation order
FIELDS = ("engagement", "score", "cost", "date", "category")


@dataclass(frozen=True)
class ColumnMapping:
    """Logical field -> CSV column name.

    Defaults follow the service survey export layout.
    """
    engagement: str = "digital_engagement"
    score: str = "nps_score"
    cost: str = "cost"
    date: str = "service_date"
    category: str = "service_type"

    def column_for(self, logical: str) -> str:
        if logical not in FIELDS:
            raise KeyError(logical)
        return getattr(self, logical)

    def field_for(self, column: str) -> str | None:
        """Reverse lookup; None for columns no rule targets."""
        for logical in FIELDS:
            if getattr(self, logical) == column:
                return logical
        return None


@dataclass(frozen=True)
class ValidationSettings:
    cost_outlier_margin: float = 200.0  # flag cost above mean + margin


@dataclass(frozen=True)
class VariabilitySettings:
    """Coefficient of variation thresholds (percent)."""
    high_cv: float = 25.0
    medium_cv: float = 15.0


@dataclass(frozen=True)
class StorageSettings:
    directory: str = ".service_insights"


@dataclass(frozen=True)
class InsightsConfig:
    """Root configuration object."""
    columns: ColumnMapping = field(default_factory=ColumnMapping)
    validation: ValidationSettings = field(default_factory=ValidationSettings)
    variability: VariabilitySettings = field(default_factory=VariabilitySettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    max_file_size_mb: float = 5.0

    @property
    def max_file_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)

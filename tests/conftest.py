# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from service_insights.logging.init import reset_logging
from service_insights.models.config_models import ColumnMapping, InsightsConfig

# Short column names used by the worked examples
SHORT_COLUMNS = ColumnMapping(
    engagement="engagement",
    score="score",
    cost="cost",
    date="date",
    category="category",
)


@pytest.fixture(autouse=True)
def _fresh_logging():
    # handlers bind sys.stdout at creation; capsys swaps it per test
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("SERVICE_INSIGHTS_STORE_DIR", raising=False)
        monkeypatch.delenv("SERVICE_INSIGHTS_MAX_FILE_MB", raising=False)
        yield p


@pytest.fixture()
def short_config() -> InsightsConfig:
    return InsightsConfig(columns=SHORT_COLUMNS)


@pytest.fixture()
def example_csv_text() -> str:
    return "engagement,score,cost,date,category\nYes,9,50,01/15/24,Tune-up\nyes,,-10,01/32/24,\n"


@pytest.fixture()
def clean_csv_text() -> str:
    return (
        "digital_engagement,nps_score,cost,service_date,service_type\n"
        "Yes,10,60,01/05/24,Oil Change\n"
        "No,6,55,01/20/24,Oil Change\n"
        "yes,9,180,02/03/24,Tune-up\n"
        "no,7,220,02/14/24,Tune-up\n"
        "true,8,200,03/01/24,Tune-up\n"
    )


@pytest.fixture()
def dirty_csv_text() -> str:
    return (
        "digital_engagement,nps_score,cost,service_date,service_type\n"
        "Yes,10,100,01/05/24,Oil Change\n"
        "maybe,9,100,01/06/24,Oil Change\n"
        "No,11,100,01/07/24,Tune-up\n"
        "Yes,8,100,13/01/24,Tune-up\n"
        "No,3,700,02/01/24,\n"
    )


@pytest.fixture()
def sample_config_yaml() -> str:
    return """columns:
  engagement: digital_engagement
  score: nps_score
  cost: cost
  date: service_date
  category: service_type
validation:
  cost_outlier_margin: 200
variability:
  high_cv: 25
  medium_cv: 15
storage:
  directory: ./store
max_file_size_mb: 5
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "insights.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def write_csv(temp_workdir: Path):
    def _write(text: str, name: str = "services.csv") -> Path:
        p = temp_workdir / "data" / name
        p.write_text(text, encoding="utf-8")
        return p
    return _write

from __future__ import annotations

import json
from pathlib import Path

from scripts.gen_sample_dataset import generate_service_data
from service_insights.cli.main import main

"""End-to-end workflow: load a generated CSV, resolve every issue, report.

Each CLI call is a separate process-like invocation sharing only the
on-disk store, so confirmations made while resolving do not carry over.
"""


def _answers_for(line: str) -> list[str]:
    """Pick a fixing action for one rendered issue line."""
    if "[confirmable]" in line:
        return ["c"]
    if "column=digital_engagement" in line:
        return ["e", "no"]
    if "column=nps_score" in line:
        return ["e", "5"]
    if "column=service_date" in line:
        return ["e", "06/15/24"]
    if "column=service_type" in line:
        return ["e", "Inspection"]
    return ["d"]


class AutoFixer:
    """input() stand-in that answers based on the last printed issue."""

    def __init__(self, capsys) -> None:
        self.capsys = capsys
        self.pending: list[str] = []
        self.prompts = 0

    def __call__(self, prompt: str = "") -> str:
        self.prompts += 1
        if not self.pending:
            out = self.capsys.readouterr().out
            issue_lines = [line for line in out.splitlines() if line.startswith("#")]
            assert issue_lines, "prompted without an issue on screen"
            self.pending = _answers_for(issue_lines[-1])
        return self.pending.pop(0)


def test_generated_dataset_end_to_end(write_config, temp_workdir: Path, capsys):
    df = generate_service_data(200, dirty_fraction=0.1, seed=7)
    path = temp_workdir / "data" / "generated.csv"
    df.to_csv(path, index=False, lineterminator="\n")

    assert main(["load", str(path)]) == 2
    capsys.readouterr()

    fixer = AutoFixer(capsys)
    code = main(["resolve"], input_fn=fixer)
    out = capsys.readouterr().out
    assert code == 0, out
    assert fixer.prompts > 0

    assert main(["report", "--json"]) == 0
    out = capsys.readouterr().out
    data = json.loads(out[out.index("{\n"): out.rindex("\n}") + 2])
    assert data["rows"] == 200
    assert data["engagement"]["total"] == 200
    names = {c["category"] for c in data["breakdown"]["categories"]}
    assert names <= {"Oil Change", "Tune-up", "Brake Repair", "Tire Rotation", "Inspection"}


def test_store_survives_between_invocations(write_config, write_csv, dirty_csv_text, capsys):
    main(["load", str(write_csv(dirty_csv_text))])
    answers = iter(["e", "yes", "q"])
    main(["resolve"], input_fn=lambda prompt="": next(answers))
    capsys.readouterr()

    main(["issues"])
    out = capsys.readouterr().out
    assert "value='maybe'" not in out
    assert "SUMMARY rows=5 issues=4" in out

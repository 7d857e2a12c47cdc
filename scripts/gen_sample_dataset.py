#!/usr/bin/env python3
"""Dataset generation script for manual and performance testing.

Generates a synthetic service satisfaction CSV in the layout the tool expects
(default column names from config/insights.yml):

    digital_engagement,nps_score,cost,service_date,service_type

A share of rows can be made dirty (bad flags, out-of-range scores, negative
or outlier costs, impossible dates, blank categories) so every validation
rule fires at least once on large enough outputs.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

SERVICE_TYPES = {
    # name: (mean cost, cost spread)
    "Oil Change": (60.0, 8.0),
    "Tune-up": (180.0, 30.0),
    "Brake Repair": (320.0, 90.0),
    "Tire Rotation": (45.0, 5.0),
    "Inspection": (90.0, 25.0),
}

COLUMNS = ["digital_engagement", "nps_score", "cost", "service_date", "service_type"]


def generate_service_data(rows: int, dirty_fraction: float = 0.0, seed: int = 42) -> pd.DataFrame:
    """Generate synthetic service rows.

    Args:
        rows: Number of data rows to generate
        dirty_fraction: Share of rows (0..1) given one rule violation each
        seed: Random seed for reproducible data

    Returns:
        DataFrame with the five expected columns, all values as strings
    """
    rng = np.random.default_rng(seed)
    names = list(SERVICE_TYPES)
    types = rng.choice(names, rows)

    engaged = rng.random(rows) < 0.55
    # engaged customers skew slightly happier
    scores = np.clip(np.round(rng.normal(7.2, 2.0, rows) + engaged * 0.8), 0, 10).astype(int)
    costs = np.array(
        [max(5.0, rng.normal(*SERVICE_TYPES[t])) for t in types]
    ).round(2)
    months = rng.integers(1, 13, rows)
    days = rng.integers(1, 29, rows)

    df = pd.DataFrame(
        {
            "digital_engagement": np.where(engaged, "Yes", "No"),
            "nps_score": scores.astype(str),
            "cost": [f"{c:.2f}" for c in costs],
            "service_date": [f"{m:02d}/{d:02d}/24" for m, d in zip(months, days)],
            "service_type": types,
        },
        columns=COLUMNS,
    )

    n_dirty = int(rows * dirty_fraction)
    if n_dirty:
        dirty_rows = rng.choice(rows, n_dirty, replace=False)
        faults = rng.integers(0, 6, n_dirty)
        for r, fault in zip(dirty_rows, faults):
            if fault == 0:
                df.at[r, "digital_engagement"] = "maybe"
            elif fault == 1:
                df.at[r, "nps_score"] = "11"
            elif fault == 2:
                df.at[r, "cost"] = "-25.00"
            elif fault == 3:
                df.at[r, "cost"] = "1500.00"
            elif fault == 4:
                df.at[r, "service_date"] = "13/45/24"
            else:
                df.at[r, "service_type"] = ""
    return df


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic service satisfaction CSV files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 1,000 clean rows
  %(prog)s services.csv

  # 50,000 rows, 5%% dirty
  %(prog)s large.csv --rows 50000 --dirty 0.05
        """,
    )
    parser.add_argument("output", type=Path, help="Output CSV file path")
    parser.add_argument("--rows", type=int, default=1_000, help="Number of data rows (default: 1,000)")
    parser.add_argument("--dirty", type=float, default=0.0, help="Share of dirty rows, 0..1 (default: 0)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0.0 <= args.dirty <= 1.0:
        print("Error: --dirty must be between 0 and 1", file=sys.stderr)
        return 1

    df = generate_service_data(args.rows, args.dirty, args.seed)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(args.output, index=False, lineterminator="\n")
    size_mb = args.output.stat().st_size / (1024 * 1024)
    print(f"Created CSV file: {args.output}")
    print(f"  Rows: {args.rows:,} (dirty: {int(args.rows * args.dirty):,})")
    print(f"  Size: {size_mb:.2f} MB")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

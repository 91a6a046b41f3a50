"""
Step 2: Daily Totals

This module sums steps per calendar day and summarizes the distribution
of daily totals.

Only observations with a recorded steps value count toward a total.
A date with no recorded value at all is omitted, not treated as zero.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional, Tuple
import pandas as pd

from .config import Step2Config
from .utils import (
    ensure_dir,
    load_observations,
    mean_or_none,
    median_or_none,
    format_value,
    save_dataframe,
    print_summary_stats
)


@dataclass(frozen=True)
class DailySummary:
    """Mean and median of daily totals. None means undefined (no dates included)."""

    n_days: int
    mean: Optional[float]
    median: Optional[float]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(self)])


def compute_daily_totals(df: pd.DataFrame) -> pd.DataFrame:
    """
    Sum recorded steps per date.

    Args:
        df: Observation table with steps, date, interval

    Returns:
        DataFrame with date, total_steps, n_present sorted by date.
        Dates whose observations are all missing are not included.
    """
    present = df[df["steps"].notna()]

    daily = (
        present.groupby("date", sort=True)["steps"]
        .agg(total_steps="sum", n_present="count")
        .reset_index()
    )
    daily["total_steps"] = daily["total_steps"].astype(float)
    daily["n_present"] = daily["n_present"].astype(int)

    return daily


def summarize_daily_totals(daily: pd.DataFrame) -> DailySummary:
    """
    Mean and median of the included daily totals.

    Args:
        daily: Output of compute_daily_totals

    Returns:
        DailySummary; mean and median are None when no date is included
    """
    totals = daily["total_steps"]
    return DailySummary(
        n_days=int(totals.notna().sum()),
        mean=mean_or_none(totals),
        median=median_or_none(totals),
    )


def run_step2(cfg: Step2Config) -> Tuple[pd.DataFrame, DailySummary]:
    """
    Execute Step 2: Compute daily totals.

    This step:
    1. Loads the observation table from Step 1
    2. Sums recorded steps per date, skipping all-missing dates
    3. Computes the mean and median of daily totals

    Args:
        cfg: Step2Config with input/output paths

    Returns:
        Tuple of (daily_totals, summary)
    """
    print("\n" + "=" * 70)
    print("STEP 2: Daily Totals")
    print("=" * 70)

    ensure_dir(cfg.outdir)

    # Load observations
    print(f"\nLoading input: {cfg.input_csv}")
    df = load_observations(cfg.input_csv)
    print(f"  Total rows: {len(df):,}")

    # Aggregate per date
    print("\nSumming steps per date...")
    daily = compute_daily_totals(df)
    summary = summarize_daily_totals(daily)

    n_dates = df["date"].nunique()

    print("\n" + "-" * 70)
    print("Summary Statistics:")
    print("-" * 70)
    print_summary_stats("Dates with recorded steps", n_dates, summary.n_days)
    print(f"  Mean daily steps: {format_value(summary.mean)}")
    print(f"  Median daily steps: {format_value(summary.median)}")

    # Save outputs
    print("\nSaving outputs...")
    save_dataframe(daily, cfg.outdir / "daily_totals.csv")
    save_dataframe(summary.to_frame(), cfg.outdir / "step2_summary.csv")

    print("\n" + "=" * 70)
    print("STEP 2 COMPLETED")
    print("=" * 70)

    return daily, summary


def main():
    """
    Example usage of Step 2.

    This is a template for running Step 2. Modify the paths below to match
    your data location before running.
    """
    # =========================================================================
    # CONFIGURATION - Modify these paths for your environment
    # =========================================================================
    input_csv = Path("output/step1/observations.csv")  # Observations from Step 1
    outdir = Path("output/step2")                       # Output directory
    # =========================================================================

    config = Step2Config(
        input_csv=input_csv,
        outdir=outdir
    )

    daily, summary = run_step2(config)
    return daily, summary


if __name__ == "__main__":
    main()

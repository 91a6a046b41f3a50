"""
Step 3: Interval Profile

This module computes the average daily activity pattern: the mean number
of steps in each 5-minute interval, averaged across all days with a
recorded value for that interval, and the interval with peak activity.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional, Tuple
import pandas as pd

from .config import Step3Config, INTERVALS_PER_DAY
from .utils import (
    ensure_dir,
    load_observations,
    interval_to_time_str,
    save_dataframe,
    print_summary_stats
)


@dataclass(frozen=True)
class PeakInterval:
    """Interval with the highest mean steps."""

    interval: int
    mean_steps: float
    time_of_day: str

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(self)])


def compute_interval_profile(df: pd.DataFrame) -> pd.DataFrame:
    """
    Mean recorded steps per interval code across all dates.

    Missing values are ignored, not counted as zero. Intervals with no
    recorded value on any date are absent from the profile.

    Args:
        df: Observation table with steps, date, interval

    Returns:
        DataFrame with interval, mean_steps, n_present, time_of_day
        sorted by ascending interval code
    """
    present = df[df["steps"].notna()]

    profile = (
        present.groupby("interval", sort=True)["steps"]
        .agg(mean_steps="mean", n_present="count")
        .reset_index()
    )
    profile["mean_steps"] = profile["mean_steps"].astype(float)
    profile["n_present"] = profile["n_present"].astype(int)
    profile["time_of_day"] = interval_to_time_str(profile["interval"])

    return profile


def find_peak_interval(profile: pd.DataFrame) -> Optional[PeakInterval]:
    """
    Interval with the maximum mean steps.

    Ties go to the smallest interval code (earliest time of day).

    Args:
        profile: Output of compute_interval_profile

    Returns:
        PeakInterval, or None if the profile is empty
    """
    if profile.empty:
        return None

    ordered = profile.sort_values("interval", kind="stable").reset_index(drop=True)
    # idxmax returns the first occurrence of the maximum
    row = ordered.loc[ordered["mean_steps"].idxmax()]

    return PeakInterval(
        interval=int(row["interval"]),
        mean_steps=float(row["mean_steps"]),
        time_of_day=str(row["time_of_day"]),
    )


def run_step3(cfg: Step3Config) -> Tuple[pd.DataFrame, Optional[PeakInterval]]:
    """
    Execute Step 3: Compute the interval profile.

    This step:
    1. Loads the observation table from Step 1
    2. Averages recorded steps per interval code across dates
    3. Finds the interval with the highest mean

    Args:
        cfg: Step3Config with input/output paths

    Returns:
        Tuple of (profile, peak)
            - profile: Mean steps per interval
            - peak: Peak interval, or None if no steps were recorded
    """
    print("\n" + "=" * 70)
    print("STEP 3: Interval Profile")
    print("=" * 70)

    ensure_dir(cfg.outdir)

    # Load observations
    print(f"\nLoading input: {cfg.input_csv}")
    df = load_observations(cfg.input_csv)
    print(f"  Total rows: {len(df):,}")

    # Average per interval
    print("\nAveraging steps per interval...")
    profile = compute_interval_profile(df)
    peak = find_peak_interval(profile)

    print("\n" + "-" * 70)
    print("Summary Statistics:")
    print("-" * 70)
    print_summary_stats("Intervals with recorded steps", INTERVALS_PER_DAY, len(profile))
    if peak is None:
        print("  Peak interval: undefined (no recorded steps)")
    else:
        print(f"  Peak interval: {peak.interval} ({peak.time_of_day}), "
              f"mean {peak.mean_steps:.2f} steps")

    # Save outputs
    print("\nSaving outputs...")
    save_dataframe(profile, cfg.outdir / "interval_profile.csv")
    if peak is not None:
        save_dataframe(peak.to_frame(), cfg.outdir / "step3_summary.csv")
    else:
        save_dataframe(pd.DataFrame(columns=["interval", "mean_steps", "time_of_day"]),
                       cfg.outdir / "step3_summary.csv")

    print("\n" + "=" * 70)
    print("STEP 3 COMPLETED")
    print("=" * 70)

    return profile, peak


def main():
    """
    Example usage of Step 3.

    This is a template for running Step 3. Modify the paths below to match
    your data location before running.
    """
    # =========================================================================
    # CONFIGURATION - Modify these paths for your environment
    # =========================================================================
    input_csv = Path("output/step1/observations.csv")  # Observations from Step 1
    outdir = Path("output/step3")                       # Output directory
    # =========================================================================

    config = Step3Config(
        input_csv=input_csv,
        outdir=outdir
    )

    profile, peak = run_step3(config)
    return profile, peak


if __name__ == "__main__":
    main()

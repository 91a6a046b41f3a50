"""
Step 5: Weekday vs Weekend Activity

This module labels each date of the imputed series as weekday or weekend
(Saturday and Sunday) and computes the mean steps per interval for each
day type.
"""

from __future__ import annotations
from pathlib import Path
from typing import Tuple
import pandas as pd

from .config import Step5Config, WEEKDAY, WEEKEND, WEEKEND_DAYS
from .utils import (
    ensure_dir,
    load_observations,
    interval_to_time_str,
    save_dataframe
)


def classify_day_type(dates: pd.Series) -> pd.Series:
    """
    Label dates as weekday or weekend by day of week.

    Args:
        dates: Series of datetime64 dates

    Returns:
        Series of "weekday" / "weekend" labels aligned with dates
    """
    is_weekend = dates.dt.dayofweek.isin(WEEKEND_DAYS)
    return is_weekend.map({True: WEEKEND, False: WEEKDAY}).rename("day_type")


def compute_day_type_profiles(imputed: pd.DataFrame) -> pd.DataFrame:
    """
    Mean steps per interval, split by day type.

    Args:
        imputed: Imputed observation table (no missing steps)

    Returns:
        DataFrame with day_type, interval, mean_steps, n_days, time_of_day
        sorted by day type then interval
    """
    labeled = imputed.assign(day_type=classify_day_type(imputed["date"]))

    profiles = (
        labeled.groupby(["day_type", "interval"], sort=True)["steps"]
        .agg(mean_steps="mean", n_days="count")
        .reset_index()
    )
    profiles["mean_steps"] = profiles["mean_steps"].astype(float)
    profiles["n_days"] = profiles["n_days"].astype(int)
    profiles["time_of_day"] = interval_to_time_str(profiles["interval"])

    return profiles


def count_dates_by_day_type(imputed: pd.DataFrame) -> pd.DataFrame:
    """
    Number of distinct dates of each day type.

    Args:
        imputed: Observation table with a date column

    Returns:
        DataFrame with day_type, n_dates (both day types always present)
    """
    dates = pd.Series(imputed["date"].drop_duplicates().to_numpy(), name="date")
    counts = classify_day_type(dates).value_counts()

    return pd.DataFrame({
        "day_type": [WEEKDAY, WEEKEND],
        "n_dates": [int(counts.get(WEEKDAY, 0)), int(counts.get(WEEKEND, 0))],
    })


def run_step5(cfg: Step5Config) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Execute Step 5: Compare weekday and weekend activity.

    This step:
    1. Loads the imputed observation table from Step 4
    2. Labels each date as weekday or weekend
    3. Averages steps per interval for each day type

    Args:
        cfg: Step5Config with input/output paths

    Returns:
        Tuple of (profiles, date_counts)
    """
    print("\n" + "=" * 70)
    print("STEP 5: Weekday vs Weekend Activity")
    print("=" * 70)

    ensure_dir(cfg.outdir)

    # Load imputed observations
    print(f"\nLoading input: {cfg.input_csv}")
    imputed = load_observations(cfg.input_csv, steps_dtype="Float64")
    print(f"  Total rows: {len(imputed):,}")

    n_missing = int(imputed["steps"].isna().sum())
    if n_missing > 0:
        print(f"  [warn] {n_missing:,} rows still missing steps; they are ignored")

    # Profile per day type
    print("\nAveraging steps per interval and day type...")
    profiles = compute_day_type_profiles(imputed)
    date_counts = count_dates_by_day_type(imputed)

    print("\n" + "-" * 70)
    print("Summary Statistics:")
    print("-" * 70)
    for _, row in date_counts.iterrows():
        sub = profiles[profiles["day_type"] == row["day_type"]]
        mean_daily = sub["mean_steps"].sum()
        print(f"  {row['day_type']:8s}: {row['n_dates']:3d} dates, "
              f"mean steps per day {mean_daily:,.2f}")

    # Save outputs
    print("\nSaving outputs...")
    save_dataframe(profiles, cfg.outdir / "day_type_profile.csv")
    save_dataframe(date_counts, cfg.outdir / "step5_summary.csv")

    print("\n" + "=" * 70)
    print("STEP 5 COMPLETED")
    print("=" * 70)

    return profiles, date_counts


def main():
    """
    Example usage of Step 5.

    This is a template for running Step 5. Modify the paths below to match
    your data location before running.
    """
    # =========================================================================
    # CONFIGURATION - Modify these paths for your environment
    # =========================================================================
    input_csv = Path("output/step4/observations_imputed.csv")  # Imputed data from Step 4
    outdir = Path("output/step5")                               # Output directory
    # =========================================================================

    config = Step5Config(
        input_csv=input_csv,
        outdir=outdir
    )

    profiles, date_counts = run_step5(config)
    return profiles, date_counts


if __name__ == "__main__":
    main()

"""
Step 4: Missing Value Imputation

This module fills every missing steps value with the mean for its own
5-minute interval (from Step 3) and recomputes daily totals on the
completed series for comparison with Step 2.

The fill value is looked up by the observation's interval code, so the
result does not depend on row order or on every day having all 288 rows.

Intervals with no recorded value on any date have no mean. Policy:
    - "global_mean": fill with the mean of all recorded steps and warn
    - "raise": raise ImputationError
If no steps were recorded at all, ImputationError is raised in both modes.
"""

from __future__ import annotations
from pathlib import Path
from typing import Tuple
import warnings
import pandas as pd

from .config import Step4Config, IMPUTATION_FALLBACK
from .errors import ImputationError, ImputationWarning
from .step2_daily_totals import DailySummary, compute_daily_totals, summarize_daily_totals
from .utils import (
    ensure_dir,
    load_observations,
    load_interval_table,
    load_daily_totals,
    mean_or_none,
    ratio_or_none,
    format_value,
    save_dataframe,
    print_summary_stats
)


FALLBACK_POLICIES = ("global_mean", "raise")


def impute_missing(df: pd.DataFrame, profile: pd.DataFrame, fallback: str = IMPUTATION_FALLBACK) -> pd.DataFrame:
    """
    Replace missing steps with the mean of the same interval.

    Args:
        df: Observation table with steps, date, interval
        profile: Interval profile with interval, mean_steps (Step 3)
        fallback: Policy for intervals absent from the profile
                  ("global_mean" or "raise")

    Returns:
        DataFrame with steps (Float64, never missing), date, interval,
        was_imputed; same length, order, and index as df

    Raises:
        ValueError: If fallback is not a known policy
        ImputationError: If a missing value cannot be filled under the policy
    """
    if fallback not in FALLBACK_POLICIES:
        raise ValueError(f"Unknown imputation fallback: {fallback!r} (expected one of {FALLBACK_POLICIES})")

    missing = df["steps"].isna()

    # Look up the fill value by interval code
    lookup = profile.set_index("interval")["mean_steps"]
    fill = df["interval"].map(lookup).astype(float)

    unresolved = missing & fill.isna()
    if unresolved.any():
        codes = sorted(int(c) for c in df.loc[unresolved, "interval"].unique())
        if fallback == "raise":
            raise ImputationError(
                f"{len(codes)} interval(s) have no recorded steps on any date: {codes}"
            )

        global_mean = mean_or_none(df["steps"])
        if global_mean is None:
            raise ImputationError("No recorded steps in the data; nothing to impute from")

        message = (
            f"{len(codes)} interval(s) have no recorded steps on any date; "
            f"filled {int(unresolved.sum()):,} values with the global mean {global_mean:.2f}: {codes}"
        )
        print(f"  [warn] {message}")
        warnings.warn(message, ImputationWarning, stacklevel=2)
        fill = fill.fillna(global_mean)

    steps = df["steps"].astype("Float64").fillna(fill)

    return pd.DataFrame({
        "steps": steps,
        "date": df["date"],
        "interval": df["interval"],
        "was_imputed": missing,
    }, index=df.index)


def compare_daily_summaries(before: DailySummary, after: DailySummary) -> pd.DataFrame:
    """
    Compare daily total statistics before and after imputation.

    pct_of_before is after / before * 100, kept so the figures line up with
    earlier reports; undefined statistics give undefined comparisons.

    Args:
        before: Summary of daily totals on the raw data
        after: Summary of daily totals on the imputed data

    Returns:
        DataFrame with statistic, before, after, difference, pct_of_before
    """
    rows = []
    for statistic in ("n_days", "mean", "median"):
        b = getattr(before, statistic)
        a = getattr(after, statistic)
        ratio = ratio_or_none(a, b)
        rows.append({
            "statistic": statistic,
            "before": b,
            "after": a,
            "difference": a - b if a is not None and b is not None else None,
            "pct_of_before": ratio * 100 if ratio is not None else None,
        })

    return pd.DataFrame(rows)


def run_step4(cfg: Step4Config) -> Tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    """
    Execute Step 4: Impute missing values and recompute daily totals.

    This step:
    1. Loads observations (Step 1), the interval profile (Step 3),
       and the raw daily totals (Step 2)
    2. Fills each missing value with its interval mean
    3. Recomputes daily totals on the completed series
    4. Compares mean/median daily totals before and after

    Args:
        cfg: Step4Config with input/output paths and fallback policy

    Returns:
        Tuple of (imputed, daily_imputed, comparison)
    """
    print("\n" + "=" * 70)
    print("STEP 4: Missing Value Imputation")
    print("=" * 70)

    ensure_dir(cfg.outdir)

    # Load inputs
    print(f"\nLoading observations: {cfg.input_csv}")
    df = load_observations(cfg.input_csv)
    print(f"  Total rows: {len(df):,}")

    print(f"Loading interval profile: {cfg.profile_csv}")
    profile = load_interval_table(cfg.profile_csv)
    print(f"  Intervals: {len(profile):,}")

    print(f"Loading daily totals: {cfg.daily_csv}")
    daily_before = load_daily_totals(cfg.daily_csv)

    # Impute
    print(f"\nImputing missing values (fallback: {cfg.fallback})...")
    imputed = impute_missing(df, profile, cfg.fallback)
    print_summary_stats("Imputed values", len(imputed), int(imputed["was_imputed"].sum()))

    # Recompute daily totals
    print("\nRecomputing daily totals...")
    daily_imputed = compute_daily_totals(imputed)
    before = summarize_daily_totals(daily_before)
    after = summarize_daily_totals(daily_imputed)
    comparison = compare_daily_summaries(before, after)

    print("\n" + "-" * 70)
    print("Summary Statistics:")
    print("-" * 70)
    print(f"  Dates included: {before.n_days:,} -> {after.n_days:,}")
    print(f"  Mean daily steps: {format_value(before.mean)} -> {format_value(after.mean)}")
    print(f"  Median daily steps: {format_value(before.median)} -> {format_value(after.median)}")

    # Save outputs
    print("\nSaving outputs...")
    save_dataframe(imputed, cfg.outdir / "observations_imputed.csv")
    save_dataframe(daily_imputed, cfg.outdir / "daily_totals_imputed.csv")
    save_dataframe(comparison, cfg.outdir / "step4_summary.csv")

    print("\n" + "=" * 70)
    print("STEP 4 COMPLETED")
    print("=" * 70)

    return imputed, daily_imputed, comparison


def main():
    """
    Example usage of Step 4.

    This is a template for running Step 4. Modify the paths below to match
    your data location before running.
    """
    # =========================================================================
    # CONFIGURATION - Modify these paths for your environment
    # =========================================================================
    input_csv = Path("output/step1/observations.csv")        # Observations from Step 1
    daily_csv = Path("output/step2/daily_totals.csv")        # Daily totals from Step 2
    profile_csv = Path("output/step3/interval_profile.csv")  # Interval profile from Step 3
    outdir = Path("output/step4")                            # Output directory

    fallback = "global_mean"  # "global_mean" or "raise"
    # =========================================================================

    config = Step4Config(
        input_csv=input_csv,
        profile_csv=profile_csv,
        daily_csv=daily_csv,
        outdir=outdir,
        fallback=fallback
    )

    imputed, daily_imputed, comparison = run_step4(config)
    return imputed, daily_imputed, comparison


if __name__ == "__main__":
    main()

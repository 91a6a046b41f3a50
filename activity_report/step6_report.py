"""
Step 6: Charts and Report

This module renders the report charts and a Markdown summary of the
pipeline results:
    - histogram of daily totals before and after imputation
    - average daily activity pattern with the peak interval marked
    - weekday vs weekend activity patterns (two stacked panels)
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import pandas as pd
import numpy as np
import matplotlib.pyplot as plt

from .config import Step6Config, WEEKDAY, WEEKEND
from .step1_load_data import count_missing
from .step2_daily_totals import DailySummary, summarize_daily_totals
from .step3_interval_profile import PeakInterval, find_peak_interval
from .utils import (
    ensure_dir,
    load_csv_safe,
    validate_required_columns,
    load_observations,
    load_interval_table,
    load_daily_totals,
    interval_to_minute_of_day,
    format_value
)


def set_report_mpl_style() -> None:
    """Simple report-friendly matplotlib styling."""
    plt.rcParams.update({
        "font.size": 11,
        "axes.titlesize": 12,
        "axes.labelsize": 11,
        "xtick.labelsize": 10,
        "ytick.labelsize": 10,
        "legend.fontsize": 10,

        "axes.linewidth": 1.0,
        "lines.linewidth": 1.5,

        "savefig.dpi": 150,
        "figure.dpi": 100,
    })


def _set_hour_ticks(ax) -> None:
    """Label a minute-of-day x-axis every 4 hours."""
    ticks = np.arange(0, 24 * 60 + 1, 4 * 60)
    ax.set_xticks(ticks)
    ax.set_xticklabels([f"{t // 60:02d}:00" for t in ticks])
    ax.set_xlim(0, 24 * 60)


def save_histogram(
    data: np.ndarray,
    bins: int,
    xlabel: str,
    out_path: Path,
    title: str = "",
    line_specs: Optional[List[Tuple[float, str, str]]] = None,
    alpha: float = 0.35
) -> Optional[Path]:
    """
    Histogram with frequency(count) on y-axis.
    line_specs: list of (x, linestyle, label)

    Args:
        data: Data to plot
        bins: Number of histogram bins
        xlabel: X-axis label
        out_path: Output .png path
        title: Optional figure title
        line_specs: List of (x, linestyle, label) for vertical reference lines
        alpha: Transparency for histogram bars

    Returns:
        Path to the saved figure, or None if there was nothing to plot
    """
    if data.size == 0:
        print(f"  [warn] no data for plot: {out_path.name}")
        return None

    set_report_mpl_style()

    fig, ax = plt.subplots(figsize=(6.8, 4.2))
    ax.hist(
        data,
        bins=bins,
        density=False,
        alpha=alpha,
        edgecolor="black",
        linewidth=0.6,
    )

    if line_specs:
        for x, ls, lab in line_specs:
            ax.axvline(x, linestyle=ls, linewidth=2.0, label=lab)
        ax.legend(frameon=False)

    if title:
        ax.set_title(title)
    ax.set_xlabel(xlabel)
    ax.set_ylabel("Frequency")
    fig.tight_layout()

    fig.savefig(out_path)
    plt.close(fig)

    print(f"  Saved: {out_path}")
    return out_path


def _summary_lines(summary: DailySummary) -> List[Tuple[float, str, str]]:
    """Reference lines for the mean and median of daily totals."""
    lines = []
    if summary.mean is not None:
        lines.append((summary.mean, "--", f"Mean = {summary.mean:,.0f}"))
    if summary.median is not None:
        lines.append((summary.median, ":", f"Median = {summary.median:,.0f}"))
    return lines


def save_interval_profile_plot(profile: pd.DataFrame, out_path: Path, peak: Optional[PeakInterval] = None) -> Optional[Path]:
    """
    Line chart of mean steps per interval across the day.

    Args:
        profile: Interval profile with interval, mean_steps
        out_path: Output .png path
        peak: Peak interval to mark, if any

    Returns:
        Path to the saved figure, or None if the profile is empty
    """
    if profile.empty:
        print(f"  [warn] no data for plot: {out_path.name}")
        return None

    set_report_mpl_style()

    fig, ax = plt.subplots(figsize=(8.0, 4.2))
    ax.plot(interval_to_minute_of_day(profile["interval"]), profile["mean_steps"])

    if peak is not None:
        x = int(interval_to_minute_of_day(pd.Series([peak.interval])).iloc[0])
        ax.axvline(x, linestyle="--", linewidth=1.0, color="grey")
        ax.annotate(
            f"Peak {peak.time_of_day} ({peak.mean_steps:.1f})",
            xy=(x, peak.mean_steps),
            xytext=(8, -4),
            textcoords="offset points",
        )

    _set_hour_ticks(ax)
    ax.set_title("Average daily activity pattern")
    ax.set_xlabel("Time of day (5-minute interval)")
    ax.set_ylabel("Mean steps")
    fig.tight_layout()

    fig.savefig(out_path)
    plt.close(fig)

    print(f"  Saved: {out_path}")
    return out_path


def save_day_type_plot(profiles: pd.DataFrame, out_path: Path) -> Optional[Path]:
    """
    Weekday and weekend activity patterns in two stacked panels with shared axes.

    Args:
        profiles: Day type profiles with day_type, interval, mean_steps
        out_path: Output .png path

    Returns:
        Path to the saved figure, or None if there is nothing to plot
    """
    if profiles.empty:
        print(f"  [warn] no data for plot: {out_path.name}")
        return None

    set_report_mpl_style()

    fig, axes = plt.subplots(2, 1, figsize=(8.0, 6.0), sharex=True, sharey=True)
    for ax, day_type in zip(axes, (WEEKEND, WEEKDAY)):
        sub = profiles[profiles["day_type"] == day_type]
        if not sub.empty:
            ax.plot(interval_to_minute_of_day(sub["interval"]), sub["mean_steps"])
        ax.set_title(day_type)
        ax.set_ylabel("Mean steps")

    _set_hour_ticks(axes[-1])
    axes[-1].set_xlabel("Time of day (5-minute interval)")
    fig.tight_layout()

    fig.savefig(out_path)
    plt.close(fig)

    print(f"  Saved: {out_path}")
    return out_path


def load_comparison(csv_path: Path) -> pd.DataFrame:
    """Load the before/after comparison table written by Step 4."""
    df = load_csv_safe(csv_path, dtype="str")
    for col in ("before", "after", "difference", "pct_of_before"):
        df[col] = pd.to_numeric(df[col]).astype(float)
    return df


def load_date_counts(csv_path: Path) -> Dict[str, int]:
    """Load the number of dates per day type written by Step 5."""
    df = load_csv_safe(csv_path, dtype="str")
    validate_required_columns(df, ["day_type", "n_dates"], str(csv_path))
    counts = dict(zip(df["day_type"], pd.to_numeric(df["n_dates"]).astype(int)))
    return {day_type: int(counts.get(day_type, 0)) for day_type in (WEEKDAY, WEEKEND)}


def render_report(
    n_observations: int,
    n_missing: int,
    before: DailySummary,
    peak: Optional[PeakInterval],
    after: DailySummary,
    comparison: pd.DataFrame,
    date_counts: Dict[str, int],
    figures: Dict[str, Optional[Path]]
) -> str:
    """
    Build the Markdown report text.

    Args:
        n_observations: Number of raw observations
        n_missing: Number of missing observations in the raw data
        before: Daily total summary before imputation
        peak: Peak interval (None if undefined)
        after: Daily total summary after imputation
        comparison: Before/after comparison table
        date_counts: Number of dates per day type
        figures: Figure key -> saved path (None if not drawn)

    Returns:
        Report as a Markdown string
    """
    def figure(key: str, caption: str) -> List[str]:
        path = figures.get(key)
        if path is None:
            return [f"_{caption}: no data to plot._", ""]
        return [f"![{caption}]({path.name})", ""]

    lines = ["# Personal activity monitoring report", ""]

    lines += ["## Total number of steps taken per day", ""]
    lines += figure("hist_before", "Daily totals before imputation")
    lines += [
        f"- Days with recorded steps: {before.n_days:,}",
        f"- Mean of daily totals: {format_value(before.mean)}",
        f"- Median of daily totals: {format_value(before.median)}",
        "",
    ]

    lines += ["## Average daily activity pattern", ""]
    lines += figure("profile", "Mean steps per 5-minute interval")
    if peak is None:
        lines += ["- Interval with maximum average steps: undefined", ""]
    else:
        lines += [
            f"- Interval with maximum average steps: {peak.interval} "
            f"({peak.time_of_day}), {peak.mean_steps:.2f} steps",
            "",
        ]

    lines += ["## Imputing missing values", ""]
    lines += [f"- Missing observations: {n_missing:,} of {n_observations:,}", ""]
    lines += figure("hist_after", "Daily totals after imputation")
    lines += [
        f"- Days with steps after imputation: {after.n_days:,}",
        f"- Mean of daily totals: {format_value(after.mean)}",
        f"- Median of daily totals: {format_value(after.median)}",
        "",
        "| statistic | before | after | difference | % of before |",
        "|---|---|---|---|---|",
    ]
    for _, row in comparison.iterrows():
        lines.append(
            f"| {row['statistic']} | {format_value(row['before'])} | {format_value(row['after'])} "
            f"| {format_value(row['difference'])} | {format_value(row['pct_of_before'])} |"
        )
    lines.append("")

    lines += ["## Activity patterns on weekdays and weekends", ""]
    lines += figure("day_type", "Mean steps per interval by day type")
    lines += [
        f"- Weekday dates: {date_counts.get(WEEKDAY, 0):,}",
        f"- Weekend dates: {date_counts.get(WEEKEND, 0):,}",
        "",
    ]

    return "\n".join(lines)


def run_step6(cfg: Step6Config) -> Path:
    """
    Execute Step 6: Render charts and the Markdown report.

    This step:
    1. Loads the outputs of Steps 1-5
    2. Draws the daily total histograms, the interval profile,
       and the weekday/weekend comparison
    3. Writes report.md referencing the figures

    Args:
        cfg: Step6Config with input paths and output directory

    Returns:
        Path to report.md
    """
    print("\n" + "=" * 70)
    print("STEP 6: Charts and Report")
    print("=" * 70)

    ensure_dir(cfg.outdir)

    # Load inputs
    print("\nLoading inputs...")
    observations = load_observations(cfg.observations_csv)
    daily = load_daily_totals(cfg.daily_csv)
    profile = load_interval_table(cfg.profile_csv)
    daily_imputed = load_daily_totals(cfg.imputed_daily_csv)
    comparison = load_comparison(cfg.comparison_csv)
    day_types = load_interval_table(cfg.day_type_csv)

    before = summarize_daily_totals(daily)
    after = summarize_daily_totals(daily_imputed)
    peak = find_peak_interval(profile)
    date_counts = load_date_counts(cfg.date_counts_csv)

    # Figures
    print("\nGenerating figures...")
    figures = {
        "hist_before": save_histogram(
            daily["total_steps"].to_numpy(),
            bins=cfg.bins,
            xlabel="Total steps per day",
            out_path=cfg.outdir / "hist_daily_totals.png",
            title="Daily totals (missing values ignored)",
            line_specs=_summary_lines(before),
        ),
        "profile": save_interval_profile_plot(
            profile, cfg.outdir / "interval_profile.png", peak
        ),
        "hist_after": save_histogram(
            daily_imputed["total_steps"].to_numpy(),
            bins=cfg.bins,
            xlabel="Total steps per day",
            out_path=cfg.outdir / "hist_daily_totals_imputed.png",
            title="Daily totals (missing values imputed)",
            line_specs=_summary_lines(after),
        ),
        "day_type": save_day_type_plot(day_types, cfg.outdir / "day_type_profile.png"),
    }

    # Report
    print("\nWriting report...")
    text = render_report(
        n_observations=len(observations),
        n_missing=count_missing(observations),
        before=before,
        peak=peak,
        after=after,
        comparison=comparison,
        date_counts=date_counts,
        figures=figures,
    )
    report_path = cfg.outdir / "report.md"
    report_path.write_text(text, encoding="utf-8")
    print(f"  Saved: {report_path}")

    print("\n" + "=" * 70)
    print("STEP 6 COMPLETED")
    print("=" * 70)

    return report_path


def main():
    """
    Example usage of Step 6.

    This is a template for running Step 6. Modify the paths below to match
    your data location before running.
    """
    # =========================================================================
    # CONFIGURATION - Modify these paths for your environment
    # =========================================================================
    base = Path("output")
    config = Step6Config(
        observations_csv=base / "step1/observations.csv",
        daily_csv=base / "step2/daily_totals.csv",
        profile_csv=base / "step3/interval_profile.csv",
        imputed_daily_csv=base / "step4/daily_totals_imputed.csv",
        comparison_csv=base / "step4/step4_summary.csv",
        day_type_csv=base / "step5/day_type_profile.csv",
        date_counts_csv=base / "step5/step5_summary.csv",
        outdir=base / "report",
        bins=10
    )
    # =========================================================================

    report_path = run_step6(config)
    return report_path


if __name__ == "__main__":
    main()

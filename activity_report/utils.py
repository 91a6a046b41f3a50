"""
Utility functions shared across the activity monitoring pipeline.

This module contains helper functions for data loading, interval code
handling, and common operations used throughout the pipeline.
"""

from __future__ import annotations
from pathlib import Path
from typing import List, Optional
import pandas as pd
import numpy as np

from .config import REQUIRED_COLS, DATE_FORMAT, INTERVAL_MINUTES
from .errors import ParseError


def ensure_dir(path: Path) -> None:
    """
    Create directory if it doesn't exist.

    Args:
        path: Directory path to create
    """
    path.mkdir(parents=True, exist_ok=True)


def load_csv_safe(csv_path: Path, dtype: str = "str") -> pd.DataFrame:
    """
    Load CSV file with safe defaults.

    Args:
        csv_path: Path to CSV file
        dtype: Default dtype for columns (default: 'str')

    Returns:
        DataFrame with lowercased column names

    Raises:
        FileNotFoundError: If CSV file doesn't exist
    """
    if not csv_path.exists():
        raise FileNotFoundError(f"Input file not found: {csv_path}")

    df = pd.read_csv(csv_path, dtype=dtype, encoding="utf-8-sig")
    df.columns = df.columns.str.lower().str.strip().str.strip('"')

    return df


def validate_required_columns(df: pd.DataFrame, required_cols: List[str], file_name: str = "Input") -> None:
    """
    Validate that DataFrame contains all required columns.

    Args:
        df: DataFrame to validate
        required_cols: List of required column names
        file_name: Name of file for error message

    Raises:
        ParseError: If any required columns are missing
    """
    missing = set(required_cols) - set(df.columns)
    if missing:
        raise ParseError(f"{file_name} missing required columns: {sorted(missing)}")


def valid_interval_mask(interval: pd.Series) -> pd.Series:
    """
    Check interval codes against the 5-minute HHMM grid (0, 5, ..., 2355).

    Args:
        interval: Series of integer interval codes

    Returns:
        Boolean series, True where the code names a real 5-minute slot
    """
    hours = interval // 100
    minutes = interval % 100
    return (
        (interval >= 0)
        & (hours < 24)
        & (minutes < 60)
        & (minutes % INTERVAL_MINUTES == 0)
    )


def interval_to_time_str(interval: pd.Series) -> pd.Series:
    """
    Convert HHMM interval codes to "HH:MM" labels.

    Examples:
        0 -> "00:00"
        835 -> "08:35"
        2355 -> "23:55"
    """
    hours = (interval // 100).astype(int)
    minutes = (interval % 100).astype(int)
    return hours.map("{:02d}".format) + ":" + minutes.map("{:02d}".format)


def interval_to_minute_of_day(interval: pd.Series) -> pd.Series:
    """Convert HHMM interval codes to minutes since midnight (0-1435)."""
    return (interval // 100) * 60 + interval % 100


def mean_or_none(values: pd.Series) -> Optional[float]:
    """Mean of the non-missing values, or None when there are none."""
    values = values.dropna()
    if values.empty:
        return None
    return float(values.mean())


def median_or_none(values: pd.Series) -> Optional[float]:
    """Median of the non-missing values, or None when there are none."""
    values = values.dropna()
    if values.empty:
        return None
    return float(values.median())


def ratio_or_none(numerator: Optional[float], denominator: Optional[float]) -> Optional[float]:
    """numerator / denominator, or None when either side is undefined or the denominator is 0."""
    if numerator is None or denominator is None or denominator == 0:
        return None
    return numerator / denominator


def format_value(value: Optional[float], fmt: str = ",.2f") -> str:
    """Format a statistic for printing, rendering undefined values explicitly."""
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return "undefined"
    return format(value, fmt)


def load_observations(csv_path: Path, steps_dtype: str = "Int64") -> pd.DataFrame:
    """
    Load an observation table written by an earlier step.

    Restores column types lost in the CSV round trip:
        - steps: nullable numeric (steps_dtype)
        - date: datetime64
        - interval: int64

    Args:
        csv_path: Path to observations CSV (Step 1 or Step 4 output)
        steps_dtype: Nullable dtype for the steps column ("Int64" or "Float64")

    Returns:
        DataFrame with typed steps, date, interval (plus any extra columns)
    """
    df = load_csv_safe(csv_path, dtype="str")
    validate_required_columns(df, REQUIRED_COLS, str(csv_path))

    df["steps"] = pd.to_numeric(df["steps"]).astype(steps_dtype)
    df["date"] = pd.to_datetime(df["date"], format=DATE_FORMAT)
    df["interval"] = pd.to_numeric(df["interval"]).astype("int64")

    if "was_imputed" in df.columns:
        df["was_imputed"] = df["was_imputed"].str.lower().isin(["true", "1"])

    return df


def load_interval_table(csv_path: Path) -> pd.DataFrame:
    """
    Load a per-interval table (interval profile or day-type profile).

    Args:
        csv_path: Path to CSV with at least interval and mean_steps columns

    Returns:
        DataFrame with int64 interval and float mean_steps
    """
    df = load_csv_safe(csv_path, dtype="str")
    validate_required_columns(df, ["interval", "mean_steps"], str(csv_path))

    df["interval"] = pd.to_numeric(df["interval"]).astype("int64")
    df["mean_steps"] = pd.to_numeric(df["mean_steps"]).astype(float)
    if "n_present" in df.columns:
        df["n_present"] = pd.to_numeric(df["n_present"]).astype("int64")

    return df


def load_daily_totals(csv_path: Path) -> pd.DataFrame:
    """
    Load a daily totals table written by Step 2 or Step 4.

    Args:
        csv_path: Path to daily totals CSV

    Returns:
        DataFrame with datetime64 date and float total_steps
    """
    df = load_csv_safe(csv_path, dtype="str")
    validate_required_columns(df, ["date", "total_steps"], str(csv_path))

    df["date"] = pd.to_datetime(df["date"], format=DATE_FORMAT)
    df["total_steps"] = pd.to_numeric(df["total_steps"]).astype(float)

    return df


def save_dataframe(df: pd.DataFrame, output_path: Path) -> None:
    """
    Save DataFrame to CSV with UTF-8-sig encoding for Excel compatibility.

    Args:
        df: DataFrame to save
        output_path: Path to output CSV file
    """
    ensure_dir(output_path.parent)
    df.to_csv(output_path, index=False, encoding="utf-8-sig", date_format=DATE_FORMAT)
    print(f"  Saved: {output_path}")


def print_summary_stats(label: str, total: int, count: int) -> None:
    """
    Print summary statistics with percentage.

    Args:
        label: Label for the statistic
        total: Total count
        count: Specific count
    """
    pct = (count / total * 100) if total > 0 else 0
    print(f"  {label}: {count:,} / {total:,} ({pct:.2f}%)")

"""
Configuration classes and constants for the activity monitoring pipeline.

This module contains all configuration dataclasses and constants used across
the step-count report pipeline.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional


# ============================================================================
# Constants
# ============================================================================

# Source archive
DATA_URL = "https://d396qusza40orc.cloudfront.net/repdata%2Fdata%2Factivity.zip"
ARCHIVE_NAME = "activity.zip"
RECORD_FILE_NAME = "activity.csv"

# Column requirements
REQUIRED_COLS = ["steps", "date", "interval"]
DATE_FORMAT = "%Y-%m-%d"

# Time and day constants
INTERVAL_MINUTES = 5
INTERVALS_PER_DAY = 288  # 24 hours * 12 five-minute slots

# Day types
WEEKDAY = "weekday"
WEEKEND = "weekend"
WEEKEND_DAYS = (5, 6)  # pandas dayofweek: Saturday, Sunday

# Imputation
IMPUTATION_FALLBACK = "global_mean"  # alternative: "raise"


# ============================================================================
# Configuration Classes
# ============================================================================

@dataclass(frozen=True)
class Step1Config:
    """Configuration for Step 1: Load activity data."""

    source: str
    outdir: Path
    cache_dir: Optional[Path] = None
    force_download: bool = False


@dataclass(frozen=True)
class Step2Config:
    """Configuration for Step 2: Daily totals."""

    input_csv: Path
    outdir: Path


@dataclass(frozen=True)
class Step3Config:
    """Configuration for Step 3: Interval profile."""

    input_csv: Path
    outdir: Path


@dataclass(frozen=True)
class Step4Config:
    """Configuration for Step 4: Missing value imputation."""

    input_csv: Path
    profile_csv: Path
    daily_csv: Path
    outdir: Path
    fallback: Literal["global_mean", "raise"] = "global_mean"


@dataclass(frozen=True)
class Step5Config:
    """Configuration for Step 5: Weekday/weekend comparison."""

    input_csv: Path
    outdir: Path


@dataclass(frozen=True)
class Step6Config:
    """Configuration for Step 6: Charts and report."""

    observations_csv: Path
    daily_csv: Path
    profile_csv: Path
    imputed_daily_csv: Path
    comparison_csv: Path
    day_type_csv: Path
    date_counts_csv: Path
    outdir: Path
    bins: int = 10


@dataclass(frozen=True)
class PipelineConfig:
    """Configuration for the complete pipeline."""

    # Input data source (URL or local .zip/.csv path)
    source: str = DATA_URL

    # Output directory
    output_base_dir: Path = Path("output")

    # Download cache (defaults to <output_base_dir>/data)
    cache_dir: Optional[Path] = None
    force_download: bool = False

    # Pipeline parameters
    imputation_fallback: Literal["global_mean", "raise"] = IMPUTATION_FALLBACK
    histogram_bins: int = 10

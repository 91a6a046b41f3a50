"""
Personal Activity Monitoring Report

A step-by-step pipeline producing a descriptive statistics report over
step counts recorded in 5-minute intervals.

Modules:
    - config: Configuration classes and constants
    - errors: Error kinds raised by the pipeline
    - utils: Shared utility functions
    - step1_load_data: Fetch and parse the activity data
    - step2_daily_totals: Daily totals and their mean/median
    - step3_interval_profile: Mean steps per 5-minute interval and peak interval
    - step4_impute_missing: Fill missing values with interval means
    - step5_weekday_weekend: Weekday vs weekend activity patterns
    - step6_report: Charts and Markdown report
    - run_pipeline: Run all steps in order
"""

__version__ = "1.0.0"
__author__ = "Activity Report Team"

from .config import (
    Step1Config,
    Step2Config,
    Step3Config,
    Step4Config,
    Step5Config,
    Step6Config,
    PipelineConfig
)

from .errors import (
    SourceUnavailable,
    ParseError,
    ImputationError,
    ImputationWarning
)

from .step1_load_data import run_step1, load_activity
from .step2_daily_totals import run_step2, DailySummary
from .step3_interval_profile import run_step3, PeakInterval
from .step4_impute_missing import run_step4
from .step5_weekday_weekend import run_step5
from .step6_report import run_step6
from .run_pipeline import run_pipeline


__all__ = [
    # Config classes
    "Step1Config",
    "Step2Config",
    "Step3Config",
    "Step4Config",
    "Step5Config",
    "Step6Config",
    "PipelineConfig",
    # Errors
    "SourceUnavailable",
    "ParseError",
    "ImputationError",
    "ImputationWarning",
    # Results
    "DailySummary",
    "PeakInterval",
    # Step functions
    "load_activity",
    "run_step1",
    "run_step2",
    "run_step3",
    "run_step4",
    "run_step5",
    "run_step6",
    "run_pipeline",

]

"""
Run the complete activity monitoring pipeline.

Each step reads the previous step's CSV outputs from
<output_base_dir>/stepN and writes its own outputs next to them.
The charts and report.md are written to <output_base_dir>/report.
"""

from __future__ import annotations
import argparse
from pathlib import Path
from typing import Optional, Sequence

from .config import (
    DATA_URL,
    IMPUTATION_FALLBACK,
    PipelineConfig,
    Step1Config,
    Step2Config,
    Step3Config,
    Step4Config,
    Step5Config,
    Step6Config,
)
from .step1_load_data import run_step1
from .step2_daily_totals import run_step2
from .step3_interval_profile import run_step3
from .step4_impute_missing import run_step4
from .step5_weekday_weekend import run_step5
from .step6_report import run_step6


def run_pipeline(cfg: PipelineConfig) -> Path:
    """
    Run Steps 1-6 in order.

    Args:
        cfg: PipelineConfig with source, output directory, and parameters

    Returns:
        Path to the generated report.md
    """
    base = cfg.output_base_dir
    cache_dir = cfg.cache_dir if cfg.cache_dir is not None else base / "data"

    step1_dir = base / "step1"
    step2_dir = base / "step2"
    step3_dir = base / "step3"
    step4_dir = base / "step4"
    step5_dir = base / "step5"

    run_step1(Step1Config(
        source=cfg.source,
        outdir=step1_dir,
        cache_dir=cache_dir,
        force_download=cfg.force_download
    ))

    run_step2(Step2Config(
        input_csv=step1_dir / "observations.csv",
        outdir=step2_dir
    ))

    run_step3(Step3Config(
        input_csv=step1_dir / "observations.csv",
        outdir=step3_dir
    ))

    run_step4(Step4Config(
        input_csv=step1_dir / "observations.csv",
        profile_csv=step3_dir / "interval_profile.csv",
        daily_csv=step2_dir / "daily_totals.csv",
        outdir=step4_dir,
        fallback=cfg.imputation_fallback
    ))

    run_step5(Step5Config(
        input_csv=step4_dir / "observations_imputed.csv",
        outdir=step5_dir
    ))

    report_path = run_step6(Step6Config(
        observations_csv=step1_dir / "observations.csv",
        daily_csv=step2_dir / "daily_totals.csv",
        profile_csv=step3_dir / "interval_profile.csv",
        imputed_daily_csv=step4_dir / "daily_totals_imputed.csv",
        comparison_csv=step4_dir / "step4_summary.csv",
        day_type_csv=step5_dir / "day_type_profile.csv",
        date_counts_csv=step5_dir / "step5_summary.csv",
        outdir=base / "report",
        bins=cfg.histogram_bins
    ))

    print(f"\nReport: {report_path}")
    return report_path


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the activity-report command."""
    parser = argparse.ArgumentParser(
        description="Descriptive statistics report over 5-minute step count data",
        add_help=True
    )
    parser.add_argument("--source", "-s", default=DATA_URL,
                        help="URL or local path of activity.zip / activity.csv. Default: course data URL")
    parser.add_argument("--outdir", "-o", default="output",
                        help="Folder for step outputs and the report. Default: output/")
    parser.add_argument("--cache-dir", default=None,
                        help="Folder for the downloaded archive. Default: <outdir>/data")
    parser.add_argument("--force-download", action="store_true",
                        help="Download the archive again even if a cached copy exists")
    parser.add_argument("--fallback", choices=["global_mean", "raise"], default=IMPUTATION_FALLBACK,
                        help="What to do with intervals that have no recorded steps on any date")
    parser.add_argument("--bins", type=int, default=10,
                        help="Number of histogram bins for daily totals")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Command-line entry point.

    Args:
        argv: Arguments to parse (default: sys.argv[1:])

    Returns:
        Process exit code (0 on success)
    """
    args = build_parser().parse_args(argv)

    config = PipelineConfig(
        source=args.source,
        output_base_dir=Path(args.outdir),
        cache_dir=Path(args.cache_dir) if args.cache_dir else None,
        force_download=args.force_download,
        imputation_fallback=args.fallback,
        histogram_bins=args.bins,
    )

    run_pipeline(config)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""
Step 1: Load Activity Data

This module fetches the source archive and parses its single record file
into a typed observation table.

An observation is one 5-minute interval of one calendar day:
    - steps: step count, or missing (NA) when the device recorded nothing
    - date: calendar date (YYYY-MM-DD)
    - interval: time-of-day code HHMM (0, 5, ..., 55, 100, ..., 2355)
"""

from __future__ import annotations
from pathlib import Path
from typing import Optional, Tuple
import shutil
import urllib.error
import urllib.parse
import urllib.request
import zipfile
import pandas as pd

from .config import (
    Step1Config,
    REQUIRED_COLS,
    DATA_URL,
    DATE_FORMAT,
    INTERVALS_PER_DAY,
)
from .errors import SourceUnavailable, ParseError
from .utils import (
    ensure_dir,
    load_csv_safe,
    validate_required_columns,
    valid_interval_mask,
    save_dataframe,
    print_summary_stats
)


URL_SCHEMES = ("http", "https", "ftp", "file")


def is_url(source: str) -> bool:
    """Return True if source looks like a URL rather than a local path."""
    return urllib.parse.urlparse(str(source)).scheme in URL_SCHEMES


def fetch_archive(source: str, cache_dir: Optional[Path] = None, force_download: bool = False) -> Path:
    """
    Resolve the source to a local file, downloading it if needed.

    URLs are downloaded into cache_dir once and reused on later runs
    unless force_download is set. Local paths are returned as-is.

    Args:
        source: URL or local path of the archive (.zip) or record file (.csv)
        cache_dir: Directory for downloaded archives (default: ./data)
        force_download: Download again even if a cached copy exists

    Returns:
        Path to the local archive or record file

    Raises:
        SourceUnavailable: If the download fails or the local file doesn't exist
    """
    if not is_url(source):
        path = Path(source)
        if not path.is_file():
            raise SourceUnavailable(f"Source file not found: {path}")
        return path

    cache_dir = Path(cache_dir) if cache_dir is not None else Path("data")
    name = Path(urllib.parse.unquote(urllib.parse.urlparse(source).path)).name or "archive.zip"
    target = cache_dir / name

    if target.exists() and not force_download:
        print(f"  Using cached archive: {target}")
        return target

    print(f"  Downloading {source}...")
    partial = target.with_name(target.name + ".part")
    try:
        ensure_dir(cache_dir)
        with urllib.request.urlopen(source) as f_src, open(partial, "wb") as f_dst:
            shutil.copyfileobj(f_src, f_dst)
        partial.replace(target)
    except (urllib.error.URLError, OSError, ValueError) as e:
        partial.unlink(missing_ok=True)
        raise SourceUnavailable(f"Could not fetch {source}: {e}") from e

    return target


def _read_zip_member(archive_path: Path) -> pd.DataFrame:
    """Read the single CSV member of a zip archive as strings."""
    try:
        with zipfile.ZipFile(archive_path) as zf:
            members = [
                name for name in zf.namelist()
                if name.lower().endswith(".csv") and not name.startswith("__MACOSX/")
            ]
            if len(members) != 1:
                raise ParseError(
                    f"{archive_path} must contain exactly one .csv record file, found {len(members)}"
                )
            with zf.open(members[0]) as fh:
                df = pd.read_csv(fh, dtype="str", encoding="utf-8-sig")
    except zipfile.BadZipFile as e:
        raise ParseError(f"{archive_path} is not a valid zip archive: {e}") from e

    df.columns = df.columns.str.lower().str.strip().str.strip('"')
    return df


def read_record_file(archive_path: Path) -> pd.DataFrame:
    """
    Read the raw record file from a zip archive or a bare CSV.

    Args:
        archive_path: Path to activity.zip (one CSV member) or activity.csv

    Returns:
        DataFrame of raw string columns (missing markers as NaN)

    Raises:
        ParseError: If the archive is corrupt, holds zero or several CSV files,
                    or the file is not parseable as CSV
    """
    suffix = archive_path.suffix.lower()

    try:
        if suffix == ".zip" or zipfile.is_zipfile(archive_path):
            return _read_zip_member(archive_path)
        if suffix == ".csv":
            return load_csv_safe(archive_path, dtype="str")
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise ParseError(f"Could not parse record file in {archive_path}: {e}") from e

    raise ParseError(f"Unsupported source format: {archive_path} (expected .zip or .csv)")


def _first_bad_row(mask: pd.Series) -> int:
    """1-based data row number of the first True entry."""
    return int(mask.to_numpy().nonzero()[0][0]) + 1


def parse_observations(raw: pd.DataFrame, file_name: str = "Record file") -> pd.DataFrame:
    """
    Convert raw record strings into typed observations.

    File order is preserved. Missing step values stay missing (<NA>);
    they are never replaced by zero.

    Args:
        raw: DataFrame of string columns steps, date, interval
        file_name: Name used in error messages

    Returns:
        DataFrame with columns steps (Int64), date (datetime64), interval (int64)

    Raises:
        ParseError: If columns are missing or unexpected, or any field fails validation
    """
    validate_required_columns(raw, REQUIRED_COLS, file_name)
    unexpected = set(raw.columns) - set(REQUIRED_COLS)
    if unexpected:
        raise ParseError(f"{file_name} has unexpected columns: {sorted(unexpected)} (expected {REQUIRED_COLS})")

    # Steps: integer >= 0 or missing marker
    steps_str = raw["steps"].str.strip()
    steps = pd.to_numeric(steps_str, errors="coerce")
    bad_steps = (steps_str.notna() & steps.isna()) | (steps < 0) | (steps.notna() & (steps % 1 != 0))
    if bad_steps.any():
        raise ParseError(
            f"{file_name}: {int(bad_steps.sum()):,} rows with invalid steps "
            f"(first at data row {_first_bad_row(bad_steps)})"
        )

    # Date: YYYY-MM-DD
    date = pd.to_datetime(raw["date"].str.strip(), format=DATE_FORMAT, errors="coerce")
    bad_date = date.isna()
    if bad_date.any():
        raise ParseError(
            f"{file_name}: {int(bad_date.sum()):,} rows with invalid date "
            f"(first at data row {_first_bad_row(bad_date)})"
        )

    # Interval: HHMM code on the 5-minute grid
    interval = pd.to_numeric(raw["interval"].str.strip(), errors="coerce")
    bad_interval = interval.isna() | (interval % 1 != 0)
    bad_interval |= ~valid_interval_mask(interval.fillna(-1))
    if bad_interval.any():
        raise ParseError(
            f"{file_name}: {int(bad_interval.sum()):,} rows with invalid interval code "
            f"(first at data row {_first_bad_row(bad_interval)})"
        )

    return pd.DataFrame({
        "steps": steps.astype("Int64"),
        "date": date,
        "interval": interval.astype("int64"),
    }).reset_index(drop=True)


def count_missing(df: pd.DataFrame) -> int:
    """Number of observations with a missing steps value."""
    return int(df["steps"].isna().sum())


def summarize_observations(df: pd.DataFrame) -> pd.DataFrame:
    """
    Summarize row counts, date coverage, and missingness.

    Args:
        df: Typed observation table

    Returns:
        One-row DataFrame with n_rows, n_dates, n_missing, missing_rate,
        n_all_missing_dates, n_complete_dates, n_duplicate_keys,
        first_date, last_date
    """
    n_rows = len(df)
    n_missing = count_missing(df)

    per_date = df.groupby("date").agg(
        n_rows=("interval", "size"),
        n_intervals=("interval", "nunique"),
        n_present=("steps", "count"),
    )
    n_all_missing = int((per_date["n_present"] == 0).sum())
    n_complete = int(((per_date["n_rows"] == INTERVALS_PER_DAY)
                      & (per_date["n_intervals"] == INTERVALS_PER_DAY)).sum())
    n_duplicate_keys = int(df.duplicated(subset=["date", "interval"]).sum())

    return pd.DataFrame([{
        "n_rows": n_rows,
        "n_dates": len(per_date),
        "n_missing": n_missing,
        "missing_rate": n_missing / n_rows if n_rows > 0 else 0,
        "n_all_missing_dates": n_all_missing,
        "n_complete_dates": n_complete,
        "n_duplicate_keys": n_duplicate_keys,
        "first_date": df["date"].min() if n_rows > 0 else pd.NaT,
        "last_date": df["date"].max() if n_rows > 0 else pd.NaT,
    }])


def load_activity(source: str, cache_dir: Optional[Path] = None, force_download: bool = False) -> pd.DataFrame:
    """
    Fetch and parse the activity data in one call.

    Args:
        source: URL or local path of activity.zip / activity.csv
        cache_dir: Directory for downloaded archives
        force_download: Download again even if a cached copy exists

    Returns:
        Typed observation table
    """
    archive_path = fetch_archive(source, cache_dir, force_download)
    raw = read_record_file(archive_path)
    return parse_observations(raw, str(archive_path))


def run_step1(cfg: Step1Config) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Execute Step 1: Load activity data.

    This step:
    1. Fetches the source archive (or reuses the cached copy)
    2. Reads its single CSV record file
    3. Validates and types the steps, date, and interval fields
    4. Counts missing observations and incomplete days

    Args:
        cfg: Step1Config with source, output directory, and cache settings

    Returns:
        Tuple of (observations, summary)
            - observations: Typed observation table in file order
            - summary: Row, date, and missingness counts
    """
    print("\n" + "=" * 70)
    print("STEP 1: Load Activity Data")
    print("=" * 70)

    ensure_dir(cfg.outdir)

    # Fetch source
    print(f"\nResolving source: {cfg.source}")
    archive_path = fetch_archive(cfg.source, cfg.cache_dir, cfg.force_download)

    # Parse record file
    print(f"\nParsing record file: {archive_path}")
    raw = read_record_file(archive_path)
    print(f"  Total rows: {len(raw):,}")

    observations = parse_observations(raw, str(archive_path))

    # Summarize
    print("\nSummarizing observations...")
    summary = summarize_observations(observations)
    s = summary.iloc[0]

    print("\n" + "-" * 70)
    print("Summary Statistics:")
    print("-" * 70)
    print(f"  Observations: {int(s['n_rows']):,}")
    print(f"  Dates: {int(s['n_dates']):,}")
    print_summary_stats("Missing observations", int(s["n_rows"]), int(s["n_missing"]))
    print(f"  Dates with no recorded steps: {int(s['n_all_missing_dates']):,}")
    print(f"  Dates with a complete {INTERVALS_PER_DAY}-interval grid: {int(s['n_complete_dates']):,}")
    if s["n_duplicate_keys"] > 0:
        print(f"  [warn] duplicate (date, interval) rows: {int(s['n_duplicate_keys']):,}")

    # Save outputs
    print("\nSaving outputs...")
    save_dataframe(observations, cfg.outdir / "observations.csv")
    save_dataframe(summary, cfg.outdir / "step1_summary.csv")

    print("\n" + "=" * 70)
    print("STEP 1 COMPLETED")
    print("=" * 70)

    return observations, summary


def main():
    """
    Example usage of Step 1.

    This is a template for running Step 1. Modify the paths below to match
    your data location before running.
    """
    # =========================================================================
    # CONFIGURATION - Modify these paths for your environment
    # =========================================================================
    source = DATA_URL                 # URL or local path to activity.zip / activity.csv
    outdir = Path("output/step1")     # Output directory
    cache_dir = Path("data")          # Where the downloaded archive is kept
    force_download = False            # Re-download even if cached
    # =========================================================================

    config = Step1Config(
        source=source,
        outdir=outdir,
        cache_dir=cache_dir,
        force_download=force_download
    )

    observations, summary = run_step1(config)
    return observations, summary


if __name__ == "__main__":
    main()

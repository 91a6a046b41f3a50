"""Shared pytest fixtures: synthetic 5-minute step count data."""

import zipfile
from pathlib import Path

import numpy as np
import pandas as pd
import pytest


INTERVALS = [h * 100 + m for h in range(24) for m in range(0, 60, 5)]


def _build_observations(days):
    """
    days: {"YYYY-MM-DD": values}
        values is a list of 288 step counts (None = missing) in interval order,
        or a dict {interval: steps} for a partial day.
    """
    frames = []
    for date, values in days.items():
        if isinstance(values, dict):
            codes, steps = list(values.keys()), list(values.values())
        else:
            codes, steps = INTERVALS, list(values)
        frames.append(pd.DataFrame({
            "steps": pd.array(steps, dtype="Int64"),
            "date": pd.Timestamp(date),
            "interval": np.array(codes, dtype="int64"),
        }))
    return pd.concat(frames, ignore_index=True)


def _record_text(df):
    """Render observations the way activity.csv stores them."""
    lines = ['"steps","date","interval"']
    for steps, date, interval in zip(df["steps"], df["date"], df["interval"]):
        value = "NA" if pd.isna(steps) else str(int(steps))
        lines.append(f'{value},"{date:%Y-%m-%d}",{int(interval)}')
    return "\n".join(lines) + "\n"


@pytest.fixture
def intervals():
    return list(INTERVALS)


@pytest.fixture
def make_observations():
    return _build_observations


@pytest.fixture
def three_day_observations():
    """
    A (2012-10-01): complete, 9985 steps at 00:00 and 15 at 12:00, total 10000
    B (2012-10-02): every observation missing
    C (2012-10-03): 5000 steps at 00:00, 12:00 missing, total 5000
    """
    day_a = [0] * 288
    day_a[INTERVALS.index(0)] = 9985
    day_a[INTERVALS.index(1200)] = 15

    day_b = [None] * 288

    day_c = [0] * 288
    day_c[INTERVALS.index(0)] = 5000
    day_c[INTERVALS.index(1200)] = None

    return _build_observations({
        "2012-10-01": day_a,
        "2012-10-02": day_b,
        "2012-10-03": day_c,
    })


@pytest.fixture
def record_text():
    return _record_text


@pytest.fixture
def write_archive(tmp_path):
    """Write observations into a zip archive holding activity.csv."""
    def _write(df, name="activity.zip", member="activity.csv"):
        path = Path(tmp_path) / name
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.writestr(member, _record_text(df))
        return path
    return _write

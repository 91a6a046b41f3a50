import zipfile

import pandas as pd
import pytest

from activity_report.errors import ParseError, SourceUnavailable
from activity_report.step1_load_data import (
    count_missing,
    fetch_archive,
    load_activity,
    parse_observations,
    read_record_file,
    summarize_observations,
)


def raw_frame(rows):
    return pd.DataFrame(rows, columns=["steps", "date", "interval"], dtype=object)


def test_parse_observations_keeps_missing_and_order():
    raw = raw_frame([
        [None, "2012-10-01", "0"],
        ["0", "2012-10-01", "5"],
        ["12", "2012-10-01", "2355"],
        [None, "2012-10-02", "1200"],
    ])

    df = parse_observations(raw)

    assert list(df.columns) == ["steps", "date", "interval"]
    assert str(df["steps"].dtype) == "Int64"
    assert df["steps"].isna().tolist() == [True, False, False, True]
    assert df["steps"].iloc[1] == 0
    assert df["interval"].tolist() == [0, 5, 2355, 1200]
    assert df["date"].iloc[3] == pd.Timestamp("2012-10-02")
    assert count_missing(df) == 2


@pytest.mark.parametrize("steps", ["abc", "-1", "1.5"])
def test_parse_observations_rejects_bad_steps(steps):
    raw = raw_frame([["1", "2012-10-01", "0"], [steps, "2012-10-01", "5"]])
    with pytest.raises(ParseError, match="invalid steps"):
        parse_observations(raw)


@pytest.mark.parametrize("interval", ["3", "1260", "2400", "-5", "x"])
def test_parse_observations_rejects_bad_interval(interval):
    raw = raw_frame([["1", "2012-10-01", interval]])
    with pytest.raises(ParseError, match="invalid interval"):
        parse_observations(raw)


@pytest.mark.parametrize("date", ["2012-13-01", "01/10/2012", "yesterday"])
def test_parse_observations_rejects_bad_date(date):
    raw = raw_frame([["1", date, "0"]])
    with pytest.raises(ParseError, match="invalid date"):
        parse_observations(raw)


def test_parse_observations_requires_schema():
    raw = pd.DataFrame({"steps": ["1"], "day": ["2012-10-01"], "interval": ["0"]})
    with pytest.raises(ParseError, match="missing required columns"):
        parse_observations(raw)

    raw = pd.DataFrame({"steps": ["1"], "date": ["2012-10-01"], "interval": ["0"], "extra": ["x"]})
    with pytest.raises(ParseError, match=r"unexpected columns: \['extra'\]"):
        parse_observations(raw)


def test_read_record_file_from_zip(make_observations, write_archive):
    df = make_observations({"2012-10-01": {0: 3, 5: None, 10: 7}})
    archive = write_archive(df)

    raw = read_record_file(archive)

    assert list(raw.columns) == ["steps", "date", "interval"]
    assert len(raw) == 3
    assert raw["steps"].isna().tolist() == [False, True, False]


def test_read_record_file_from_csv(tmp_path, make_observations, record_text):
    df = make_observations({"2012-10-01": {0: 3, 5: None}})
    path = tmp_path / "activity.csv"
    path.write_text(record_text(df))

    parsed = parse_observations(read_record_file(path))

    assert parsed["steps"].isna().tolist() == [False, True]
    assert parsed["interval"].tolist() == [0, 5]


def test_read_record_file_rejects_archive_without_csv(tmp_path):
    path = tmp_path / "activity.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("README.txt", "nothing here")

    with pytest.raises(ParseError, match="exactly one"):
        read_record_file(path)


def test_read_record_file_rejects_archive_with_two_csv(tmp_path):
    path = tmp_path / "activity.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("a.csv", "steps,date,interval\n1,2012-10-01,0\n")
        zf.writestr("b.csv", "steps,date,interval\n1,2012-10-01,0\n")

    with pytest.raises(ParseError, match="exactly one"):
        read_record_file(path)


def test_read_record_file_rejects_corrupt_zip(tmp_path):
    path = tmp_path / "activity.zip"
    path.write_bytes(b"this is not a zip archive")

    with pytest.raises(ParseError, match="not a valid zip"):
        read_record_file(path)


def test_read_record_file_rejects_unknown_format(tmp_path):
    path = tmp_path / "activity.txt"
    path.write_text("steps,date,interval\n")

    with pytest.raises(ParseError, match="Unsupported source format"):
        read_record_file(path)


def test_fetch_archive_missing_local_file(tmp_path):
    with pytest.raises(SourceUnavailable):
        fetch_archive(str(tmp_path / "missing.zip"))


def test_fetch_archive_returns_local_path(tmp_path):
    path = tmp_path / "activity.zip"
    path.write_bytes(b"x")

    assert fetch_archive(str(path)) == path


def test_fetch_archive_unreachable_url(tmp_path):
    url = (tmp_path / "nowhere" / "activity.zip").as_uri()

    with pytest.raises(SourceUnavailable):
        fetch_archive(url, cache_dir=tmp_path / "cache")

    assert not (tmp_path / "cache" / "activity.zip").exists()


def test_fetch_archive_downloads_once(tmp_path, make_observations, write_archive):
    archive = write_archive(make_observations({"2012-10-01": {0: 1}}))
    cache_dir = tmp_path / "cache"

    first = fetch_archive(archive.as_uri(), cache_dir=cache_dir)
    assert first == cache_dir / "activity.zip"
    assert first.read_bytes() == archive.read_bytes()

    # Cached copy is reused even when the source has gone away
    archive.unlink()
    second = fetch_archive(archive.as_uri(), cache_dir=cache_dir)
    assert second == first

    with pytest.raises(SourceUnavailable):
        fetch_archive(archive.as_uri(), cache_dir=cache_dir, force_download=True)


def test_load_activity_from_archive(make_observations, write_archive):
    original = make_observations({
        "2012-10-01": {0: 3, 5: None},
        "2012-10-02": {0: None, 5: 4},
    })

    df = load_activity(str(write_archive(original)))

    assert df["steps"].isna().tolist() == original["steps"].isna().tolist()
    assert df["steps"].dropna().tolist() == [3, 4]
    assert df["date"].tolist() == original["date"].tolist()
    assert df["interval"].tolist() == original["interval"].tolist()


def test_summarize_observations(make_observations, intervals):
    df = make_observations({
        "2012-10-01": [1] * 288,
        "2012-10-02": [None] * 288,
        "2012-10-03": {0: 1, 5: None},
    })

    s = summarize_observations(df).iloc[0]

    assert s["n_rows"] == 578
    assert s["n_dates"] == 3
    assert s["n_missing"] == 289
    assert s["n_all_missing_dates"] == 1
    assert s["n_complete_dates"] == 2
    assert s["n_duplicate_keys"] == 0
    assert s["first_date"] == pd.Timestamp("2012-10-01")
    assert s["last_date"] == pd.Timestamp("2012-10-03")

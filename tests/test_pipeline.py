import pandas as pd
import pytest

from activity_report.config import PipelineConfig
from activity_report.errors import ImputationError, ParseError
from activity_report.run_pipeline import main, run_pipeline
from activity_report.step2_daily_totals import DailySummary
from activity_report.step6_report import render_report
from activity_report.utils import load_observations


@pytest.fixture
def week_archive(make_observations, write_archive, intervals):
    """Oct 1-7 2012: Wednesday has no data, Friday misses the morning."""
    days = {}
    for day in range(1, 8):
        date = f"2012-10-{day:02d}"
        steps = [(code // 100) * day for code in intervals]
        if day == 3:
            steps = [None] * 288
        if day == 5:
            steps = [None if code < 1200 else s for code, s in zip(intervals, steps)]
        days[date] = steps
    return write_archive(make_observations(days))


def test_pipeline_end_to_end(tmp_path, week_archive):
    outdir = tmp_path / "output"

    report_path = run_pipeline(PipelineConfig(source=str(week_archive), output_base_dir=outdir))

    assert report_path == outdir / "report" / "report.md"
    for name in ("hist_daily_totals.png", "interval_profile.png",
                 "hist_daily_totals_imputed.png", "day_type_profile.png"):
        assert (outdir / "report" / name).exists()

    imputed = load_observations(outdir / "step4" / "observations_imputed.csv", steps_dtype="Float64")
    assert len(imputed) == 7 * 288
    assert imputed["steps"].notna().all()
    assert int(imputed["was_imputed"].sum()) == 288 + 144

    daily = pd.read_csv(outdir / "step2" / "daily_totals.csv", encoding="utf-8-sig")
    assert len(daily) == 6
    daily_imputed = pd.read_csv(outdir / "step4" / "daily_totals_imputed.csv", encoding="utf-8-sig")
    assert len(daily_imputed) == 7

    day_types = pd.read_csv(outdir / "step5" / "step5_summary.csv", encoding="utf-8-sig")
    assert day_types.set_index("day_type")["n_dates"].to_dict() == {"weekday": 5, "weekend": 2}

    text = report_path.read_text(encoding="utf-8")
    assert "Missing observations: 432 of 2,016" in text
    assert "Interval with maximum average steps: 2300 (23:00)" in text
    assert "Weekday dates: 5" in text
    assert "Weekend dates: 2" in text
    assert "![Daily totals before imputation](hist_daily_totals.png)" in text


def test_pipeline_rerun_gives_same_report(tmp_path, week_archive):
    outdir = tmp_path / "output"
    config = PipelineConfig(source=str(week_archive), output_base_dir=outdir)

    first = run_pipeline(config).read_text(encoding="utf-8")
    second = run_pipeline(config).read_text(encoding="utf-8")

    assert first == second


def test_pipeline_raise_policy(tmp_path, make_observations, write_archive):
    archive = write_archive(make_observations({
        "2012-10-01": {0: 5, 5: None},
        "2012-10-02": {0: 7, 5: None},
    }))

    config = PipelineConfig(
        source=str(archive),
        output_base_dir=tmp_path / "output",
        imputation_fallback="raise",
    )
    with pytest.raises(ImputationError):
        run_pipeline(config)


def test_pipeline_stops_on_parse_error(tmp_path):
    path = tmp_path / "activity.csv"
    path.write_text('"steps","date","interval"\n1,"2012-10-01",7\n')

    with pytest.raises(ParseError):
        run_pipeline(PipelineConfig(source=str(path), output_base_dir=tmp_path / "output"))


def test_cli_main(tmp_path, week_archive, capsys):
    outdir = tmp_path / "cli"

    assert main(["--source", str(week_archive), "--outdir", str(outdir), "--bins", "5"]) == 0

    assert (outdir / "report" / "report.md").exists()
    assert "STEP 6 COMPLETED" in capsys.readouterr().out


def test_render_report_with_undefined_statistics():
    undefined = DailySummary(n_days=0, mean=None, median=None)
    comparison = pd.DataFrame([
        {"statistic": "mean", "before": None, "after": None, "difference": None, "pct_of_before": None},
    ])

    text = render_report(
        n_observations=288,
        n_missing=288,
        before=undefined,
        peak=None,
        after=undefined,
        comparison=comparison,
        date_counts={"weekday": 1, "weekend": 0},
        figures={},
    )

    assert "Mean of daily totals: undefined" in text
    assert "Interval with maximum average steps: undefined" in text
    assert "| mean | undefined | undefined | undefined | undefined |" in text
    assert "no data to plot" in text


def test_report_date_counts_with_partial_days(tmp_path, make_observations, write_archive):
    # Friday has two intervals, Saturday and Sunday one each
    archive = write_archive(make_observations({
        "2012-10-05": {0: 3, 5: 4},
        "2012-10-06": {0: 10},
        "2012-10-07": {5: 20},
    }))
    outdir = tmp_path / "output"

    report_path = run_pipeline(PipelineConfig(source=str(archive), output_base_dir=outdir))

    day_types = pd.read_csv(outdir / "step5" / "step5_summary.csv", encoding="utf-8-sig")
    assert day_types.set_index("day_type")["n_dates"].to_dict() == {"weekday": 1, "weekend": 2}

    text = report_path.read_text(encoding="utf-8")
    assert "Weekday dates: 1" in text
    assert "Weekend dates: 2" in text

from __future__ import annotations

from pathlib import Path

import pytest

from fpat import DetectorConfig, DiffThresholdDetector, Sample, read_records, records_to_dataframe, write_records
from fpat.reporting import plot_run, render_markdown_report, summarize_frame, summarize_run


def _records():
    config = DetectorConfig(
        decimation=1,
        initial_baseline=10,
        points_to_alarm=1,
        wait_usec=300,
        threshold_multiplier=2,
        smoothing_length=100,
        pattern_usec=200,
    )
    detector = DiffThresholdDetector(config)
    values = [0, 500, 500, 500, 500, 0, 0, 0]
    return [
        detector.process(Sample(instant=idx * 100, value=float(v), timestamp=f"10-03-2016 15:19:20.{idx * 100:06d}"))
        for idx, v in enumerate(values)
    ]


def test_summarize_frame_collects_patterns() -> None:
    summary = summarize_frame(records_to_dataframe(_records()), source="memory")

    assert summary["records"] == 8
    assert summary["alarms"] == 2
    assert [p["pattern_id"] for p in summary["patterns"]] == [1, 2]
    first = summary["patterns"][0]
    assert (first["first_line"], first["last_line"], first["records"]) == (2, 3, 2)
    assert first["max_abs_diff"] == pytest.approx(500.0)
    assert summary["wait_records"] == 6


def test_written_records_load_back(tmp_path: Path) -> None:
    path = write_records(_records(), tmp_path / "datalog.csv")
    df = read_records(path)
    assert list(df["lineid"]) == list(range(1, 9))
    assert df["timestamp"].iloc[0] == "10-03-2016 15:19:20.000000"
    assert summarize_run(path)["alarms"] == 2


def test_read_records_rejects_foreign_files(tmp_path: Path) -> None:
    path = tmp_path / "other.csv"
    path.write_text("a;b\n1;2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        read_records(path)


def test_markdown_and_plot_reports(tmp_path: Path) -> None:
    df = records_to_dataframe(_records())
    summary = summarize_frame(df)
    markdown = render_markdown_report(summary, tmp_path / "report.md").read_text(encoding="utf-8")
    assert "| 1 | 2 | 3 |" in markdown
    assert "Alarms: 2" in markdown

    png = plot_run(df, tmp_path / "plot.png")
    assert png.exists() and png.stat().st_size > 0


def test_markdown_report_without_alarms(tmp_path: Path) -> None:
    records = _records()[:1]
    summary = summarize_frame(records_to_dataframe(records))
    text = render_markdown_report(summary, tmp_path / "quiet.md").read_text(encoding="utf-8")
    assert "No alarms were raised" in text

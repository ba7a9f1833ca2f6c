from __future__ import annotations

import os
import time
from datetime import datetime, timezone
from pathlib import Path

import pytest

from fpat import MalformedSampleError, parse_line, parse_timestamp
from fpat.streaming import Decimator, LineSource, build_source, decimate, format_line


def test_parse_timestamp_is_utc_epoch_microseconds() -> None:
    instant = parse_timestamp("10-03-2016 15:19:20.729915")
    expected = datetime(2016, 3, 10, 15, 19, 20, 729915, tzinfo=timezone.utc)
    assert instant == int(expected.timestamp()) * 1_000_000 + 729915


def test_parse_timestamp_ignores_local_timezone(monkeypatch: pytest.MonkeyPatch) -> None:
    if not hasattr(time, "tzset"):
        pytest.skip("tzset not available")
    before = parse_timestamp("01-07-2020 12:00:00.000001")
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    try:
        assert parse_timestamp("01-07-2020 12:00:00.000001") == before
    finally:
        monkeypatch.delenv("TZ", raising=False)
        time.tzset()


def test_parse_timestamp_differences_are_microseconds() -> None:
    first = parse_timestamp("10-03-2016 15:19:20.729979")
    second = parse_timestamp("10-03-2016 15:19:21.000043")
    assert second - first == 270064


@pytest.mark.parametrize(
    "text",
    ["2016-03-10 15:19:20.729915", "10-03-2016 15:19:20", "10-03-2016 15:19:20.7299", "31-02-2016 00:00:00.000000"],
)
def test_parse_timestamp_rejects_bad_shapes(text: str) -> None:
    with pytest.raises(ValueError):
        parse_timestamp(text)


def test_parse_line_trims_fields() -> None:
    sample = parse_line("10-03-2016 15:19:20.729915 ;   68998\n")
    assert sample.timestamp == "10-03-2016 15:19:20.729915"
    assert sample.value == 68998.0
    assert sample.instant == parse_timestamp("10-03-2016 15:19:20.729915")


def test_parse_line_accepts_signed_decimals() -> None:
    assert parse_line("  10-03-2016 15:19:20.729915;-12.5  ").value == -12.5


@pytest.mark.parametrize(
    "line, reason",
    [
        ("10-03-2016 15:19:20.729915 68998", "separator"),
        ("10-03-2016 15:19:20.729915 ; abc", "decimal"),
        ("10-03-2016 15:19:20.729915 ; nan", "decimal"),
        ("10-03-2016 15:19:20.729915 ; 1e400", "finite"),
        ("10-03-2016 15:19:20.729915 ; -1e400", "finite"),
        ("10-03-2016 15:19:20.729915 ; ", "decimal"),
        ("garbage ; 12", "timestamp"),
    ],
)
def test_parse_line_reports_structured_failure(line: str, reason: str) -> None:
    with pytest.raises(MalformedSampleError) as excinfo:
        parse_line(line, line_number=7)
    assert excinfo.value.line_number == 7
    assert excinfo.value.line == line
    assert reason in str(excinfo.value)


def test_format_line_round_trips() -> None:
    sample = parse_line("10-03-2016 15:19:20.729915 ; 68998")
    assert format_line(sample) == "10-03-2016 15:19:20.729915 ; 68998"
    assert parse_line(format_line(sample)) == sample


def test_decimation_keeps_every_kth_record() -> None:
    assert list(decimate(range(1, 11), 3)) == [3, 6, 9]
    assert list(decimate(range(1, 6), 1)) == [1, 2, 3, 4, 5]
    assert list(decimate(range(1, 3), 5)) == []


def test_decimator_rejects_zero() -> None:
    with pytest.raises(ValueError):
        Decimator(0)


def test_line_source_reads_files(tmp_path: Path) -> None:
    path = tmp_path / "input.csv"
    path.write_text("a\nb\n", encoding="utf-8")
    assert list(LineSource(path)) == ["a\n", "b\n"]
    with pytest.raises(FileNotFoundError):
        list(LineSource(tmp_path / "missing.csv"))


def test_build_source_variants(tmp_path: Path) -> None:
    path = tmp_path / "input.csv"
    path.write_text("x\n", encoding="utf-8")
    assert list(build_source({"type": "file", "path": str(path)})()) == ["x\n"]

    lines = build_source({"type": "simulated", "duration_s": 0.001, "interval_us": 100, "seed": 1})()
    parsed = [parse_line(line) for line in lines]
    assert len(parsed) == 10
    assert all(b.instant - a.instant == 100 for a, b in zip(parsed, parsed[1:]))

    with pytest.raises(ValueError):
        build_source({"type": "file"})
    with pytest.raises(ValueError):
        build_source({"type": "kafka"})

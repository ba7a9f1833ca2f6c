from __future__ import annotations

from pathlib import Path

import pytest

from fpat import ConfigurationError, DetectorConfig, load_detector_config


def test_defaults_match_documented_values() -> None:
    config = DetectorConfig.from_args([])
    assert config.decimation == 1
    assert config.initial_baseline == 200.0
    assert config.points_to_alarm == 5
    assert config.wait_usec == 1_000_000
    assert config.threshold_multiplier == 10
    assert config.smoothing_length == 500
    assert config.pattern_usec == 250_000


def test_all_seven_positional_arguments() -> None:
    config = DetectorConfig.from_args(["2", "150", "3", "500000", "8", "100", "125000"])
    assert config.decimation == 2
    assert config.initial_baseline == 150.0
    assert config.points_to_alarm == 3
    assert config.pattern_usec == 125000
    assert config.as_args() == ["2", "150", "3", "500000", "8", "100", "125000"]


@pytest.mark.parametrize("count", [1, 3, 6, 8])
def test_partial_argument_sets_are_rejected(count: int) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        DetectorConfig.from_args(["1"] * count)
    assert f"number of arguments passed: {count}" in excinfo.value.problems


def test_out_of_range_values_are_all_reported() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        DetectorConfig.from_args(["0", "200", "5", "-1", "10", "500", "250000"])
    problems = " ".join(excinfo.value.problems)
    assert "sample_each" in problems
    assert "wait_state_usec" in problems
    assert len(excinfo.value.problems) == 2


def test_non_numeric_values_are_rejected() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        DetectorConfig.from_args(["1", "200", "five", "1000000", "10", "500", "250000"])
    assert "number_of_points_to_alarm" in excinfo.value.problems[0]


def test_baseline_below_one_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        DetectorConfig.from_args(["1", "0.5", "5", "1000000", "10", "500", "250000"])


@pytest.mark.parametrize("baseline", ["nan", "inf", "-inf"])
def test_non_finite_baseline_is_rejected(baseline: str) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        DetectorConfig.from_args(["1", baseline, "5", "1000000", "10", "500", "250000"])
    assert "initial_avg_diff" in excinfo.value.problems[0]

    with pytest.raises(ConfigurationError):
        DetectorConfig.from_mapping({**DetectorConfig().model_dump(), "initial_baseline": float(baseline)})


def test_mapping_must_be_complete() -> None:
    assert DetectorConfig.from_mapping({}) == DetectorConfig()
    with pytest.raises(ConfigurationError) as excinfo:
        DetectorConfig.from_mapping({"points_to_alarm": 3, "threshold": 4})
    problems = excinfo.value.problems
    assert "unknown parameter 'threshold'" in problems
    assert "missing parameter 'decimation'" in problems


def test_load_detector_config_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "run.yml"
    path.write_text(
        "\n".join(
            [
                "detector:",
                "  decimation: 1",
                "  initial_baseline: 50",
                "  points_to_alarm: 2",
                "  wait_usec: 10",
                "  threshold_multiplier: 3",
                "  smoothing_length: 20",
                "  pattern_usec: 30",
            ]
        ),
        encoding="utf-8",
    )
    config = load_detector_config(path)
    assert config.points_to_alarm == 2
    assert config.initial_baseline == 50.0


def test_load_detector_config_errors(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_detector_config(tmp_path / "missing.yml")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_detector_config(broken)

    listing = tmp_path / "list.yml"
    listing.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_detector_config(listing)

"""Detector configuration: defaults, validation, and loading from args or files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

# Positional order used by the command line: either none or all of them.
PARAMETER_ORDER: tuple[str, ...] = (
    "decimation",
    "initial_baseline",
    "points_to_alarm",
    "wait_usec",
    "threshold_multiplier",
    "smoothing_length",
    "pattern_usec",
)

PARAMETER_LABELS: Dict[str, str] = {
    "decimation": "sample_each",
    "initial_baseline": "initial_avg_diff",
    "points_to_alarm": "number_of_points_to_alarm",
    "wait_usec": "wait_state_usec",
    "threshold_multiplier": "multiplicator_to_detect",
    "smoothing_length": "n_amend_avgdiff",
    "pattern_usec": "pattern_state_usec",
}


class DetectorConfig(BaseModel):
    """The seven tuning parameters of the difference-threshold detector."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    decimation: int = 1
    initial_baseline: float = Field(default=200.0, allow_inf_nan=False)
    points_to_alarm: int = 5
    wait_usec: int = 1_000_000
    threshold_multiplier: int = 10
    smoothing_length: int = 500
    pattern_usec: int = 250_000

    @field_validator(
        "decimation",
        "points_to_alarm",
        "wait_usec",
        "threshold_multiplier",
        "smoothing_length",
        "pattern_usec",
        "initial_baseline",
    )
    @classmethod
    def _at_least_one(cls, value: float) -> float:
        if value < 1:
            raise ValueError(f"must be >= 1 (got {value})")
        return value

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any] | None) -> "DetectorConfig":
        """Build a config from a mapping holding either none or all seven fields."""

        cfg = dict(cfg or {})
        if not cfg:
            return cls()

        unknown = sorted(str(key) for key in cfg if key not in PARAMETER_ORDER)
        missing = [key for key in PARAMETER_ORDER if key not in cfg]
        problems = [f"unknown parameter '{key}'" for key in unknown]
        problems.extend(f"missing parameter '{key}'" for key in missing)
        if problems:
            raise ConfigurationError(
                "Detector parameters must be given all together or not at all",
                problems,
            )
        return cls._validated(cfg)

    @classmethod
    def from_args(cls, args: Sequence[str]) -> "DetectorConfig":
        """Parse the positional command line form: no arguments or exactly seven."""

        args = list(args)
        if not args:
            return cls()
        if len(args) != len(PARAMETER_ORDER):
            raise ConfigurationError(
                f"Arguments error: must pass {len(PARAMETER_ORDER)} integer arguments or none",
                [f"number of arguments passed: {len(args)}"],
            )

        values: Dict[str, Any] = {}
        problems: list[str] = []
        for name, raw in zip(PARAMETER_ORDER, args):
            try:
                values[name] = float(raw) if name == "initial_baseline" else int(raw)
            except ValueError:
                problems.append(f"{PARAMETER_LABELS[name]}: {raw!r} is not a number")
        if problems:
            raise ConfigurationError("Arguments parsing error", problems)
        return cls._validated(values)

    @classmethod
    def _validated(cls, values: Mapping[str, Any]) -> "DetectorConfig":
        try:
            return cls(**values)
        except ValidationError as exc:
            problems = []
            for error in exc.errors():
                field = str(error["loc"][0]) if error.get("loc") else "config"
                label = PARAMETER_LABELS.get(field, field)
                problems.append(f"{label}: {error['msg']} (got {values.get(field)!r})")
            raise ConfigurationError("Invalid argument(s) value(s)", problems) from exc

    def as_args(self) -> list[str]:
        """Render the config in positional command line order."""

        rendered = []
        for name in PARAMETER_ORDER:
            value = getattr(self, name)
            if isinstance(value, float) and value.is_integer():
                value = int(value)
            rendered.append(str(value))
        return rendered


def load_config(path: str | Path) -> Dict[str, Any]:
    """Load a run configuration mapping from YAML or JSON."""

    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            loaded = json.loads(text)
        else:
            loaded = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Could not parse configuration file {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError("Config file must contain a mapping/object")
    return loaded


def load_detector_config(path: str | Path) -> DetectorConfig:
    """Load the ``detector`` section of a configuration file."""

    cfg = load_config(path)
    section = cfg.get("detector", {})
    if not isinstance(section, Mapping):
        raise ConfigurationError("'detector' section must be a mapping")
    return DetectorConfig.from_mapping(section)

"""Sample feed: line parsing and raw line sources."""

from __future__ import annotations

import math
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, Iterator, Mapping, TextIO

from ..exceptions import MalformedSampleError
from ..models import Sample
from ..models.sample import instant_from_datetime
from ..sensors import SimulatedSensor

TIMESTAMP_FORMAT = "DD-MM-YYYY HH:MM:SS.ffffff"
_TIMESTAMP_RE = re.compile(r"(\d{2})-(\d{2})-(\d{4}) (\d{2}):(\d{2}):(\d{2})\.(\d{6})")
_VALUE_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_timestamp(text: str) -> int:
    """Convert ``DD-MM-YYYY HH:MM:SS.ffffff`` to UTC epoch microseconds.

    The calendar fields are read as UTC regardless of the process locale or
    timezone, so the same text always maps to the same instant.
    """

    match = _TIMESTAMP_RE.fullmatch(text)
    if not match:
        raise ValueError(f"timestamp {text!r} does not match {TIMESTAMP_FORMAT}")
    day, month, year, hour, minute, second, micros = (int(part) for part in match.groups())
    dt = datetime(year, month, day, hour, minute, second, micros, tzinfo=timezone.utc)
    return instant_from_datetime(dt)


def parse_line(line: str, line_number: int | None = None) -> Sample:
    """Parse one ``timestamp ; value`` line into a Sample."""

    text = line.rstrip("\r\n")
    timestamp, sep, raw_value = text.partition(";")
    if not sep:
        raise MalformedSampleError("missing ';' separator", line=text, line_number=line_number)

    timestamp = timestamp.strip()
    raw_value = raw_value.strip()
    try:
        instant = parse_timestamp(timestamp)
    except ValueError as exc:
        raise MalformedSampleError(str(exc), line=text, line_number=line_number) from exc

    if not _VALUE_RE.fullmatch(raw_value):
        raise MalformedSampleError(
            f"value {raw_value!r} is not a decimal number", line=text, line_number=line_number
        )
    value = float(raw_value)
    if not math.isfinite(value):
        raise MalformedSampleError(
            f"value {raw_value!r} is not a finite decimal number", line=text, line_number=line_number
        )
    return Sample(instant=instant, value=value, timestamp=timestamp)


def format_line(sample: Sample) -> str:
    value = int(sample.value) if sample.value.is_integer() else sample.value
    return f"{sample.timestamp} ; {value}"


class StreamingSource:
    """Iterable source contract: yields raw text lines in arrival order."""

    def __iter__(self) -> Iterator[str]:  # pragma: no cover - interface only
        raise NotImplementedError


class LineSource(StreamingSource):
    """Reads ``timestamp ; value`` lines from a path, an open stream, or an iterable."""

    def __init__(self, lines: str | Path | TextIO | Iterable[str]) -> None:
        self.lines = lines

    def __iter__(self) -> Iterator[str]:
        if isinstance(self.lines, (str, Path)):
            path = Path(self.lines)
            if not path.exists():
                raise FileNotFoundError(path)
            with path.open("r", encoding="utf-8") as handle:
                yield from handle
        else:
            yield from self.lines


class SimulatedSource(StreamingSource):
    """Renders a synthetic sensor capture as input lines."""

    def __init__(self, duration_s: float = 1.0, **sensor_kwargs: object) -> None:
        self.duration_s = duration_s
        self.sensor = SimulatedSensor(**sensor_kwargs)  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[str]:
        for sample, _is_burst in self.sensor.stream(duration_s=self.duration_s):
            yield format_line(sample)


def build_source(cfg: Mapping[str, object] | Callable[[], Iterable[str]] | None) -> Callable[[], Iterable[str]]:
    """Factory for line sources based on config mapping."""

    if cfg is None:
        return lambda: LineSource(sys.stdin)

    if callable(cfg):
        return cfg

    source_type = str(cfg.get("type", "stdin")).lower()
    if source_type in {"stdin", "-"}:
        return lambda: LineSource(sys.stdin)
    if source_type in {"file", "csv"}:
        path = cfg.get("path")
        if not path:
            raise ValueError("File source requires 'path'")
        return lambda: LineSource(Path(str(path)))
    if source_type in {"simulated", "demo"}:
        params = {k: v for k, v in cfg.items() if k != "type"}
        duration_s = float(params.pop("duration_s", 1.0))  # type: ignore[arg-type]
        return lambda: SimulatedSource(duration_s=duration_s, **params)

    raise ValueError(f"Unknown source type '{source_type}'")

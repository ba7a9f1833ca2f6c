"""Difference-threshold detector with an adaptive noise baseline.

The baseline is an exponential moving average of absolute sample-to-sample
differences. A sample whose absolute difference reaches
``threshold_multiplier * baseline`` counts towards an exceedance streak; once
``points_to_alarm`` consecutive samples exceed, an alarm is raised. The alarm
starts two independent timers seeded from the alarm instant: a wait period
during which no new alarm can be raised, and a pattern window during which
records carry the alarm's pattern id.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ...config import DetectorConfig
from ...models import OutputRecord, Sample
from ..base import StreamDetector


@dataclass
class DetectorState:
    """Mutable state carried from one sample to the next."""

    baseline: float
    remaining_to_alarm: int
    last_value: float = 0.0
    is_alarm: bool = False
    is_wait: bool = False
    wait_started_at: int = 0
    is_pattern: bool = False
    pattern_started_at: int = 0
    pattern_id: int = 0
    sample_count: int = 0

    @classmethod
    def initial(cls, config: DetectorConfig) -> "DetectorState":
        return cls(baseline=float(config.initial_baseline), remaining_to_alarm=config.points_to_alarm)


class DiffThresholdDetector(StreamDetector):
    """Raises an alarm after a streak of large sample-to-sample differences."""

    def __init__(self, config: DetectorConfig | None = None, *, name: str = "diff_threshold") -> None:
        self.config = config or DetectorConfig()
        self.name = name
        self.state = DetectorState.initial(self.config)

    @property
    def threshold(self) -> float:
        """Exceedance threshold for the current baseline."""

        return self.config.threshold_multiplier * self.state.baseline

    def reset(self) -> None:
        self.state = DetectorState.initial(self.config)

    def process(self, sample: Sample) -> OutputRecord:
        cfg = self.config
        state = self.state

        state.sample_count += 1
        if state.sample_count == 1:
            state.last_value = sample.value

        difference = sample.value - state.last_value
        abs_diff = abs(difference)

        # Pattern and wait timers are independent; both compare against the
        # sample clock, never the wall clock.
        if state.is_pattern and sample.instant - state.pattern_started_at >= cfg.pattern_usec:
            state.is_pattern = False

        if state.is_wait:
            state.is_alarm = False
            if sample.instant - state.wait_started_at >= cfg.wait_usec:
                state.is_wait = False
        elif abs_diff < self.threshold:
            state.remaining_to_alarm = cfg.points_to_alarm
        else:
            state.remaining_to_alarm -= 1
            if state.remaining_to_alarm == 0:
                self._raise_alarm(sample.instant)

        # Frozen while cooling down or mid-streak so the anomaly does not
        # leak into the noise estimate. No lower clamp.
        if not state.is_wait and state.remaining_to_alarm == cfg.points_to_alarm:
            n = cfg.smoothing_length
            state.baseline = (state.baseline * (n - 1) + abs_diff) / n

        state.last_value = sample.value

        return OutputRecord(
            sequence=state.sample_count,
            instant=sample.instant,
            timestamp=sample.timestamp,
            value=sample.value,
            difference=difference,
            baseline=state.baseline,
            is_detecting=state.remaining_to_alarm != cfg.points_to_alarm,
            is_alarm=state.is_alarm,
            is_wait=state.is_wait,
            pattern_id=state.pattern_id if state.is_pattern else 0,
        )

    def _raise_alarm(self, instant: int) -> None:
        state = self.state
        state.is_alarm = True
        state.is_wait = True
        state.wait_started_at = instant
        state.remaining_to_alarm = self.config.points_to_alarm
        state.pattern_id += 1
        state.is_pattern = True
        state.pattern_started_at = instant

    def describe(self) -> Mapping[str, Any]:
        return {"name": self.name, "threshold": self.threshold, **self.config.model_dump()}

"""Virtual sensor producing microsecond-stamped captures without hardware."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterator, List, Tuple

import numpy as np
import pandas as pd

from ..models import Sample


def _now_ts() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@dataclass
class SimulatedSensor:
    """Noisy level signal with occasional bursts of large oscillation.

    Bursts alternate in sign every sample so consecutive differences are about
    twice ``burst_magnitude``, which is what the difference-threshold detector
    reacts to.
    """

    interval_us: int = 64
    level: float = 69_000.0
    noise: float = 100.0
    burst_chance: float = 0.0005
    burst_length: int = 12
    burst_magnitude: float = 5_000.0
    integer_values: bool = True
    seed: int | None = None
    start: datetime | None = None

    def __post_init__(self) -> None:
        if self.interval_us <= 0:
            raise ValueError("interval_us must be positive")
        if self.burst_length < 1:
            raise ValueError("burst_length must be >= 1")
        self.rng = np.random.default_rng(self.seed)

    def stream(self, duration_s: float = 1.0) -> Iterator[Tuple[Sample, bool]]:
        total_samples = int(duration_s * 1_000_000 // self.interval_us)
        start = self.start or _now_ts()
        noise = self.rng.normal(scale=self.noise, size=total_samples)
        burst_left = 0
        sign = 1.0
        for idx in range(total_samples):
            if burst_left == 0 and self.rng.random() < self.burst_chance:
                burst_left = self.burst_length
            value = self.level + float(noise[idx])
            in_burst = burst_left > 0
            if in_burst:
                value += sign * self.burst_magnitude
                sign = -sign
                burst_left -= 1
            if self.integer_values:
                value = float(round(value))
            ts = start + timedelta(microseconds=idx * self.interval_us)
            yield Sample.from_datetime(ts, value), in_burst

    def generate(self, duration_s: float = 1.0) -> Tuple[List[Sample], List[int]]:
        samples: List[Sample] = []
        flags: List[int] = []
        for sample, in_burst in self.stream(duration_s=duration_s):
            samples.append(sample)
            flags.append(1 if in_burst else 0)
        return samples, flags

    def to_dataframe(self, duration_s: float = 1.0) -> pd.DataFrame:
        samples, flags = self.generate(duration_s=duration_s)
        return pd.DataFrame(
            {
                "timestamp": [s.timestamp for s in samples],
                "value": [s.value for s in samples],
                "burst": flags,
            }
        )

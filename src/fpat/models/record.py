"""Per-sample decision record emitted by the detector."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class OutputRecord:
    sequence: int
    instant: int
    timestamp: str
    value: float
    difference: float
    baseline: float
    is_detecting: bool
    is_alarm: bool
    is_wait: bool
    pattern_id: int

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

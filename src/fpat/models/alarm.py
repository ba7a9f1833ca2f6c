"""Alarm representation for alert channels and run summaries."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from .record import OutputRecord


class AlarmEvent(BaseModel):
    """Structured alarm event with the detector context at the raising sample."""

    model_config = ConfigDict(frozen=True)

    pattern_id: int = Field(ge=1)
    sequence: int = Field(ge=1)
    instant: int
    timestamp: str
    value: float
    difference: float
    baseline: float
    threshold: float
    context: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_record(cls, record: OutputRecord, *, threshold: float, **context: Any) -> "AlarmEvent":
        return cls(
            pattern_id=record.pattern_id,
            sequence=record.sequence,
            instant=record.instant,
            timestamp=record.timestamp,
            value=record.value,
            difference=record.difference,
            baseline=record.baseline,
            threshold=threshold,
            context=dict(context),
        )

    def short_label(self) -> str:
        return f"pattern-{self.pattern_id}@{self.sequence}"

"""Abstract detector definitions used by the streaming service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from ..models import OutputRecord, Sample


class StreamDetector(ABC):
    """Base class for per-sample detectors.

    A detector owns its mutable state exclusively; ``process`` is called once
    per sample, in arrival order, and never concurrently.
    """

    name: str = "detector"

    @abstractmethod
    def process(self, sample: Sample) -> OutputRecord:
        """Consume one sample and return its decision record."""

    @abstractmethod
    def reset(self) -> None:
        """Discard all state so the next sample starts a new stream."""

    def describe(self) -> Mapping[str, Any]:
        """Return serializable detector metadata."""

        return {"name": self.name}

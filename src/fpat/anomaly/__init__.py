from .base import StreamDetector
from .detectors import DetectorState, DiffThresholdDetector

__all__ = ["StreamDetector", "DetectorState", "DiffThresholdDetector"]

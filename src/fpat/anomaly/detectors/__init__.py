from .diff_threshold import DetectorState, DiffThresholdDetector

__all__ = ["DetectorState", "DiffThresholdDetector"]

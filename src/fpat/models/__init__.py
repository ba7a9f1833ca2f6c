"""Data models passed between the feed, the detector, and the sinks."""

from .alarm import AlarmEvent
from .record import OutputRecord
from .sample import Sample

__all__ = ["Sample", "OutputRecord", "AlarmEvent"]

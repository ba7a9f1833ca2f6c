"""Fingerprint pattern generation: difference-threshold alarms for sensor streams."""

from importlib import metadata

from .alerting import AlertManager
from .anomaly import DetectorState, DiffThresholdDetector, StreamDetector
from .config import DetectorConfig, load_config, load_detector_config
from .exceptions import ConfigurationError, MalformedSampleError
from .export import RecordWriter, read_records, records_to_dataframe, write_records
from .models import AlarmEvent, OutputRecord, Sample
from .reporting import render_markdown_report, summarize_frame, summarize_run
from .sensors import SimulatedSensor
from .streaming import LineSource, PatternService, RunSummary, decimate, parse_line, parse_timestamp

try:
    __version__ = metadata.version("fingerprint-patterns")
except metadata.PackageNotFoundError:  # pragma: no cover - fallback for source checkouts
    __version__ = "1.0.0"

__all__ = [
    "AlarmEvent",
    "AlertManager",
    "ConfigurationError",
    "DetectorConfig",
    "DetectorState",
    "DiffThresholdDetector",
    "LineSource",
    "MalformedSampleError",
    "OutputRecord",
    "PatternService",
    "RecordWriter",
    "RunSummary",
    "Sample",
    "SimulatedSensor",
    "StreamDetector",
    "decimate",
    "load_config",
    "load_detector_config",
    "parse_line",
    "parse_timestamp",
    "read_records",
    "records_to_dataframe",
    "render_markdown_report",
    "summarize_frame",
    "summarize_run",
    "write_records",
    "__version__",
]

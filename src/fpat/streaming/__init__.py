from .decimation import Decimator, decimate
from .service import PatternService, RunSummary
from .sources import (
    LineSource,
    SimulatedSource,
    build_source,
    format_line,
    parse_line,
    parse_timestamp,
)

__all__ = [
    "PatternService",
    "RunSummary",
    "Decimator",
    "decimate",
    "LineSource",
    "SimulatedSource",
    "build_source",
    "format_line",
    "parse_line",
    "parse_timestamp",
]

"""Writers and loaders for the delimited detection output."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable, Sequence, TextIO

import pandas as pd

from .models import OutputRecord

logger = logging.getLogger(__name__)

DELIMITER = ";"
HEADER: tuple[str, ...] = (
    "lineid",
    "timestamp",
    "meas",
    "diff",
    "curavg",
    "isdetect",
    "isalarm",
    "iswait",
    "patternid",
)


def format_number(value: float) -> str:
    """Integral values print without a fractional part, others round-trip exactly."""

    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def format_row(record: OutputRecord) -> list[str]:
    return [
        str(record.sequence),
        record.timestamp,
        format_number(record.value),
        format_number(record.difference),
        format_number(record.baseline),
        str(int(record.is_detecting)),
        str(int(record.is_alarm)),
        str(int(record.is_wait)),
        str(record.pattern_id),
    ]


class RecordWriter:
    """Streams records as ``;``-delimited rows behind a single header row."""

    def __init__(self, stream: TextIO, *, header: bool = True) -> None:
        self.stream = stream
        self.header = header
        self.rows = 0
        self._writer = csv.writer(stream, delimiter=DELIMITER, lineterminator="\n")
        self._started = False

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        if self.header:
            self._writer.writerow(HEADER)

    def write(self, record: OutputRecord) -> None:
        self.start()
        self._writer.writerow(format_row(record))
        self.rows += 1

    def finish(self) -> None:
        self.start()
        self.stream.flush()


def write_records(records: Iterable[OutputRecord], path: str | Path) -> Path:
    """Write a complete record sequence to ``path``."""

    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8", newline="") as handle:
        writer = RecordWriter(handle)
        for record in records:
            writer.write(record)
        writer.finish()
    logger.info("Wrote %s records to %s", writer.rows, output)
    return output


def records_to_dataframe(records: Sequence[OutputRecord]) -> pd.DataFrame:
    """Tabulate records using the output column names."""

    rows = [
        {
            "lineid": r.sequence,
            "timestamp": r.timestamp,
            "meas": r.value,
            "diff": r.difference,
            "curavg": r.baseline,
            "isdetect": int(r.is_detecting),
            "isalarm": int(r.is_alarm),
            "iswait": int(r.is_wait),
            "patternid": r.pattern_id,
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=list(HEADER))


def read_records(path: str | Path) -> pd.DataFrame:
    """Load a detection output file written by :class:`RecordWriter`."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    df = pd.read_csv(path, sep=DELIMITER, dtype={"timestamp": str})
    missing = [col for col in HEADER if col not in df.columns]
    if missing:
        raise ValueError(f"{path} is not a detection output file (missing columns: {', '.join(missing)})")
    return df

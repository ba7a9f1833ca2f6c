"""Sample model handed from the feed to the detector."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MICROSECOND = timedelta(microseconds=1)


def instant_from_datetime(dt: datetime) -> int:
    """Convert an aware or naive (treated as UTC) datetime to epoch microseconds."""

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - EPOCH) // ONE_MICROSECOND


def datetime_from_instant(instant: int) -> datetime:
    return EPOCH + timedelta(microseconds=instant)


@dataclass(frozen=True)
class Sample:
    """One ``(instant, value)`` measurement.

    ``instant`` is an integer count of microseconds since the UTC epoch and
    ``timestamp`` keeps the text the instant was parsed from, so writers can
    echo it unchanged.
    """

    instant: int
    value: float
    timestamp: str = ""

    @classmethod
    def from_datetime(cls, dt: datetime, value: float) -> "Sample":
        dt = dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)
        return cls(
            instant=instant_from_datetime(dt),
            value=float(value),
            timestamp=dt.strftime("%d-%m-%Y %H:%M:%S.%f"),
        )

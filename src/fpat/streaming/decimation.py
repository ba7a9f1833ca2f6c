"""Decimation of raw input records ahead of detection."""

from __future__ import annotations

from typing import Iterable, Iterator, TypeVar

T = TypeVar("T")


class Decimator:
    """Forwards the last record of every ``every`` consecutive records.

    The first ``every - 1`` records of each group are dropped untouched; with
    ``every == 1`` every record passes through.
    """

    def __init__(self, every: int = 1) -> None:
        if every < 1:
            raise ValueError("every must be >= 1")
        self.every = int(every)
        self._countdown = self.every

    def accept(self) -> bool:
        """Register one raw record and report whether it should be kept."""

        self._countdown -= 1
        if self._countdown > 0:
            return False
        self._countdown = self.every
        return True

    def filter(self, records: Iterable[T]) -> Iterator[T]:
        for record in records:
            if self.accept():
                yield record

    def reset(self) -> None:
        self._countdown = self.every


def decimate(records: Iterable[T], every: int = 1) -> Iterator[T]:
    """Yield the ``every``-th, ``2 * every``-th, ... record of ``records``."""

    return Decimator(every).filter(records)

"""Driving loop wiring a line source, decimation, the detector, and sinks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Protocol, Sequence

from ..alerting import AlertManager, manager_from_config
from ..anomaly.detectors import DiffThresholdDetector
from ..config import DetectorConfig
from ..exceptions import ConfigurationError, MalformedSampleError
from ..logging_utils import log_event
from ..models import AlarmEvent, OutputRecord, Sample
from .decimation import Decimator
from .sources import build_source, parse_line

logger = logging.getLogger(__name__)

MALFORMED_POLICIES = ("raise", "skip")


class RecordSink(Protocol):
    def start(self) -> None: ...

    def write(self, record: OutputRecord) -> None: ...

    def finish(self) -> None: ...


@dataclass
class RunSummary:
    raw_records: int = 0
    records: int = 0
    skipped: int = 0
    out_of_order: int = 0
    last_baseline: float | None = None
    alarms: List[AlarmEvent] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "raw_records": self.raw_records,
            "records": self.records,
            "skipped": self.skipped,
            "out_of_order": self.out_of_order,
            "last_baseline": self.last_baseline,
            "alarms": [a.model_dump() for a in self.alarms],
        }


class PatternService:
    """Runs the detection stream end-to-end.

    Raw lines are decimated before they are parsed, so dropped lines never
    reach the parser or the detector.
    """

    def __init__(
        self,
        source: Callable[[], Iterable[str]],
        detector: DiffThresholdDetector,
        *,
        decimation: int | None = None,
        sinks: Sequence[RecordSink] = (),
        alert_manager: AlertManager | None = None,
        on_malformed: str = "raise",
    ) -> None:
        if on_malformed not in MALFORMED_POLICIES:
            raise ConfigurationError(
                f"on_malformed must be one of {', '.join(MALFORMED_POLICIES)} (got {on_malformed!r})"
            )
        self.source = source
        self.detector = detector
        self.decimation = decimation if decimation is not None else detector.config.decimation
        self.sinks = list(sinks)
        self.alert_manager = alert_manager
        self.on_malformed = on_malformed

    @classmethod
    def create_from_config(
        cls,
        cfg: Mapping[str, Any],
        *,
        sinks: Sequence[RecordSink] = (),
        source: Callable[[], Iterable[str]] | None = None,
    ) -> "PatternService":
        detector_cfg = DetectorConfig.from_mapping(cfg.get("detector"))
        alerts_cfg = cfg.get("alerts")
        return cls(
            source=source or build_source(cfg.get("source")),
            detector=DiffThresholdDetector(detector_cfg),
            sinks=sinks,
            alert_manager=manager_from_config(alerts_cfg) if alerts_cfg else None,
            on_malformed=str(cfg.get("on_malformed", "raise")),
        )

    def run(self, *, max_samples: int | None = None) -> RunSummary:
        """Consume the source until it is exhausted or ``max_samples`` were processed."""

        summary = RunSummary()
        decimator = Decimator(self.decimation)
        last_instant: int | None = None
        log_event(logger, "run_started", detector=self.detector.describe())

        for sink in self.sinks:
            sink.start()
        try:
            for line_number, line in enumerate(self.source(), start=1):
                if not line.strip():
                    continue
                summary.raw_records += 1
                if not decimator.accept():
                    continue

                try:
                    sample = parse_line(line, line_number)
                except MalformedSampleError as exc:
                    if self.on_malformed == "raise":
                        raise
                    summary.skipped += 1
                    logger.warning("Skipping %s", exc)
                    continue

                if last_instant is not None and sample.instant < last_instant:
                    if not summary.out_of_order:
                        logger.warning(
                            "Timestamps went backwards at line %s; elapsed-time checks are undefined from here",
                            line_number,
                        )
                    summary.out_of_order += 1
                last_instant = sample.instant

                self._handle(sample, summary)
                if max_samples is not None and summary.records >= max_samples:
                    break
        finally:
            for sink in self.sinks:
                sink.finish()

        log_event(
            logger,
            "run_finished",
            raw_records=summary.raw_records,
            records=summary.records,
            skipped=summary.skipped,
            alarms=len(summary.alarms),
        )
        return summary

    def process_samples(self, samples: Iterable[Sample]) -> List[OutputRecord]:
        """Feed already parsed and decimated samples straight to the detector."""

        summary = RunSummary()
        return [self._handle(sample, summary) for sample in samples]

    def _handle(self, sample: Sample, summary: RunSummary) -> OutputRecord:
        record = self.detector.process(sample)
        summary.records += 1
        summary.last_baseline = record.baseline
        for sink in self.sinks:
            sink.write(record)
        if record.is_alarm:
            event = AlarmEvent.from_record(record, threshold=self.detector.threshold, detector=self.detector.name)
            summary.alarms.append(event)
            if self.alert_manager:
                self.alert_manager.notify(event)
        return record

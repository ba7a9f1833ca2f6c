"""Command line interface for fingerprint pattern generation."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from contextlib import ExitStack
from pathlib import Path
from typing import Any, Sequence

from . import __version__
from .alerting import AlertManager, LoggingChannel, WebhookChannel, manager_from_config
from .anomaly.detectors import DiffThresholdDetector
from .config import DetectorConfig, load_config
from .exceptions import ConfigurationError, MalformedSampleError
from .export import RecordWriter, read_records
from .logging_utils import configure_logging
from .models.sample import datetime_from_instant
from .reporting import plot_run, render_markdown_report, summarize_frame
from .sensors import SimulatedSensor
from .streaming import LineSource, PatternService, format_line, parse_timestamp
from .streaming.service import MALFORMED_POLICIES

logger = logging.getLogger(__name__)


def _print_result(result: Any, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result, indent=2, default=str))
    else:
        print(result)


def _fail(exc: Exception) -> None:
    print(f"Error: {exc}", file=sys.stderr)
    for problem in getattr(exc, "problems", []):
        print(f"  {problem}", file=sys.stderr)
    sys.exit(1)


def _resolve_detector_config(args: argparse.Namespace) -> tuple[DetectorConfig, dict[str, Any]]:
    run_cfg: dict[str, Any] = load_config(args.config) if args.config else {}
    if args.params and run_cfg.get("detector"):
        raise ConfigurationError("Pass detector parameters positionally or in --config, not both")
    if args.params:
        return DetectorConfig.from_args(args.params), run_cfg
    return DetectorConfig.from_mapping(run_cfg.get("detector")), run_cfg


def _build_alert_manager(args: argparse.Namespace, run_cfg: dict[str, Any]) -> AlertManager | None:
    if args.alert_webhook:
        return AlertManager([LoggingChannel(), WebhookChannel(args.alert_webhook)])
    if run_cfg.get("alerts"):
        return manager_from_config(run_cfg["alerts"])
    return None


def cmd_detect(args: argparse.Namespace) -> None:
    config, run_cfg = _resolve_detector_config(args)
    on_malformed = "skip" if args.skip_malformed else str(run_cfg.get("on_malformed", "raise"))
    if on_malformed not in MALFORMED_POLICIES:
        raise ConfigurationError(f"on_malformed must be one of {', '.join(MALFORMED_POLICIES)} (got {on_malformed!r})")
    alert_manager = _build_alert_manager(args, run_cfg)
    if args.input and not Path(args.input).is_file():
        raise FileNotFoundError(f"Input file not found: {args.input}")

    with ExitStack() as stack:
        if args.input:
            source = LineSource(Path(args.input))
        else:
            source = LineSource(sys.stdin)
        if args.output:
            output_path = Path(args.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            stream = stack.enter_context(output_path.open("w", encoding="utf-8", newline=""))
        else:
            stream = sys.stdout

        service = PatternService(
            source=lambda: source,
            detector=DiffThresholdDetector(config),
            sinks=[RecordWriter(stream)],
            alert_manager=alert_manager,
            on_malformed=on_malformed,
        )
        summary = service.run()

    if args.summary:
        summary_path = Path(args.summary)
        summary_path.parent.mkdir(parents=True, exist_ok=True)
        summary_path.write_text(
            json.dumps({"config": config.model_dump(), **summary.as_dict()}, indent=2, default=str),
            encoding="utf-8",
        )
    logger.info("Processed %s records with %s alarms", summary.records, len(summary.alarms))


def cmd_simulate(args: argparse.Namespace) -> None:
    start = datetime_from_instant(parse_timestamp(args.start)) if args.start else None
    sensor = SimulatedSensor(
        interval_us=args.interval_us,
        level=args.level,
        noise=args.noise,
        burst_chance=args.burst_chance,
        burst_length=args.burst_length,
        burst_magnitude=args.burst_magnitude,
        seed=args.seed,
        start=start,
    )
    with ExitStack() as stack:
        if args.output:
            output_path = Path(args.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            stream = stack.enter_context(output_path.open("w", encoding="utf-8"))
        else:
            stream = sys.stdout
        count = 0
        bursts = 0
        for sample, in_burst in sensor.stream(duration_s=args.duration_s):
            stream.write(format_line(sample) + "\n")
            count += 1
            bursts += int(in_burst)
    logger.info("Simulated %s samples (%s in bursts)", count, bursts)


def cmd_report(args: argparse.Namespace) -> None:
    df = read_records(args.records)
    summary = summarize_frame(df, source=str(args.records))
    if args.markdown:
        render_markdown_report(summary, args.markdown)
    if args.plot:
        plot_run(df, args.plot)
    if args.json:
        _print_result(summary, as_json=True)
    else:
        print(
            f"[report] records={summary['records']} alarms={summary['alarms']} "
            f"patterns={len(summary['patterns'])} source={summary['source']}"
        )


def cmd_version(_args: argparse.Namespace) -> None:
    print(__version__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fpat",
        description="Detect sustained-deviation alarms and label post-alarm patterns in sensor streams.",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    parser.add_argument("--json-logs", action="store_true", default=None, help="Emit JSON logs")
    sub = parser.add_subparsers(dest="command", required=True)

    detect = sub.add_parser(
        "detect",
        help="Run detection over 'timestamp ; value' lines",
        description=(
            "Positional parameters, all seven or none: sample_each initial_avg_diff "
            "number_of_points_to_alarm wait_state_usec multiplicator_to_detect "
            "n_amend_avgdiff pattern_state_usec"
        ),
    )
    detect.add_argument("params", nargs="*", help="Detector parameters (0 or 7 values)")
    detect.add_argument("--input", help="Input file (default: stdin)")
    detect.add_argument("--output", help="Output file (default: stdout)")
    detect.add_argument("--config", help="Run config (YAML or JSON) with a 'detector' section")
    detect.add_argument("--skip-malformed", action="store_true", help="Skip unparseable lines instead of aborting")
    detect.add_argument("--alert-webhook", help="POST each alarm to this URL")
    detect.add_argument("--summary", help="Write a JSON run summary to this path")
    detect.set_defaults(func=cmd_detect)

    simulate = sub.add_parser("simulate", help="Generate a synthetic 'timestamp ; value' stream")
    simulate.add_argument("--duration-s", type=float, default=1.0, help="Capture duration in seconds")
    simulate.add_argument("--interval-us", type=int, default=64, help="Sample spacing in microseconds")
    simulate.add_argument("--level", type=float, default=69_000.0, help="Signal level")
    simulate.add_argument("--noise", type=float, default=100.0, help="Noise standard deviation")
    simulate.add_argument("--burst-chance", type=float, default=0.0005, help="Chance per sample of a burst starting")
    simulate.add_argument("--burst-length", type=int, default=12, help="Samples per burst")
    simulate.add_argument("--burst-magnitude", type=float, default=5_000.0, help="Burst amplitude")
    simulate.add_argument("--seed", type=int, help="Random seed")
    simulate.add_argument("--start", help="First timestamp (DD-MM-YYYY HH:MM:SS.ffffff)")
    simulate.add_argument("--output", help="Output file (default: stdout)")
    simulate.set_defaults(func=cmd_simulate)

    report = sub.add_parser("report", help="Summarize a detection output file")
    report.add_argument("records", help="Path to the detection output")
    report.add_argument("--markdown", help="Write a Markdown report to this path")
    report.add_argument("--plot", help="Write a PNG plot to this path")
    report.add_argument("--json", action="store_true", help="Emit the summary as JSON")
    report.set_defaults(func=cmd_report)

    version = sub.add_parser("version", help="Display the installed version")
    version.set_defaults(func=cmd_version)

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, json_logs=args.json_logs)
    try:
        args.func(args)
    except (ConfigurationError, MalformedSampleError, FileNotFoundError, ValueError) as exc:
        _fail(exc)


if __name__ == "__main__":  # pragma: no cover
    main()

"""Summaries and Markdown/plot reports over a detection output file."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import numpy as np
import pandas as pd
from jinja2 import Template

from .export import read_records

_MARKDOWN_TEMPLATE = """# {{ title }}

- Source: {{ summary.source }}
- Records: {{ summary.records }}
- Alarms: {{ summary.alarms }}
- Records in wait: {{ summary.wait_records }}
- Records detecting: {{ summary.detecting_records }}
- Baseline: first={{ summary.baseline.first }} last={{ summary.baseline.last }} min={{ summary.baseline.min }} max={{ summary.baseline.max }}

## Patterns
{% if summary.patterns %}
| id | first line | last line | start | end | records | max abs diff |
|---|---|---|---|---|---|---|
{% for p in summary.patterns %}| {{ p.pattern_id }} | {{ p.first_line }} | {{ p.last_line }} | {{ p.start }} | {{ p.end }} | {{ p.records }} | {{ p.max_abs_diff }} |
{% endfor %}
{% else %}
No alarms were raised for the configured parameters.
{% endif %}
"""


def summarize_frame(df: pd.DataFrame, *, source: str = "unknown") -> Dict[str, Any]:
    """Aggregate a record table into alarm and pattern statistics."""

    patterns = []
    labelled = df[df["patternid"] > 0]
    for pattern_id, group in labelled.groupby("patternid", sort=True):
        patterns.append(
            {
                "pattern_id": int(pattern_id),
                "first_line": int(group["lineid"].iloc[0]),
                "last_line": int(group["lineid"].iloc[-1]),
                "start": str(group["timestamp"].iloc[0]),
                "end": str(group["timestamp"].iloc[-1]),
                "records": int(len(group)),
                "max_abs_diff": float(np.max(np.abs(group["diff"].to_numpy(dtype=float)))),
            }
        )

    baseline = df["curavg"].astype(float)
    return {
        "source": source,
        "records": int(len(df)),
        "alarms": int(df["isalarm"].sum()),
        "wait_records": int(df["iswait"].sum()),
        "detecting_records": int(df["isdetect"].sum()),
        "baseline": {
            "first": float(baseline.iloc[0]) if not baseline.empty else None,
            "last": float(baseline.iloc[-1]) if not baseline.empty else None,
            "min": float(baseline.min()) if not baseline.empty else None,
            "max": float(baseline.max()) if not baseline.empty else None,
        },
        "patterns": patterns,
    }


def summarize_run(path: str | Path) -> Dict[str, Any]:
    """Load a detection output file and summarize it."""

    return summarize_frame(read_records(path), source=str(path))


def render_markdown_report(
    summary: Dict[str, Any],
    output_path: str | Path,
    *,
    title: str = "Fingerprint Pattern Report",
) -> Path:
    """Render a Markdown report using the built-in template."""

    template = Template(_MARKDOWN_TEMPLATE)
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(template.render(title=title, summary=summary), encoding="utf-8")
    return output


def plot_run(df: pd.DataFrame, output_path: str | Path) -> Path:
    """Plot measured values with the adaptive threshold band and pattern spans."""

    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt  # imported lazily to avoid heavy startup

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    lines = df["lineid"].to_numpy()

    fig, (ax, ax_diff) = plt.subplots(2, 1, figsize=(10, 6), sharex=True)
    ax.plot(lines, df["meas"].to_numpy(dtype=float), label="meas", color="#1f77b4", linewidth=0.8)
    for _, group in df[df["patternid"] > 0].groupby("patternid"):
        ax.axvspan(group["lineid"].iloc[0], group["lineid"].iloc[-1], color="#d62728", alpha=0.15)
    for line in df.loc[df["isalarm"] == 1, "lineid"]:
        ax.axvline(x=line, color="#d62728", linestyle="--", alpha=0.6)
    ax.set_ylabel("Value")
    ax.legend(loc="upper right")
    ax.grid(True, linestyle="--", alpha=0.5)

    ax_diff.plot(lines, np.abs(df["diff"].to_numpy(dtype=float)), label="|diff|", color="#2ca02c", linewidth=0.8)
    ax_diff.plot(lines, df["curavg"].to_numpy(dtype=float), label="baseline", color="#ff7f0e")
    ax_diff.set_xlabel("Line")
    ax_diff.set_ylabel("Difference")
    ax_diff.legend(loc="upper right")
    ax_diff.grid(True, linestyle="--", alpha=0.5)

    fig.tight_layout()
    fig.savefig(output)
    plt.close(fig)
    return output

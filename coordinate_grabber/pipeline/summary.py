"""Run summary lines for the terminal."""

from __future__ import annotations

from typing import Callable, List

from ..models import RunSummary


def format_summary(summary: RunSummary) -> List[str]:
    lines = [
        f"Total Records: {summary.total_records}",
        f"Total Failures: {summary.failure_count}",
    ]
    for kind, count in sorted(summary.failures_by_kind.items()):
        lines.append(f"  {kind}: {count}")
    return lines


def report_summary(summary: RunSummary, logger: Callable[[str], None] = print) -> None:
    for line in format_summary(summary):
        logger(line)

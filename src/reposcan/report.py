"""CSV report rendering for pulse metrics.

Files written per scan:
- ``{org}-{repo}-abs.csv``: raw counts per pulse.
- ``{org}-{repo}-norm.csv``: normalized open/merged values per pulse.
- ``compare-open.csv`` / ``compare-merged.csv``: normalized values of every
  repository side by side, one row per repository.
- ``all-users.csv``: every contributor login seen, for allowlist curation.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Callable, List, Sequence

from .models import PulseMetrics, RepositoryPulseSeries, ScanResult

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"

COMPARISONS = (
    ("open", "open (norm)", lambda pulse: pulse.open_norm),
    ("merged", "merged (norm)", lambda pulse: pulse.merged_norm),
)


def format_date(pulse: PulseMetrics) -> str:
    return pulse.start.strftime(DATE_FORMAT)


def format_norm(value: float) -> str:
    return f"{value:0.2f}"


def _file_stem(repo_name: str) -> str:
    return repo_name.replace("/", "-")


def _write_rows(path: Path, rows: Sequence[Sequence[str]]) -> Path:
    with path.open("w", newline="", encoding="utf-8") as handle:
        csv.writer(handle).writerows(rows)
    logger.debug("Wrote report", extra={"path": str(path), "rows": len(rows)})
    return path


def write_absolute_report(output_dir: Path, series: RepositoryPulseSeries) -> Path:
    """Write the raw per-pulse counts of one repository."""
    rows: List[List[str]] = [
        [f"Repo: {series.name}"],
        ["Pulse", "Contributors", "Open", "Merged", "Churned", "Velocity"],
    ]
    for pulse in series.pulses:
        rows.append(
            [
                format_date(pulse),
                str(pulse.contributors),
                str(pulse.open),
                str(pulse.merged),
                str(pulse.churned),
                str(pulse.velocity),
            ]
        )
    return _write_rows(output_dir / f"{_file_stem(series.name)}-abs.csv", rows)


def write_normalized_report(output_dir: Path, series: RepositoryPulseSeries) -> Path:
    """Write the normalized per-pulse values of one repository."""
    rows: List[List[str]] = [
        [f"Repo: {series.name}"],
        ["Pulse", "Open (Norm)", "Merged (Norm)"],
    ]
    for pulse in series.pulses:
        rows.append([format_date(pulse), format_norm(pulse.open_norm), format_norm(pulse.merged_norm)])
    return _write_rows(output_dir / f"{_file_stem(series.name)}-norm.csv", rows)


def write_comparison_report(
    output_dir: Path,
    name: str,
    description: str,
    value: Callable[[PulseMetrics], float],
    series: Sequence[RepositoryPulseSeries],
) -> Path:
    """Write one normalized metric of every repository side by side.

    Pulse dates are taken from the first repository; all series share the same
    aligned start so the columns line up.
    """
    rows: List[List[str]] = [[f"Compare: {description}"]]
    if series:
        rows.append(["Pulse"] + [format_date(pulse) for pulse in series[0].pulses])
    for repo_series in series:
        rows.append([repo_series.name] + [format_norm(value(pulse)) for pulse in repo_series.pulses])
    return _write_rows(output_dir / f"compare-{name}.csv", rows)


def write_users_report(output_dir: Path, logins: Sequence[str]) -> Path:
    """Write every contributor login, one per row."""
    rows: List[List[str]] = [["Login"]]
    rows.extend([login] for login in logins)
    return _write_rows(output_dir / "all-users.csv", rows)


def write_reports(output_dir: Path, result: ScanResult) -> List[Path]:
    """Write every report for a scan into ``output_dir`` and return the paths written."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []

    for series in result.series:
        logger.info("%s: writing pr and normalised reports...", series.name)
        written.append(write_absolute_report(output_dir, series))
        written.append(write_normalized_report(output_dir, series))

    for name, description, value in COMPARISONS:
        logger.info("%s: writing normalised comparison report...", description)
        written.append(write_comparison_report(output_dir, name, description, value, result.series))

    logger.info("writing user list...")
    written.append(write_users_report(output_dir, result.logins))
    return written

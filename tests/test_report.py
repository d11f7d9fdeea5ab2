"""Tests for CSV report rendering."""

import csv

from reposcan.models import PulseMetrics, RepositoryPulseSeries, ScanResult
from reposcan.report import write_comparison_report, write_reports

from conftest import utc


def _pulse(index, start, contributors=2, open_=1, merged=2, churned=1, open_norm=0.5, merged_norm=1.25):
    return PulseMetrics(
        index=index,
        start=start,
        end=start,
        days=14,
        contributors=contributors,
        open=open_,
        merged=merged,
        churned=churned,
        open_norm=open_norm,
        merged_norm=merged_norm,
    )


def _read(path):
    with path.open(newline="", encoding="utf-8") as handle:
        return list(csv.reader(handle))


def _result():
    first = RepositoryPulseSeries(
        name="org/one",
        pulses=[_pulse(0, utc(2024, 1, 1)), _pulse(1, utc(2024, 1, 15), merged_norm=2.0)],
    )
    second = RepositoryPulseSeries(
        name="org/two",
        pulses=[_pulse(0, utc(2024, 1, 1), open_norm=0.0), _pulse(1, utc(2024, 1, 15), open_norm=1.0 / 3)],
    )
    return ScanResult(
        start=utc(2024, 1, 1),
        end=utc(2024, 1, 20),
        series=[first, second],
        logins=("alice", "bob"),
    )


def test_write_reports_creates_every_file(tmp_path):
    """Verify per-repository, comparison and user reports are all written."""
    output_dir = tmp_path / "out"

    written = write_reports(output_dir, _result())

    assert sorted(path.name for path in written) == [
        "all-users.csv",
        "compare-merged.csv",
        "compare-open.csv",
        "org-one-abs.csv",
        "org-one-norm.csv",
        "org-two-abs.csv",
        "org-two-norm.csv",
    ]
    assert all(path.parent == output_dir for path in written)


def test_absolute_report_rows(tmp_path):
    """Verify raw counts and velocity are written per pulse."""
    write_reports(tmp_path, _result())

    rows = _read(tmp_path / "org-one-abs.csv")

    assert rows[0] == ["Repo: org/one"]
    assert rows[1] == ["Pulse", "Contributors", "Open", "Merged", "Churned", "Velocity"]
    assert rows[2] == ["2024-01-01", "2", "1", "2", "1", "1"]
    assert len(rows) == 4


def test_normalized_report_rows(tmp_path):
    """Verify normalized values are formatted with two decimals."""
    write_reports(tmp_path, _result())

    rows = _read(tmp_path / "org-two-norm.csv")

    assert rows[1] == ["Pulse", "Open (Norm)", "Merged (Norm)"]
    assert rows[2] == ["2024-01-01", "0.00", "1.25"]
    assert rows[3] == ["2024-01-15", "0.33", "1.25"]


def test_comparison_report_lines_up_repositories(tmp_path):
    """Verify the comparison report has a date row followed by one row per repository."""
    write_reports(tmp_path, _result())

    rows = _read(tmp_path / "compare-merged.csv")

    assert rows == [
        ["Compare: merged (norm)"],
        ["Pulse", "2024-01-01", "2024-01-15"],
        ["org/one", "1.25", "2.00"],
        ["org/two", "1.25", "1.25"],
    ]


def test_comparison_report_without_repositories(tmp_path):
    """Verify an empty scan still writes the comparison title."""
    path = write_comparison_report(tmp_path, "open", "open (norm)", lambda pulse: pulse.open_norm, [])

    assert _read(path) == [["Compare: open (norm)"]]


def test_users_report_lists_logins(tmp_path):
    """Verify every login is written one per row."""
    write_reports(tmp_path, _result())

    assert _read(tmp_path / "all-users.csv") == [["Login"], ["alice"], ["bob"]]

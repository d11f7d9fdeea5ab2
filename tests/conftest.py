"""Shared fixtures and builders for reposcan tests."""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reposcan.models import PullRequestRecord


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def make_pr(
    author: str = "alice",
    created: Optional[datetime] = None,
    closed: Optional[datetime] = None,
    merged: Optional[datetime] = None,
    lines: int = 30,
    state: Optional[str] = None,
) -> PullRequestRecord:
    """Build a pull request; state defaults to MERGED, CLOSED or OPEN from the timestamps."""
    if merged is not None and closed is None:
        closed = merged
    if state is None:
        if merged is not None:
            state = "MERGED"
        elif closed is not None:
            state = "CLOSED"
        else:
            state = "OPEN"
    return PullRequestRecord(
        author=author,
        created_at=created or utc(2024, 1, 2),
        closed_at=closed,
        merged_at=merged,
        additions=lines,
        deletions=0,
        state=state,
    )

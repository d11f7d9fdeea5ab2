"""Pull request classification into pulse windows.

An open pull request is counted in every pulse it overlaps, so the same open
pull request shows up once per pulse ("open at end of pulse"). A closed pull
request is counted only in the pulse in which it closed, as merged or churned.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from .contributors import is_allowlisted
from .models import (
    CATEGORY_CHURNED,
    CATEGORY_MERGED,
    CATEGORY_OPEN,
    ClassifiedPullRequest,
    PullRequestRecord,
)
from .pulse import to_utc


def overlaps_window(pr: PullRequestRecord, window_start: datetime, window_end: datetime) -> bool:
    """Return True when ``pr`` was created before the window ends and not closed before it starts."""
    if pr.closed_at is not None and to_utc(pr.closed_at) < window_start:
        return False
    return to_utc(pr.created_at) < window_end


def categorize(
    pr: PullRequestRecord,
    window_start: datetime,
    window_end: datetime,
) -> Optional[str]:
    """Return the category of ``pr`` within the window, or ``None`` if it does not count there."""
    if not overlaps_window(pr, window_start, window_end):
        return None

    if pr.is_open:
        return CATEGORY_OPEN

    closed_at = to_utc(pr.closed_at)
    if not window_start <= closed_at < window_end:
        return None

    return CATEGORY_MERGED if pr.is_merged else CATEGORY_CHURNED


def classify_window(
    pull_requests: Iterable[PullRequestRecord],
    window_start: datetime,
    window_end: datetime,
    allowlist: Sequence[str] = (),
) -> List[ClassifiedPullRequest]:
    """Classify the allowlisted pull requests that count in ``[window_start, window_end)``."""
    window_start = to_utc(window_start)
    window_end = to_utc(window_end)

    classified: List[ClassifiedPullRequest] = []
    for pr in pull_requests:
        if not is_allowlisted(pr.author, allowlist):
            continue

        category = categorize(pr, window_start, window_end)
        if category is None:
            continue

        classified.append(ClassifiedPullRequest(category=category, size=pr.size))

    return classified

"""Contributor activity tracking.

Team size over time is derived from pull request authorship alone. Each login
gets one contiguous interval spanning its earliest pull request creation to its
latest merge or close (or "now" while a pull request is still open). Logins
whose last activity falls within the cooldown are treated as still active.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from .config import NormalizationConfig
from .models import ContributorInterval, PullRequestRecord
from .pulse import to_utc

logger = logging.getLogger(__name__)

AuthorFilter = Callable[[str], bool]

COOLDOWN_DAYS_PER_MONTH = 30


def make_prefix_filter(prefixes: Iterable[str]) -> AuthorFilter:
    """Build an ``is_excluded_author(login)`` predicate matching login prefixes."""
    prefix_tuple = tuple(prefix for prefix in prefixes if prefix)

    def is_excluded_author(login: str) -> bool:
        return bool(prefix_tuple) and login.startswith(prefix_tuple)

    return is_excluded_author


def is_allowlisted(login: str, allowlist: Sequence[str]) -> bool:
    """Return True when ``login`` is tracked; an empty allowlist tracks everyone."""
    if not allowlist:
        return True
    return login in allowlist


def cooldown_period(months: int) -> timedelta:
    """Return the cooldown as a duration, counting every month as 30 days."""
    return timedelta(hours=months * COOLDOWN_DAYS_PER_MONTH * 24)


def _activity_end(pr: PullRequestRecord, now: datetime) -> datetime:
    if pr.merged_at is not None:
        return to_utc(pr.merged_at)
    if pr.closed_at is not None:
        return to_utc(pr.closed_at)
    return now


def build_contributor_intervals(
    pull_requests: Iterable[PullRequestRecord],
    config: NormalizationConfig,
    now: datetime,
    is_excluded_author: Optional[AuthorFilter] = None,
) -> Dict[str, ContributorInterval]:
    """Derive one activity interval per login from its pull requests.

    Business logic:
    - Skip pull requests with an empty author or an excluded (bot) author.
    - A pull request spans ``created_at`` to ``merged_at``, else ``closed_at``,
      else ``now``.
    - Spans of the same login are merged into their hull (min start, max end).
    - When the merged end is less than the cooldown before ``now`` it is promoted
      to ``now``. Only the final end moves; the start is never extended.

    The allowlist is not applied here so the full login set stays available for
    allowlist curation; it is applied when contributors are counted per pulse.
    """
    now = to_utc(now)
    if is_excluded_author is None:
        is_excluded_author = make_prefix_filter(config.bot_prefixes)

    spans: Dict[str, Tuple[datetime, datetime]] = {}
    skipped = 0

    for pr in pull_requests:
        login = pr.author
        if not login or is_excluded_author(login):
            skipped += 1
            continue

        start = to_utc(pr.created_at)
        end = _activity_end(pr, now)

        if login in spans:
            known_start, known_end = spans[login]
            start = min(start, known_start)
            end = max(end, known_end)
        spans[login] = (start, end)

    cooldown = cooldown_period(config.cooldown)
    intervals: Dict[str, ContributorInterval] = {}
    for login, (start, end) in spans.items():
        # Also clamps ends later than now.
        if now - end < cooldown:
            end = now
        intervals[login] = ContributorInterval(login=login, start=min(start, end), end=end)

    logger.debug(
        "Built contributor intervals",
        extra={"contributors": len(intervals), "skipped_pull_requests": skipped},
    )
    return intervals


def count_active_contributors(
    intervals: Mapping[str, ContributorInterval],
    window_start: datetime,
    window_end: datetime,
    allowlist: Sequence[str] = (),
) -> int:
    """Count allowlisted logins whose interval overlaps ``[window_start, window_end)``."""
    return sum(
        1
        for login, interval in intervals.items()
        if is_allowlisted(login, allowlist) and interval.overlaps(window_start, window_end)
    )


def combine_logins(interval_maps: Iterable[Mapping[str, ContributorInterval]]) -> Tuple[str, ...]:
    """Return the sorted distinct logins seen across several repositories."""
    logins = set()
    for intervals in interval_maps:
        logins.update(intervals)
    return tuple(sorted(logins))

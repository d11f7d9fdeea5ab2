"""Cross-repository alignment and scanning.

Every repository is scanned from one shared pulse boundary so that pulse index
``i`` covers the same calendar dates in every series and the series can be
compared side by side.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence

from .config import NormalizationConfig
from .contributors import AuthorFilter, build_contributor_intervals, combine_logins
from .metrics import compute_pulse_series
from .models import RepositoryPulseSeries, RepositorySnapshot, ScanResult
from .pulse import pulse_boundary_at_or_before, to_utc

logger = logging.getLogger(__name__)

SCAN_END_PADDING = timedelta(days=1)


def shared_pulse_start(
    creation_dates: Iterable[datetime],
    override: Optional[date] = None,
    now: Optional[datetime] = None,
) -> datetime:
    """Return the pulse boundary every repository series starts from.

    The reference instant is ``override`` when configured, otherwise the earliest
    repository creation instant (``now`` when there are no repositories). It is
    then snapped back to the pulse boundary at or before it.
    """
    if override is not None:
        reference = datetime(override.year, override.month, override.day, tzinfo=timezone.utc)
    else:
        reference = to_utc(now) if now is not None else datetime.now(timezone.utc)
        for created_at in creation_dates:
            reference = min(reference, to_utc(created_at))

    return pulse_boundary_at_or_before(reference)


def scan_repositories(
    snapshots: Sequence[RepositorySnapshot],
    config: NormalizationConfig,
    now: Optional[datetime] = None,
    is_excluded_author: Optional[AuthorFilter] = None,
) -> ScanResult:
    """Compute aligned pulse series for every repository.

    Repositories are processed independently from the shared start through
    ``now`` plus one day; only the start and the combined login list are folded
    across repositories.
    """
    now = to_utc(now) if now is not None else datetime.now(timezone.utc)
    start = shared_pulse_start(
        (snapshot.created_at for snapshot in snapshots),
        override=config.start,
        now=now,
    )
    end = now + SCAN_END_PADDING

    series: List[RepositoryPulseSeries] = []
    interval_maps = []

    for snapshot in snapshots:
        logger.info("%s: generating pulse metrics...", snapshot.name)
        intervals = build_contributor_intervals(
            snapshot.pull_requests,
            config,
            now=now,
            is_excluded_author=is_excluded_author,
        )
        interval_maps.append(intervals)
        pulses = compute_pulse_series(snapshot.pull_requests, intervals, start, end, config)
        series.append(RepositoryPulseSeries(name=snapshot.name, pulses=pulses))

    logger.info(
        "Scanned repositories",
        extra={
            "repositories": len(series),
            "start": start.isoformat(),
            "end": end.isoformat(),
        },
    )

    return ScanResult(start=start, end=end, series=series, logins=combine_logins(interval_maps))

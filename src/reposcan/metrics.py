"""Per-pulse metric aggregation.

Raw metrics count pull requests per category. Normalized metrics weight every
pull request by its size tier (1, 2 or 3) and divide the summed weights by the
number of active contributors in the pulse:

    norm = sum(size_weight(pr) for pr in category) / contributors

A pulse with no active contributors has no comparable team and normalizes to 0.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Mapping, Sequence

from .classifier import classify_window
from .config import NormalizationConfig
from .contributors import count_active_contributors
from .models import (
    CATEGORY_CHURNED,
    CATEGORY_MERGED,
    CATEGORY_OPEN,
    ClassifiedPullRequest,
    ContributorInterval,
    PullRequestRecord,
    PulseMetrics,
    PulseWindow,
)
from .pulse import generate_pulse_windows

logger = logging.getLogger(__name__)


def size_weight(lines: int, low: int, high: int) -> int:
    """Return the size tier of a pull request: 1 up to ``low``, 2 up to ``high``, else 3."""
    if lines > high:
        return 3
    if lines > low:
        return 2
    return 1


def normalized_value(sizes: Iterable[int], contributors: int, low: int, high: int) -> float:
    """Sum the size weights of ``sizes`` and divide by ``contributors`` (0 when no contributors)."""
    total = sum(size_weight(lines, low, high) for lines in sizes)
    if contributors == 0:
        return 0.0
    return total / contributors


def _sizes(classified: Sequence[ClassifiedPullRequest], category: str) -> List[int]:
    return [pr.size for pr in classified if pr.category == category]


def aggregate_window(
    window: PulseWindow,
    classified: Sequence[ClassifiedPullRequest],
    contributors: int,
    config: NormalizationConfig,
) -> PulseMetrics:
    """Compute raw and normalized metrics for one pulse."""
    open_sizes = _sizes(classified, CATEGORY_OPEN)
    merged_sizes = _sizes(classified, CATEGORY_MERGED)
    churned_sizes = _sizes(classified, CATEGORY_CHURNED)

    return PulseMetrics(
        index=window.index,
        start=window.start,
        end=window.end,
        days=window.days,
        contributors=contributors,
        open=len(open_sizes),
        merged=len(merged_sizes),
        churned=len(churned_sizes),
        open_norm=normalized_value(open_sizes, contributors, config.low, config.high),
        merged_norm=normalized_value(merged_sizes, contributors, config.low, config.high),
    )


def compute_pulse_series(
    pull_requests: Sequence[PullRequestRecord],
    intervals: Mapping[str, ContributorInterval],
    start: datetime,
    end: datetime,
    config: NormalizationConfig,
) -> List[PulseMetrics]:
    """Compute the ordered pulse metrics of one repository between ``start`` and ``end``.

    Raises:
        PulseRangeError: If ``end`` precedes ``start``.
    """
    pulses: List[PulseMetrics] = []

    for window in generate_pulse_windows(start, end):
        contributors = count_active_contributors(
            intervals, window.start, window.end, config.allowlist
        )
        classified = classify_window(pull_requests, window.start, window.end, config.allowlist)
        pulses.append(aggregate_window(window, classified, contributors, config))

    logger.debug(
        "Computed pulse series",
        extra={"pulses": len(pulses), "pull_requests": len(pull_requests)},
    )
    return pulses

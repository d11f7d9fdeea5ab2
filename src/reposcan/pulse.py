"""Pulse window generation.

A pulse is a two-week analysis bucket that always begins on an odd ISO week
(1, 3, 5, ...). Pulses never cross an ISO year boundary: the pulse that would
run past the last ISO week of a year is cut short so the next one begins on
week 1 of the following year. In a 53-week year that leaves a one-week pulse
starting on week 53.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import List, Tuple

from .errors import PulseRangeError
from .models import PulseWindow

logger = logging.getLogger(__name__)

PULSE_WEEKS = 2


def to_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso_weeks_in_year(year: int) -> int:
    """Return the number of ISO weeks (52 or 53) in ``year``.

    December 28 always falls in the last ISO week of its year.
    """
    return date(year, 12, 28).isocalendar()[1]


def pulse_start_week(week: int) -> int:
    """Collapse an ISO week number onto the odd week that starts its pulse.

    Raises:
        PulseRangeError: If the resulting week is not positive.
    """
    if week % 2 == 0:
        week -= 1
    if week <= 0:
        raise PulseRangeError(f"ISO week for a pulse start must be 1 or higher, got {week}.")
    return week


def next_pulse_week(year: int, week: int) -> Tuple[int, int]:
    """Return the ISO ``(year, week)`` on which the pulse after ``(year, week)`` begins."""
    week += PULSE_WEEKS
    if week > iso_weeks_in_year(year):
        return year + 1, 1
    return year, week


def iso_week_start(year: int, week: int) -> datetime:
    """Return midnight UTC on the Monday of ISO ``week`` in ISO ``year``."""
    return datetime.fromisocalendar(year, week, 1).replace(tzinfo=timezone.utc)


def _pulse_cursor(instant: datetime) -> Tuple[int, int]:
    year, week, _ = to_utc(instant).isocalendar()
    return year, pulse_start_week(week)


def pulse_boundary_at_or_before(instant: datetime) -> datetime:
    """Return the start of the pulse containing ``instant``."""
    return iso_week_start(*_pulse_cursor(instant))


def generate_pulse_windows(start: datetime, end: datetime) -> List[PulseWindow]:
    """Partition ``[start, end]`` into contiguous pulse windows.

    The first window begins on the pulse boundary at or before ``start``. Windows
    are emitted until the next window would begin strictly after ``end``; the last
    window is never truncated, so it may extend past ``end``.

    Raises:
        PulseRangeError: If ``end`` precedes ``start``.
    """
    start = to_utc(start)
    end = to_utc(end)
    if end < start:
        raise PulseRangeError(
            f"Pulse range end {end.isoformat()} precedes start {start.isoformat()}."
        )

    year, week = _pulse_cursor(start)
    windows: List[PulseWindow] = []

    while True:
        window_start = iso_week_start(year, week)
        if window_start > end:
            break

        year, week = next_pulse_week(year, week)
        window_end = iso_week_start(year, week)
        windows.append(
            PulseWindow(
                index=len(windows),
                start=window_start,
                end=window_end,
                days=(window_end - window_start).days,
            )
        )

    logger.debug(
        "Generated pulse windows",
        extra={"start": start.isoformat(), "end": end.isoformat(), "windows": len(windows)},
    )
    return windows

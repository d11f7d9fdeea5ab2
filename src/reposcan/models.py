"""Domain models for pull request pulse metrics.

Pull request records are supplied by the retrieval layer and never mutated. Every
other model is derived fresh on each run from those records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from .errors import DataValidationError

OPEN_STATE = "OPEN"

CATEGORY_OPEN = "open"
CATEGORY_MERGED = "merged"
CATEGORY_CHURNED = "churned"


@dataclass(frozen=True, slots=True)
class PullRequestRecord:
    """Represents the minimal pull request data required for pulse metrics."""

    author: str
    created_at: datetime
    closed_at: Optional[datetime]
    merged_at: Optional[datetime]
    additions: int
    deletions: int
    state: str

    def __post_init__(self) -> None:
        if self.state != OPEN_STATE and self.closed_at is None:
            raise DataValidationError(
                f"Pull request in terminal state '{self.state}' has no close timestamp "
                f"(author={self.author!r}, created_at={self.created_at.isoformat()})."
            )
        if self.additions < 0 or self.deletions < 0:
            raise DataValidationError(
                "Pull request line counts must be non-negative: "
                f"additions={self.additions}, deletions={self.deletions}."
            )

    @property
    def is_open(self) -> bool:
        return self.state == OPEN_STATE

    @property
    def is_merged(self) -> bool:
        return self.merged_at is not None

    @property
    def size(self) -> int:
        """Changed lines (additions plus deletions)."""
        return self.additions + self.deletions


@dataclass(frozen=True, slots=True)
class ContributorInterval:
    """Represents the contiguous span during which a login is considered active."""

    login: str
    start: datetime
    end: datetime

    def overlaps(self, window_start: datetime, window_end: datetime) -> bool:
        """Return True when the interval touches ``[window_start, window_end)``."""
        return self.start < window_end and self.end >= window_start


@dataclass(frozen=True, slots=True)
class PulseWindow:
    """Represents one analysis bucket; ``end`` is the start of the following pulse."""

    index: int
    start: datetime
    end: datetime
    days: int


@dataclass(frozen=True, slots=True)
class ClassifiedPullRequest:
    """Represents a pull request assigned to a category within one pulse."""

    category: str
    size: int


@dataclass(frozen=True, slots=True)
class PulseMetrics:
    """Represents raw and normalized pull request metrics for one pulse."""

    index: int
    start: datetime
    end: datetime
    days: int
    contributors: int
    open: int
    merged: int
    churned: int
    open_norm: float
    merged_norm: float

    @property
    def velocity(self) -> int:
        return self.merged - self.churned


@dataclass(slots=True)
class RepositorySnapshot:
    """Represents a repository and its complete pull request history."""

    name: str
    created_at: datetime
    pull_requests: List[PullRequestRecord] = field(default_factory=list)


@dataclass(slots=True)
class RepositoryPulseSeries:
    """Represents the ordered pulse metrics computed for one repository."""

    name: str
    pulses: List[PulseMetrics]


@dataclass(slots=True)
class ScanResult:
    """Represents the aligned pulse series of every scanned repository."""

    start: datetime
    end: datetime
    series: List[RepositoryPulseSeries]
    logins: Tuple[str, ...]

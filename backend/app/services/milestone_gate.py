"""
Milestone gate - decides whether a feedback milestone may be submitted and reports progress.

Milestones form a strict chain 1..N: milestone k is admissible only once k-1 is in.
Pure functions over the set of already-submitted milestone indices; callers validate
the requested index (validate_milestone_index) before asking the gate.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, Optional

from backend.app.core.exceptions import MilestoneValidationError

# Historic progress breakpoints for the three-milestone course: count -> percent
THREE_MILESTONE_PROGRESS = {0: 0, 1: 20, 2: 50, 3: 100}


class RejectionReason(str, Enum):
    ALREADY_SUBMITTED = "already_submitted"
    PREREQUISITE_MISSING = "prerequisite_missing"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Allowed:
    milestone_index: int


@dataclass(frozen=True)
class Rejected:
    milestone_index: int
    reason: RejectionReason
    missing_milestone: Optional[int] = None


@dataclass(frozen=True)
class MilestoneProgress:
    percentage: int
    next_milestone: Optional[int]
    submitted: tuple[int, ...]


def validate_milestone_index(milestone_index: int, milestone_count: int) -> int:
    """Raise MilestoneValidationError unless 1 <= milestone_index <= milestone_count."""
    if isinstance(milestone_index, bool) or not isinstance(milestone_index, int):
        raise MilestoneValidationError(milestone_index, milestone_count)
    if milestone_index < 1 or milestone_index > milestone_count:
        raise MilestoneValidationError(milestone_index, milestone_count)
    return milestone_index


def can_submit(existing: AbstractSet[int], requested: int) -> Allowed | Rejected:
    """
    Admissibility of `requested` given the milestones already submitted.
    Duplicate check wins over the prerequisite check.
    """
    if requested in existing:
        return Rejected(requested, RejectionReason.ALREADY_SUBMITTED)
    if requested > 1 and (requested - 1) not in existing:
        return Rejected(requested, RejectionReason.PREREQUISITE_MISSING, missing_milestone=requested - 1)
    return Allowed(requested)


def progress_percentage(submitted_count: int, milestone_count: int) -> int:
    """Step function over the number of submitted milestones."""
    count = max(0, min(submitted_count, milestone_count))
    if milestone_count == 3:
        return THREE_MILESTONE_PROGRESS[count]
    if milestone_count <= 0:
        return 0
    return round(100 * count / milestone_count)


def compute_progress(existing: AbstractSet[int], milestone_count: int) -> MilestoneProgress:
    """Progress and next milestone. Indices outside 1..milestone_count are ignored."""
    in_range = sorted(i for i in existing if 1 <= i <= milestone_count)
    next_milestone = next(
        (i for i in range(1, milestone_count + 1) if i not in existing),
        None,
    )
    return MilestoneProgress(
        percentage=progress_percentage(len(in_range), milestone_count),
        next_milestone=next_milestone,
        submitted=tuple(in_range),
    )

"""
kudos.engine.streaks — Community Visit-Streak State Machine
============================================================

Pure transition function over calendar dates.  Time of day never matters:
two visits on the same date are one visit.

    no record           → current=1, longest=1
    same day (Δ=0)      → no change
    next day (Δ=1)      → current+1, longest=max(longest, current)
    gap (Δ≥2)           → current=1, longest kept
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True, slots=True)
class StreakState:
    last_visit_date: date
    current_streak: int = 1
    longest_streak: int = 1

    def __post_init__(self) -> None:
        if self.current_streak < 1:
            raise ValueError(f"current_streak must be >= 1, got {self.current_streak}")
        if self.longest_streak < self.current_streak:
            raise ValueError(
                f"longest_streak ({self.longest_streak}) must be >= "
                f"current_streak ({self.current_streak})"
            )


def as_date(value: date | datetime) -> date:
    """Truncate *value* to its calendar date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(earlier: date | datetime, later: date | datetime) -> int:
    """Whole calendar days from *earlier* to *later* (negative if reversed)."""
    return (as_date(later) - as_date(earlier)).days


def advance_streak(state: StreakState | None, today: date | datetime) -> StreakState | None:
    """Apply one visit on *today* to *state*.

    Returns the new state, or ``None`` when the visit changes nothing
    (already counted today).  A *today* earlier than the last visit is
    treated as a same-day revisit.
    """
    today = as_date(today)
    if state is None:
        return StreakState(last_visit_date=today)

    delta = days_between(state.last_visit_date, today)
    if delta <= 0:
        return None
    if delta == 1:
        current = state.current_streak + 1
        return StreakState(
            last_visit_date=today,
            current_streak=current,
            longest_streak=max(state.longest_streak, current),
        )
    return StreakState(
        last_visit_date=today,
        current_streak=1,
        longest_streak=state.longest_streak,
    )

"""
kudos.engine.side_effects — Post-Commit Side Effects
=====================================================

Gamification must never fail the action that triggered it.  Services
commit their primary write first, then queue the follow-up work here::

    effects = SideEffects("question 42")
    effects.add("points", point_service.award_points, engine, "alice", 10)
    effects.add("milestone", award_question_milestone, engine, "alice")
    outcomes = effects.run()     # {"points": 130, "milestone": False}

Each task runs independently; a task that raises is logged and recorded
as ``None``.  There are no retries.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Task:
    name: str
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)


class SideEffects:
    """An ordered list of named, individually failable tasks."""

    def __init__(self, origin: str = "") -> None:
        self.origin = origin
        self._tasks: list[_Task] = []

    def __len__(self) -> int:
        return len(self._tasks)

    def add(self, name: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        if any(t.name == name for t in self._tasks):
            raise ValueError(f"Duplicate side-effect name: {name!r}")
        self._tasks.append(_Task(name, func, args, kwargs))

    def run(self) -> dict[str, Any]:
        """Run every queued task once, in order, and clear the queue."""
        outcomes: dict[str, Any] = {}
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            try:
                outcomes[task.name] = task.func(*task.args, **task.kwargs)
            except Exception:
                logger.warning(
                    "Side effect %r failed after %s", task.name, self.origin or "commit",
                    exc_info=True,
                )
                outcomes[task.name] = None
        return outcomes

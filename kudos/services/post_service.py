"""
kudos.services.post_service — Question & Answer Creation
=========================================================

Persists posts, then hands the gamification follow-ups (points, milestone
badges) to :class:`~kudos.engine.side_effects.SideEffects`.  The post is
committed before any of them run, so a failing side effect can never
undo it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from kudos.config import KudosConfig
from kudos.database.models import ActivityType, Answer, Question, User
from kudos.engine.side_effects import SideEffects
from kudos.services import badge_service, point_service

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Counters
# ---------------------------------------------------------------------------
def count_user_questions(engine: Engine, username: str) -> int:
    """Number of questions asked by *username*; 0 on failure."""
    try:
        with Session(engine) as session:
            return session.scalar(
                select(func.count()).select_from(Question).where(Question.asked_by == username)
            ) or 0
    except Exception:
        logger.warning("Failed to count questions for %s", username, exc_info=True)
        return 0


def count_user_answers(engine: Engine, username: str) -> int:
    """Number of answers written by *username*; 0 on failure."""
    try:
        with Session(engine) as session:
            return session.scalar(
                select(func.count()).select_from(Answer).where(Answer.ans_by == username)
            ) or 0
    except Exception:
        logger.warning("Failed to count answers for %s", username, exc_info=True)
        return 0


_COUNTERS = {
    ActivityType.QUESTION: count_user_questions,
    ActivityType.ANSWER: count_user_answers,
}


def award_activity_milestone(
    engine: Engine, username: str, activity: ActivityType, cfg: KudosConfig,
) -> bool:
    """Count *username*'s posts of this kind (the new one included) and
    mint the milestone badge if the total lands on a threshold."""
    count = _COUNTERS[activity](engine, username)
    return badge_service.check_and_award_milestone(
        engine, username, activity.value, count, cfg,
    )


def _gamify_post(
    engine: Engine,
    username: str,
    activity: ActivityType,
    points: int,
    cfg: KudosConfig,
    origin: str,
) -> dict[str, Any]:
    effects = SideEffects(origin)
    effects.add("points", point_service.award_points, engine, username, points)
    effects.add("milestone", award_activity_milestone, engine, username, activity, cfg)
    return effects.run()


def _require_user(session: Session, username: str) -> None:
    if session.scalar(select(User.id).where(User.username == username)) is None:
        raise LookupError(f"User {username!r} not found.")


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------
def create_question(
    engine: Engine,
    *,
    title: str,
    text: str,
    asked_by: str,
    cfg: KudosConfig | None = None,
) -> tuple[Question, dict[str, Any]]:
    """Save a question and run its gamification side effects.

    Returns (question, side-effect outcomes).

    Raises
    ------
    ValueError
        If the title or text is blank.
    LookupError
        If *asked_by* is not a known user.
    """
    cfg = cfg or KudosConfig()
    if not title.strip() or not text.strip():
        raise ValueError("Question title and text must not be blank.")

    with Session(engine, expire_on_commit=False) as session:
        _require_user(session, asked_by)
        question = Question(title=title.strip(), text=text, asked_by=asked_by)
        session.add(question)
        session.commit()
        session.refresh(question)

    outcomes = _gamify_post(
        engine, asked_by, ActivityType.QUESTION,
        cfg.points.question_created, cfg, f"question {question.id}",
    )
    return question, outcomes


def create_answer(
    engine: Engine,
    *,
    question_id: int,
    text: str,
    ans_by: str,
    cfg: KudosConfig | None = None,
) -> tuple[Answer, dict[str, Any]]:
    """Save an answer to *question_id* and run its gamification side effects.

    Raises
    ------
    ValueError
        If the text is blank.
    LookupError
        If the question or the author does not exist.
    """
    cfg = cfg or KudosConfig()
    if not text.strip():
        raise ValueError("Answer text must not be blank.")

    with Session(engine, expire_on_commit=False) as session:
        if session.get(Question, question_id) is None:
            raise LookupError(f"Question {question_id} not found.")
        _require_user(session, ans_by)
        answer = Answer(question_id=question_id, text=text, ans_by=ans_by)
        session.add(answer)
        session.commit()
        session.refresh(answer)

    outcomes = _gamify_post(
        engine, ans_by, ActivityType.ANSWER,
        cfg.points.answer_created, cfg, f"answer {answer.id}",
    )
    return answer, outcomes

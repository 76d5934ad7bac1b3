"""
kudos.database.models — SQLAlchemy 2.0 Data Models
===================================================

Tables:
- users                  — Forum members (unique, immutable username)
- badges                 — Earned badges, insertion order = award order
- questions              — Asked questions (only what the hooks need)
- answers                — Answers to questions
- communities            — Named groups with a single admin
- community_participants — Membership set per community
- visit_streaks          — Per-community, per-user consecutive-day visits
"""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Kudos ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class BadgeKind(enum.StrEnum):
    """Partitions of a user's badge collection."""
    MILESTONE = "milestone"
    COMMUNITY = "community"
    LEADERBOARD = "leaderboard"


class ActivityType(enum.StrEnum):
    """Countable activities that can reach a milestone."""
    QUESTION = "question"
    ANSWER = "answer"


class Visibility(enum.StrEnum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


def _new_community_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Users — one row per forum member
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    # NULL is a legacy "never credited" state and reads as 0.
    points: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    badges: Mapped[list[Badge]] = relationship(
        back_populates="user", cascade="all, delete-orphan", order_by="Badge.id",
    )

    __table_args__ = (
        Index("ix_users_points_desc", "points"),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} points={self.points}>"


# ---------------------------------------------------------------------------
# Badge — earned recognition, append-only
# ---------------------------------------------------------------------------
class Badge(Base):
    """A badge held by a user.

    Names are unique per user by construction: rows are only ever inserted
    through :func:`kudos.services.badge_service.award_badge`, which refuses
    a name the user already holds.  There is deliberately no unique index,
    so rows written by older code paths can still be repaired by
    :func:`~kudos.services.badge_service.deduplicate_badges`.
    """
    __tablename__ = "badges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    earned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped[User] = relationship(back_populates="badges")

    __table_args__ = (
        Index("ix_badges_user_name", "user_id", "name"),
    )

    def __repr__(self) -> str:
        return f"<Badge id={self.id} user={self.user_id} name={self.name!r}>"


# ---------------------------------------------------------------------------
# Questions & Answers
# ---------------------------------------------------------------------------
class Question(Base):
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    asked_by: Mapped[str] = mapped_column(
        String(100), ForeignKey("users.username"), nullable=False
    )
    asked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    answers: Mapped[list[Answer]] = relationship(
        back_populates="question", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_questions_asked_by", "asked_by"),
    )

    def __repr__(self) -> str:
        return f"<Question id={self.id} by={self.asked_by!r}>"


class Answer(Base):
    __tablename__ = "answers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    ans_by: Mapped[str] = mapped_column(
        String(100), ForeignKey("users.username"), nullable=False
    )
    ans_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    question: Mapped[Question] = relationship(back_populates="answers")

    __table_args__ = (
        Index("ix_answers_ans_by", "ans_by"),
    )

    def __repr__(self) -> str:
        return f"<Answer id={self.id} question={self.question_id} by={self.ans_by!r}>"


# ---------------------------------------------------------------------------
# Communities
# ---------------------------------------------------------------------------
class Community(Base):
    __tablename__ = "communities"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_community_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    visibility: Mapped[str] = mapped_column(
        String(10), nullable=False, default=Visibility.PUBLIC.value
    )
    admin: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    participants: Mapped[list[CommunityParticipant]] = relationship(
        back_populates="community", cascade="all, delete-orphan", lazy="selectin",
    )
    visit_streaks: Mapped[list[VisitStreak]] = relationship(
        back_populates="community", cascade="all, delete-orphan",
    )

    @property
    def participant_names(self) -> list[str]:
        return [p.username for p in self.participants]

    def __repr__(self) -> str:
        return f"<Community id={self.id} name={self.name!r} admin={self.admin!r}>"


class CommunityParticipant(Base):
    __tablename__ = "community_participants"

    community_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("communities.id", ondelete="CASCADE"), primary_key=True
    )
    username: Mapped[str] = mapped_column(String(100), primary_key=True)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    community: Mapped[Community] = relationship(back_populates="participants")

    __table_args__ = (
        Index("ix_community_participants_username", "username"),
    )

    def __repr__(self) -> str:
        return f"<CommunityParticipant community={self.community_id} user={self.username!r}>"


# ---------------------------------------------------------------------------
# VisitStreak — consecutive-day visitation per (community, user)
# ---------------------------------------------------------------------------
class VisitStreak(Base):
    __tablename__ = "visit_streaks"

    community_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("communities.id", ondelete="CASCADE"), primary_key=True
    )
    username: Mapped[str] = mapped_column(String(100), primary_key=True)
    last_visit_date: Mapped[date] = mapped_column(Date, nullable=False)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    community: Mapped[Community] = relationship(back_populates="visit_streaks")

    __table_args__ = (
        CheckConstraint("current_streak >= 1", name="ck_visit_streaks_current_positive"),
        CheckConstraint(
            "longest_streak >= current_streak", name="ck_visit_streaks_longest_ge_current"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<VisitStreak community={self.community_id} user={self.username!r} "
            f"current={self.current_streak} longest={self.longest_streak}>"
        )

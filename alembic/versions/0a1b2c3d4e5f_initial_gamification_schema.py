"""Initial schema: users, badges, posts, communities, visit streaks

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = "0a1b2c3d4e5f"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("points", sa.Integer(), nullable=True, server_default="0"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )
    op.create_index("ix_users_points_desc", "users", ["points"])

    # No unique (user_id, name): awarding is conditional, and the
    # deduplication pass must be able to see legacy duplicates.
    op.create_table(
        "badges",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("earned_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_badges_user_name", "badges", ["user_id", "name"])

    op.create_table(
        "questions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("asked_by", sa.String(100), nullable=False),
        sa.Column(
            "asked_at", sa.DateTime(timezone=True), server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["asked_by"], ["users.username"]),
    )
    op.create_index("ix_questions_asked_by", "questions", ["asked_by"])

    op.create_table(
        "answers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("question_id", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("ans_by", sa.String(100), nullable=False),
        sa.Column(
            "ans_at", sa.DateTime(timezone=True), server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["ans_by"], ["users.username"]),
    )
    op.create_index("ix_answers_ans_by", "answers", ["ans_by"])

    op.create_table(
        "communities",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("visibility", sa.String(10), nullable=False, server_default="PUBLIC"),
        sa.Column("admin", sa.String(100), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "community_participants",
        sa.Column("community_id", sa.String(32), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column(
            "joined_at", sa.DateTime(timezone=True), server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("community_id", "username"),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_community_participants_username", "community_participants", ["username"],
    )

    op.create_table(
        "visit_streaks",
        sa.Column("community_id", sa.String(32), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("last_visit_date", sa.Date(), nullable=False),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="1"),
        sa.PrimaryKeyConstraint("community_id", "username"),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"], ondelete="CASCADE"),
        sa.CheckConstraint("current_streak >= 1", name="ck_visit_streaks_current_positive"),
        sa.CheckConstraint(
            "longest_streak >= current_streak", name="ck_visit_streaks_longest_ge_current",
        ),
    )


def downgrade() -> None:
    op.drop_table("visit_streaks")
    op.drop_index("ix_community_participants_username", table_name="community_participants")
    op.drop_table("community_participants")
    op.drop_table("communities")
    op.drop_index("ix_answers_ans_by", table_name="answers")
    op.drop_table("answers")
    op.drop_index("ix_questions_asked_by", table_name="questions")
    op.drop_table("questions")
    op.drop_index("ix_badges_user_name", table_name="badges")
    op.drop_table("badges")
    op.drop_index("ix_users_points_desc", table_name="users")
    op.drop_table("users")

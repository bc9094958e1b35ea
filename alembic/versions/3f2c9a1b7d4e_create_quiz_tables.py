"""create quiz, quiz_result and enrollment tables

Revision ID: 3f2c9a1b7d4e
Revises:
Create Date: 2025-10-20
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "3f2c9a1b7d4e"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "quiz",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("class_id", sa.String(length=64), nullable=True),
        sa.Column("lecture_title", sa.String(length=500), nullable=True),
        sa.Column("total_questions", sa.Integer(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("questions", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_exam_mode", sa.Boolean(), nullable=False),
        sa.Column("exam_status", sa.String(length=20), nullable=True),
        sa.Column("exam_start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("exam_end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("exam_duration_minutes", sa.Integer(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
    )
    op.create_index("ix_quiz_id", "quiz", ["id"])
    op.create_index("ix_quiz_class_id", "quiz", ["class_id"])
    op.create_index("ix_quiz_is_active", "quiz", ["is_active"])
    op.create_index("ix_quiz_exam_status", "quiz", ["exam_status"])
    op.create_index("ix_quiz_created_at", "quiz", ["created_at"])

    op.create_table(
        "quiz_result",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("quiz_id", sa.Integer(), sa.ForeignKey("quiz.id"), nullable=False),
        sa.Column("class_id", sa.String(length=64), nullable=True),
        sa.Column("student_id", sa.String(length=64), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("total_questions", sa.Integer(), nullable=False),
        sa.Column("percentage", sa.Float(), nullable=False),
        sa.Column("time_taken_seconds", sa.Integer(), nullable=False),
        sa.Column(
            "submission_date",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("answers", sa.JSON(), nullable=False),
        sa.Column("submission_type", sa.String(length=20), nullable=False),
        sa.Column("was_exam_mode", sa.Boolean(), nullable=False),
        sa.Column("exam_time_remaining", sa.Integer(), nullable=True),
        sa.Column("anti_cheat_metadata", sa.JSON(), nullable=False),
        sa.UniqueConstraint(
            "quiz_id", "student_id", name="uq_quiz_result_quiz_student"
        ),
    )
    op.create_index("ix_quiz_result_id", "quiz_result", ["id"])
    op.create_index("ix_quiz_result_quiz_id", "quiz_result", ["quiz_id"])
    op.create_index("ix_quiz_result_class_id", "quiz_result", ["class_id"])
    op.create_index("ix_quiz_result_student_id", "quiz_result", ["student_id"])
    op.create_index(
        "ix_quiz_result_submission_date", "quiz_result", ["submission_date"]
    )

    op.create_table(
        "enrollment",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("class_id", sa.String(length=64), nullable=False),
        sa.Column("student_id", sa.String(length=64), nullable=False),
        sa.Column("student_name", sa.String(length=200), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.UniqueConstraint(
            "class_id", "student_id", name="uq_enrollment_class_student"
        ),
    )
    op.create_index("ix_enrollment_id", "enrollment", ["id"])
    op.create_index("ix_enrollment_class_id", "enrollment", ["class_id"])
    op.create_index("ix_enrollment_student_id", "enrollment", ["student_id"])


def downgrade() -> None:
    op.drop_table("enrollment")
    op.drop_table("quiz_result")
    op.drop_table("quiz")

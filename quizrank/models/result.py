from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import JSON, DateTime

from quizrank.core.database import Base


class QuizResult(Base):
    __tablename__ = "quiz_result"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quiz.id"), nullable=False, index=True)
    class_id = Column(String(64), nullable=True, index=True)
    student_id = Column(String(64), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    percentage = Column(Float, nullable=False)
    time_taken_seconds = Column(Integer, nullable=False)
    submission_date = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
    answers = Column(JSON, nullable=False)
    submission_type = Column(String(20), nullable=False, default="manual")
    was_exam_mode = Column(Boolean, default=False, nullable=False)
    exam_time_remaining = Column(Integer, nullable=True)
    # Client-reported telemetry, advisory only
    anti_cheat_metadata = Column(JSON, nullable=False)

    # One attempt per student per quiz, enforced by the database
    __table_args__ = (
        UniqueConstraint("quiz_id", "student_id", name="uq_quiz_result_quiz_student"),
    )

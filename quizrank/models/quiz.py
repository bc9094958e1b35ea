from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.sql import func
from sqlalchemy.types import JSON, DateTime

from quizrank.core.database import Base


class Quiz(Base):
    __tablename__ = "quiz"

    id = Column(Integer, primary_key=True, index=True)
    class_id = Column(String(64), nullable=True, index=True)
    lecture_title = Column(String(500), nullable=True)
    total_questions = Column(Integer, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    # Generated once, never mutated afterwards
    questions = Column(JSON, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Exam mode lifecycle: scheduled -> active -> ended
    is_exam_mode = Column(Boolean, default=False, nullable=False)
    exam_status = Column(String(20), nullable=True, index=True)
    exam_start_time = Column(DateTime(timezone=True), nullable=True)
    exam_end_time = Column(DateTime(timezone=True), nullable=True)
    exam_duration_minutes = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

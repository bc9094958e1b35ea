from sqlalchemy import Boolean, Column, Integer, String, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from quizrank.core.database import Base


class Enrollment(Base):
    """Roster data owned by the class management service, read-only here"""

    __tablename__ = "enrollment"

    id = Column(Integer, primary_key=True, index=True)
    class_id = Column(String(64), nullable=False, index=True)
    student_id = Column(String(64), nullable=False, index=True)
    student_name = Column(String(200), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("class_id", "student_id", name="uq_enrollment_class_student"),
    )

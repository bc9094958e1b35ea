from typing import List

from sqlalchemy.orm import Session

from quizrank.models.enrollment import Enrollment


class EnrollmentRepository:
    """Read-only access to class rosters"""

    def __init__(self, db: Session):
        self.db = db

    def is_enrolled(self, student_id: str, class_id: str) -> bool:
        """Check for an active enrollment of the student in the class"""
        return (
            self.db.query(Enrollment.id)
            .filter(
                Enrollment.student_id == student_id,
                Enrollment.class_id == class_id,
                Enrollment.is_active.is_(True),
            )
            .first()
            is not None
        )

    def get_active_by_class(self, class_id: str) -> List[Enrollment]:
        """Get the active roster of a class"""
        return (
            self.db.query(Enrollment)
            .filter(Enrollment.class_id == class_id, Enrollment.is_active.is_(True))
            .all()
        )

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from quizrank.models.quiz import Quiz


class QuizRepository:
    """Repository for Quiz database operations following DDD pattern"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, quiz_id: int) -> Optional[Quiz]:
        """Get a quiz entry by ID"""
        return self.db.query(Quiz).filter(Quiz.id == quiz_id).first()

    def get_active_by_class(self, class_id: str) -> List[Quiz]:
        """Get all active quizzes of a class"""
        return (
            self.db.query(Quiz)
            .filter(Quiz.class_id == class_id, Quiz.is_active.is_(True))
            .order_by(Quiz.created_at.asc(), Quiz.id.asc())
            .all()
        )

    def get_exams_by_class_and_status(self, class_id: str, exam_status: str) -> List[Quiz]:
        """Get active exam-mode quizzes of a class with the given stored status"""
        return (
            self.db.query(Quiz)
            .filter(
                Quiz.class_id == class_id,
                Quiz.is_active.is_(True),
                Quiz.is_exam_mode.is_(True),
                Quiz.exam_status == exam_status,
            )
            .all()
        )

    def create(self, quiz_data: dict) -> Quiz:
        """Create a new quiz entry"""
        db_quiz = Quiz(**quiz_data)
        self.db.add(db_quiz)
        self.db.commit()
        self.db.refresh(db_quiz)
        return db_quiz

    def transition_exam_status(
        self, quiz_id: int, from_statuses: Iterable[str], update_data: dict
    ) -> bool:
        """
        Conditionally update exam lifecycle fields.

        The UPDATE only matches while the stored status is one of
        ``from_statuses``, so concurrent callers cannot both win the same
        transition. Returns True when this call changed the row.
        """
        updated = (
            self.db.query(Quiz)
            .filter(Quiz.id == quiz_id, Quiz.exam_status.in_(list(from_statuses)))
            .update(update_data, synchronize_session=False)
        )
        self.db.commit()
        return updated > 0

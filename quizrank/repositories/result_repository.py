import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quizrank.core.exceptions import DuplicateError, PersistenceError
from quizrank.models.result import QuizResult

logger = logging.getLogger(__name__)


class ResultRepository:
    """Repository for QuizResult database operations following DDD pattern"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, result_id: int) -> Optional[QuizResult]:
        return self.db.query(QuizResult).filter(QuizResult.id == result_id).first()

    def get_by_quiz_and_student(
        self, quiz_id: int, student_id: str
    ) -> Optional[QuizResult]:
        """Get the single attempt of a student at a quiz, if any"""
        return (
            self.db.query(QuizResult)
            .filter(QuizResult.quiz_id == quiz_id, QuizResult.student_id == student_id)
            .first()
        )

    def insert_if_absent(self, result_data: dict) -> QuizResult:
        """
        Insert a result, relying on the (quiz_id, student_id) unique constraint.

        Raises DuplicateError when another attempt already exists, including
        the case where a concurrent request won the race after our own
        advisory check.
        """
        db_result = QuizResult(**result_data)
        self.db.add(db_result)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(
                f"Duplicate result rejected by storage: quiz={result_data.get('quiz_id')} "
                f"student={result_data.get('student_id')}"
            )
            raise DuplicateError("You have already submitted this quiz.")
        except Exception as e:
            # Driver-level errors such as OverflowError are not SQLAlchemyError
            self.db.rollback()
            logger.exception(f"Failed to persist quiz result: {e}")
            raise PersistenceError("Failed to save quiz result. Please try again.")
        self.db.refresh(db_result)
        return db_result

    def get_by_quiz(self, quiz_id: int) -> List[QuizResult]:
        """Get all results of a quiz"""
        return (
            self.db.query(QuizResult)
            .filter(QuizResult.quiz_id == quiz_id)
            .order_by(QuizResult.submission_date.asc(), QuizResult.id.asc())
            .all()
        )

    def get_by_class(self, class_id: str) -> List[QuizResult]:
        """Get all results recorded for quizzes of a class"""
        return (
            self.db.query(QuizResult)
            .filter(QuizResult.class_id == class_id)
            .order_by(QuizResult.submission_date.asc(), QuizResult.id.asc())
            .all()
        )

    def get_latest_by_class(self, class_id: str) -> Optional[QuizResult]:
        """Get the most recent submission in a class"""
        return (
            self.db.query(QuizResult)
            .filter(QuizResult.class_id == class_id)
            .order_by(QuizResult.submission_date.desc(), QuizResult.id.desc())
            .first()
        )

    def count_by_quiz(self, quiz_id: int) -> int:
        return (
            self.db.query(func.count(QuizResult.id))
            .filter(QuizResult.quiz_id == quiz_id)
            .scalar()
        )

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from quizrank.core.config import settings
from quizrank.core.constants import DEFAULT_EXAM_DURATION_MINUTES
from quizrank.core.exceptions import NotFoundError, StateError
from quizrank.core.timeutils import ensure_utc, utcnow
from quizrank.domain.session_domain import SessionDomain, SessionStatus
from quizrank.models.quiz import Quiz
from quizrank.repositories.quiz_repository import QuizRepository
from quizrank.repositories.result_repository import ResultRepository
from quizrank.schemas.session import (
    ActiveExamSession,
    ActiveExamSessionsResponse,
    ExamEndResponse,
    ExamStartResponse,
    ExamStatus,
    SessionStatusResponse,
)

logger = logging.getLogger(__name__)


class SessionService:
    """
    Quiz session lifecycle.

    There is no background scheduler: every read or write path calls
    ``evaluate_status``, which derives attemptability from the stored
    timestamps and persists an overdue ``active -> ended`` transition on the
    way. The stored ``exam_status`` is only authoritative right after such a
    call.
    """

    def __init__(self, db: Session, grace_seconds: Optional[int] = None):
        self.db = db
        self.quiz_repository = QuizRepository(db)
        self.result_repository = ResultRepository(db)
        self.grace_seconds = (
            settings.EXAM_GRACE_WINDOW_SECONDS if grace_seconds is None else grace_seconds
        )

    def _get_quiz(self, quiz_id: int) -> Quiz:
        quiz = self.quiz_repository.get_by_id(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found.", code="QUIZ_NOT_FOUND")
        return quiz

    def evaluate_status(
        self, quiz: Quiz, now: Optional[datetime] = None, student_id: Optional[str] = None
    ) -> SessionStatus:
        """Evaluate attemptability, persisting lazy expiry when it is due"""
        now = ensure_utc(now) or utcnow()
        status = SessionDomain.evaluate(quiz, now, self.grace_seconds)

        if status.needs_expiry:
            # Idempotent: only matches while the row is still active
            if self.quiz_repository.transition_exam_status(
                quiz.id, [ExamStatus.ACTIVE.value], {"exam_status": ExamStatus.ENDED.value}
            ):
                logger.info(f"Exam for quiz {quiz.id} expired; status set to ended")

        if student_id and status.can_attempt:
            if self.result_repository.get_by_quiz_and_student(quiz.id, student_id):
                status.can_attempt = False
                status.message = "You have already completed this quiz."

        return status

    def check_status(
        self, quiz_id: int, student_id: Optional[str] = None, now: Optional[datetime] = None
    ) -> SessionStatusResponse:
        quiz = self._get_quiz(quiz_id)
        status = self.evaluate_status(quiz, now, student_id)
        return SessionStatusResponse(
            quiz_id=quiz.id,
            is_exam_mode=quiz.is_exam_mode,
            exam_status=status.status,
            can_attempt=status.can_attempt,
            seconds_remaining=status.seconds_remaining,
            within_grace=status.within_grace,
            message=status.message,
        )

    def start_exam(
        self,
        quiz_id: int,
        exam_duration_minutes: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> ExamStartResponse:
        """Open the shared exam window; legal only from ``scheduled``"""
        now = ensure_utc(now) or utcnow()
        quiz = self._get_quiz(quiz_id)

        if not quiz.is_exam_mode:
            raise StateError("This quiz is not an exam.", code="NOT_EXAM_MODE")
        if not quiz.is_active:
            raise StateError("This quiz is not available.", code="QUIZ_INACTIVE")
        if quiz.exam_status == ExamStatus.ACTIVE.value:
            raise StateError("This exam has already started.", code="EXAM_ALREADY_STARTED")
        if quiz.exam_status == ExamStatus.ENDED.value:
            raise StateError("This exam has already ended.", code="EXAM_ALREADY_ENDED")

        duration = (
            exam_duration_minutes
            or quiz.exam_duration_minutes
            or DEFAULT_EXAM_DURATION_MINUTES
        )
        end_time = now + timedelta(minutes=duration)

        started = self.quiz_repository.transition_exam_status(
            quiz.id,
            [ExamStatus.SCHEDULED.value],
            {
                "exam_status": ExamStatus.ACTIVE.value,
                "exam_start_time": now,
                "exam_end_time": end_time,
                "exam_duration_minutes": duration,
            },
        )
        if not started:
            raise StateError("This exam has already started.", code="EXAM_ALREADY_STARTED")

        logger.info(f"Exam session started for quiz {quiz.id}: {duration} minutes, ends {end_time.isoformat()}")
        return ExamStartResponse(
            quiz_id=quiz.id,
            exam_status=ExamStatus.ACTIVE,
            exam_start_time=now,
            exam_end_time=end_time,
            exam_duration_minutes=duration,
        )

    def end_exam(self, quiz_id: int, now: Optional[datetime] = None) -> ExamEndResponse:
        """
        Close an exam early.

        An active exam's end time is pulled forward to ``now`` so the grace
        window still covers submissions already in flight.
        """
        now = ensure_utc(now) or utcnow()
        quiz = self._get_quiz(quiz_id)

        if not quiz.is_exam_mode:
            raise StateError("This quiz is not an exam.", code="NOT_EXAM_MODE")

        self.evaluate_status(quiz, now)
        current_status = quiz.exam_status
        if current_status == ExamStatus.ENDED.value:
            raise StateError("This exam has already ended.", code="EXAM_ALREADY_ENDED")

        update_data = {"exam_status": ExamStatus.ENDED.value}
        end_time = ensure_utc(quiz.exam_end_time)
        if current_status == ExamStatus.ACTIVE.value:
            end_time = min(end_time, now) if end_time else now
            update_data["exam_end_time"] = end_time

        if not self.quiz_repository.transition_exam_status(
            quiz.id, [current_status], update_data
        ):
            raise StateError("This exam has already ended.", code="EXAM_ALREADY_ENDED")

        logger.info(f"Exam session ended for quiz {quiz.id}")
        return ExamEndResponse(
            quiz_id=quiz.id, exam_status=ExamStatus.ENDED, exam_end_time=end_time
        )

    def active_sessions(
        self, class_id: str, now: Optional[datetime] = None
    ) -> ActiveExamSessionsResponse:
        """Exams of a class whose window is open right now"""
        now = ensure_utc(now) or utcnow()
        sessions = []

        for quiz in self.quiz_repository.get_exams_by_class_and_status(
            class_id, ExamStatus.ACTIVE.value
        ):
            status = self.evaluate_status(quiz, now)
            if not status.can_attempt:
                continue
            sessions.append(
                ActiveExamSession(
                    quiz_id=quiz.id,
                    lecture_title=quiz.lecture_title,
                    exam_start_time=ensure_utc(quiz.exam_start_time),
                    exam_end_time=ensure_utc(quiz.exam_end_time),
                    exam_duration_minutes=quiz.exam_duration_minutes,
                    participant_count=self.result_repository.count_by_quiz(quiz.id),
                    seconds_remaining=status.seconds_remaining or 0,
                )
            )

        logger.info(f"Found {len(sessions)} active exam sessions for class {class_id}")
        return ActiveExamSessionsResponse(
            class_id=class_id, sessions=sessions, total_active_sessions=len(sessions)
        )

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from quizrank.core.timeutils import ensure_utc
from quizrank.models.quiz import Quiz
from quizrank.schemas.session import ExamStatus


@dataclass
class SessionStatus:
    """Attemptability of a quiz at a given instant"""

    status: Optional[str]
    can_attempt: bool
    seconds_remaining: Optional[int]
    message: str
    within_grace: bool = False
    needs_expiry: bool = False


class SessionDomain:
    """
    Pure evaluation of the quiz session state machine.

    Plain quizzes are open while active. Exam quizzes move
    scheduled -> active -> ended; an active exam whose end time has passed is
    reported as ended with ``needs_expiry`` set so the caller can persist the
    transition. Nothing here touches storage.
    """

    @staticmethod
    def is_within_grace(quiz: Quiz, now: datetime, grace_seconds: int) -> bool:
        """
        True until ``grace_seconds`` after a started exam's end time.

        There is no lower bound: a submission stamped at or before the end
        time but handled after a manual end is still in flight.
        """
        start_time = ensure_utc(quiz.exam_start_time)
        end_time = ensure_utc(quiz.exam_end_time)
        if start_time is None or end_time is None:
            return False
        return now <= end_time + timedelta(seconds=grace_seconds)

    @staticmethod
    def evaluate(quiz: Quiz, now: datetime, grace_seconds: int) -> SessionStatus:
        now = ensure_utc(now)

        if not quiz.is_active:
            return SessionStatus(
                status=quiz.exam_status,
                can_attempt=False,
                seconds_remaining=None,
                message="This quiz is not available.",
            )

        if not quiz.is_exam_mode:
            return SessionStatus(
                status=None,
                can_attempt=True,
                seconds_remaining=None,
                message="Quiz is open.",
            )

        status = quiz.exam_status
        end_time = ensure_utc(quiz.exam_end_time)

        if status == ExamStatus.SCHEDULED.value:
            return SessionStatus(
                status=status,
                can_attempt=False,
                seconds_remaining=None,
                message="This exam has not started yet. Please wait for your instructor to start the exam.",
            )

        if status == ExamStatus.ACTIVE.value:
            if end_time is not None and now > end_time:
                return SessionStatus(
                    status=ExamStatus.ENDED.value,
                    can_attempt=False,
                    seconds_remaining=0,
                    message="The exam time has expired.",
                    within_grace=SessionDomain.is_within_grace(quiz, now, grace_seconds),
                    needs_expiry=True,
                )
            remaining = None
            if end_time is not None:
                remaining = max(0, math.floor((end_time - now).total_seconds()))
            return SessionStatus(
                status=status,
                can_attempt=True,
                seconds_remaining=remaining,
                message="Exam is in progress.",
            )

        if status == ExamStatus.ENDED.value:
            return SessionStatus(
                status=status,
                can_attempt=False,
                seconds_remaining=0,
                message="This exam has ended. You can no longer take this quiz.",
                within_grace=SessionDomain.is_within_grace(quiz, now, grace_seconds),
            )

        return SessionStatus(
            status=status,
            can_attempt=False,
            seconds_remaining=None,
            message="This exam is not available for taking at this time.",
        )

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from quizrank.core.exceptions import (
    AuthorizationError,
    DuplicateError,
    NotFoundError,
    StateError,
)
from quizrank.core.timeutils import ensure_utc, utcnow
from quizrank.domain.quiz_domain import QuizDomain
from quizrank.domain.scoring_domain import ScoringEngine
from quizrank.models.quiz import Quiz
from quizrank.repositories.enrollment_repository import EnrollmentRepository
from quizrank.repositories.quiz_repository import QuizRepository
from quizrank.repositories.result_repository import ResultRepository
from quizrank.schemas.session import ExamStatus
from quizrank.schemas.submission import (
    AntiCheatData,
    AntiCheatSummary,
    AnswerDetail,
    ResultDetailResponse,
    ResultQuestionDetail,
    SubmissionRequest,
    SubmissionResponse,
    SubmissionType,
)
from quizrank.services.session import SessionService

logger = logging.getLogger(__name__)


class SubmissionService:
    """
    Accepts quiz attempts.

    Checks run in a fixed order and fail fast: quiz exists and is active,
    exam window (with grace), enrollment, then an advisory duplicate check.
    The advisory check only produces a friendlier error; the database's
    unique (quiz_id, student_id) constraint is what guarantees a single
    result per student.
    """

    def __init__(self, db: Session, grace_seconds: Optional[int] = None):
        self.db = db
        self.quiz_repository = QuizRepository(db)
        self.result_repository = ResultRepository(db)
        self.enrollment_repository = EnrollmentRepository(db)
        self.session_service = SessionService(db, grace_seconds=grace_seconds)

    def submit(
        self,
        quiz_id: int,
        student_id: str,
        request: SubmissionRequest,
        now: Optional[datetime] = None,
    ) -> SubmissionResponse:
        now = ensure_utc(now) or utcnow()

        quiz = self.quiz_repository.get_by_id(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found for scoring.", code="QUIZ_NOT_FOUND")
        if not quiz.is_active:
            raise StateError("This quiz is not available.", code="QUIZ_INACTIVE")

        if quiz.is_exam_mode:
            self._check_exam_window(quiz, now)

        if quiz.class_id and not self.enrollment_repository.is_enrolled(
            student_id, quiz.class_id
        ):
            raise AuthorizationError(
                "You are not enrolled in the class for this quiz.", code="NOT_ENROLLED"
            )

        if self.result_repository.get_by_quiz_and_student(quiz.id, student_id):
            raise DuplicateError("You have already submitted this quiz.")

        scored = ScoringEngine.score(quiz.questions, request.answers)
        anti_cheat = request.anti_cheat_data or AntiCheatData()
        submission_type = self.classify_submission(
            quiz.is_exam_mode, anti_cheat, request.exam_time_remaining
        )
        anti_cheat_metadata = self.build_anti_cheat_metadata(anti_cheat, submission_type)

        result = self.result_repository.insert_if_absent(
            {
                "quiz_id": quiz.id,
                "class_id": quiz.class_id,
                "student_id": student_id,
                "score": scored.score,
                "total_questions": scored.total_questions,
                "percentage": scored.percentage,
                "time_taken_seconds": request.time_taken_seconds,
                "submission_date": now,
                "answers": scored.detailed_answers,
                "submission_type": submission_type.value,
                "was_exam_mode": bool(quiz.is_exam_mode),
                "exam_time_remaining": request.exam_time_remaining,
                "anti_cheat_metadata": anti_cheat_metadata,
            }
        )

        mode_text = "exam" if quiz.is_exam_mode else "quiz"
        logger.info(
            f"{mode_text} result saved for student {student_id}: "
            f"Score {scored.score}/{scored.total_questions} ({anti_cheat_metadata['security_status']})"
        )

        return SubmissionResponse(
            result_id=result.id,
            quiz_id=quiz.id,
            student_id=student_id,
            score=result.score,
            total_questions=result.total_questions,
            percentage=result.percentage,
            time_taken_seconds=result.time_taken_seconds,
            submission_type=submission_type,
            submission_date=ensure_utc(result.submission_date),
            answers=[AnswerDetail(**detail) for detail in scored.detailed_answers],
            anti_cheat_summary=AntiCheatSummary(**anti_cheat_metadata),
            message=(
                "Quiz auto-submitted and scored successfully!"
                if submission_type != SubmissionType.MANUAL
                else "Quiz submitted and scored successfully!"
            ),
        )

    def get_result(self, result_id: int, student_id: str) -> ResultDetailResponse:
        """Per-question review of a stored attempt, for its own student only"""
        result = self.result_repository.get_by_id(result_id)
        if not result:
            raise NotFoundError("Result not found.", code="RESULT_NOT_FOUND")
        if result.student_id != student_id:
            raise AuthorizationError(
                "You can only view your own results.", code="NOT_RESULT_OWNER"
            )

        quiz = self.quiz_repository.get_by_id(result.quiz_id)
        answered = {a["question_index"]: a for a in (result.answers or [])}

        questions = []
        for index, question in enumerate(quiz.questions or []):
            selected = answered.get(index, {}).get("selected_option")
            correct = question["correct_answer"]
            is_correct = selected == correct
            explanation = None
            if selected and not is_correct:
                explanation = QuizDomain.explain(question, selected).text
            questions.append(
                ResultQuestionDetail(
                    question_index=index,
                    question=question["question"],
                    options=question["options"],
                    selected_option=selected,
                    correct_option=correct,
                    is_correct=is_correct,
                    explanation=explanation,
                )
            )

        return ResultDetailResponse(
            result_id=result.id,
            quiz_id=result.quiz_id,
            lecture_title=quiz.lecture_title,
            student_id=result.student_id,
            score=result.score,
            total_questions=result.total_questions,
            percentage=result.percentage,
            time_taken_seconds=result.time_taken_seconds,
            submission_type=result.submission_type,
            submission_date=ensure_utc(result.submission_date),
            was_exam_mode=result.was_exam_mode,
            questions=questions,
        )

    def _check_exam_window(self, quiz: Quiz, now: datetime) -> None:
        status = self.session_service.evaluate_status(quiz, now)
        if status.can_attempt:
            return
        if status.within_grace:
            # Client timers and the server clock drift by a few seconds
            logger.info(f"Accepting submission for quiz {quiz.id} within grace period after exam expiry")
            return
        if status.status == ExamStatus.SCHEDULED.value:
            raise StateError(
                "This exam has not started yet. Submission not allowed.",
                code="EXAM_NOT_STARTED",
            )
        raise StateError(
            "The exam time has expired. Submission not allowed.", code="EXAM_ENDED"
        )

    @staticmethod
    def classify_submission(
        is_exam_mode: bool,
        anti_cheat: AntiCheatData,
        exam_time_remaining: Optional[int] = None,
    ) -> SubmissionType:
        if is_exam_mode:
            if anti_cheat.was_auto_submitted:
                return SubmissionType.AUTO_EXAM_TIMER
            if exam_time_remaining is not None and exam_time_remaining <= 0:
                return SubmissionType.AUTO_EXAM_TIMER
            return SubmissionType.MANUAL
        if anti_cheat.was_auto_submitted:
            return SubmissionType.AUTO_QUIZ_TIMER
        return SubmissionType.MANUAL

    @staticmethod
    def security_status(violation_count: int) -> str:
        if violation_count == 0:
            return "Clean"
        if violation_count == 1:
            return "Warning"
        return "Violation"

    @staticmethod
    def build_anti_cheat_metadata(
        anti_cheat: AntiCheatData, submission_type: SubmissionType
    ) -> dict:
        """Advisory record of client telemetry; never used to gate anything"""
        if submission_type == SubmissionType.AUTO_EXAM_TIMER:
            source = "Exam-Timer-Submit"
        elif anti_cheat.was_auto_submitted:
            source = "Auto-Submit"
        else:
            source = "Manual"
        return {
            "violation_count": anti_cheat.violation_count,
            "was_auto_submitted": anti_cheat.was_auto_submitted,
            "grace_periods_used": anti_cheat.grace_periods_used,
            "security_status": SubmissionService.security_status(anti_cheat.violation_count),
            "submission_source": source,
        }

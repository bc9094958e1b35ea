import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from quizrank.core.config import settings
from quizrank.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    StateError,
    ValidationError,
)
from quizrank.domain.quiz_domain import QuizDomain
from quizrank.models.quiz import Quiz
from quizrank.repositories.quiz_repository import QuizRepository
from quizrank.repositories.result_repository import ResultRepository
from quizrank.schemas.quiz import (
    ExplanationRequest,
    ExplanationResponse,
    QuizCreatedResponse,
    QuizGenerateRequest,
    StudentQuizResponse,
)
from quizrank.schemas.session import ExamStatus
from quizrank.services.session import SessionService

logger = logging.getLogger(__name__)


class QuizService:
    def __init__(self, db: Session, generator=None):
        self.db = db
        self.quiz_repository = QuizRepository(db)
        self.result_repository = ResultRepository(db)
        self.session_service = SessionService(db)
        self._generator = generator

    @property
    def generator(self):
        """Question generator, built on first use so reads never need credentials"""
        if self._generator is None:
            from quizrank.agents.question_agent import QuestionAgent

            self._generator = QuestionAgent()
        return self._generator

    def _get_quiz(self, quiz_id: int) -> Quiz:
        quiz = self.quiz_repository.get_by_id(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found.", code="QUIZ_NOT_FOUND")
        return quiz

    def create_quiz(self, request: QuizGenerateRequest) -> QuizCreatedResponse:
        """Generate questions from lecture text and persist the quiz"""
        lecture_text = request.lecture_text
        if len(lecture_text) < settings.MIN_LECTURE_TEXT_LENGTH:
            raise ValidationError(
                "Insufficient text content in the lecture to generate a quiz.",
                code="LECTURE_TEXT_TOO_SHORT",
            )
        if len(lecture_text) > settings.LECTURE_TEXT_LIMIT:
            logger.info(
                f"Lecture text truncated from {len(lecture_text)} to {settings.LECTURE_TEXT_LIMIT} characters"
            )
            lecture_text = lecture_text[: settings.LECTURE_TEXT_LIMIT]

        logger.info(
            f"Generating {request.question_count} questions "
            f"({'exam' if request.is_exam_mode else 'practice'} mode)"
        )
        raw_questions = self.generator.generate(
            lecture_text,
            request.question_count,
            request.duration_minutes,
            exam_duration_minutes=(
                request.exam_duration_minutes if request.is_exam_mode else None
            ),
        )
        questions = QuizDomain.normalize_questions(raw_questions, request.question_count)

        quiz = self.quiz_repository.create(
            {
                "class_id": request.class_id,
                "lecture_title": request.lecture_title,
                "total_questions": len(questions),
                "duration_minutes": request.duration_minutes,
                "questions": questions,
                "is_active": True,
                "is_exam_mode": request.is_exam_mode,
                "exam_status": ExamStatus.SCHEDULED.value if request.is_exam_mode else None,
                "exam_duration_minutes": (
                    request.exam_duration_minutes if request.is_exam_mode else None
                ),
            }
        )
        logger.info(f"Quiz {quiz.id} saved with {quiz.total_questions} questions")

        return QuizCreatedResponse(
            quiz_id=quiz.id,
            class_id=quiz.class_id,
            lecture_title=quiz.lecture_title,
            total_questions=quiz.total_questions,
            duration_minutes=quiz.duration_minutes,
            duration_seconds=quiz.duration_minutes * 60,
            is_exam_mode=quiz.is_exam_mode,
            exam_duration_minutes=quiz.exam_duration_minutes,
            exam_status=quiz.exam_status,
            message=(
                f"Exam created with {quiz.total_questions} questions. "
                "Start the exam session to open it to students."
                if quiz.is_exam_mode
                else f"Quiz generated with {quiz.total_questions} questions."
            ),
        )

    def get_quiz_for_student(
        self, quiz_id: int, now: Optional[datetime] = None
    ) -> StudentQuizResponse:
        """Questions without answers, only while the quiz can be attempted"""
        quiz = self._get_quiz(quiz_id)
        if not quiz.is_active:
            raise StateError("This quiz is not available.", code="QUIZ_INACTIVE")

        if quiz.is_exam_mode:
            status = self.session_service.evaluate_status(quiz, now)
            if not status.can_attempt:
                if status.status == ExamStatus.SCHEDULED.value:
                    raise StateError(status.message, code="EXAM_NOT_STARTED")
                raise StateError(status.message, code="EXAM_ENDED")

        return QuizDomain.to_student_view(quiz)

    def get_explanation(
        self, quiz_id: int, student_id: str, request: ExplanationRequest
    ) -> ExplanationResponse:
        """Explanation for a wrong answer; only after the student has submitted"""
        quiz = self._get_quiz(quiz_id)

        questions = quiz.questions or []
        if request.question_index >= len(questions):
            raise NotFoundError("Question not found.", code="QUESTION_NOT_FOUND")

        if not self.result_repository.get_by_quiz_and_student(quiz.id, student_id):
            raise AuthorizationError(
                "Explanations are available after you submit this quiz.",
                code="NO_ATTEMPT",
            )

        question = questions[request.question_index]
        explanation = QuizDomain.explain(question, request.wrong_answer)
        correct = question["correct_answer"]

        return ExplanationResponse(
            quiz_id=quiz.id,
            question_index=request.question_index,
            explanation=explanation.text,
            explanation_type=explanation.explanation_type,
            correct_answer=correct,
            correct_option=question["options"].get(correct, ""),
            wrong_option=question["options"].get(request.wrong_answer),
        )

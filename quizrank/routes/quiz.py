import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from quizrank.core.database import get_db
from quizrank.core.exceptions import QuizRankError
from quizrank.core.identity import get_optional_student_id, get_student_id
from quizrank.schemas.quiz import (
    ExplanationRequest,
    ExplanationResponse,
    QuizCreatedResponse,
    QuizGenerateRequest,
    StudentQuizResponse,
)
from quizrank.schemas.session import SessionStatusResponse
from quizrank.schemas.submission import SubmissionRequest, SubmissionResponse
from quizrank.services.quiz import QuizService
from quizrank.services.session import SessionService
from quizrank.services.submission import SubmissionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quizzes", tags=["quiz"])


@router.post(
    "",
    response_model=QuizCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_quiz(request: QuizGenerateRequest, db: Session = Depends(get_db)):
    """
    Generate a quiz from extracted lecture text

    Exam-mode quizzes are created in the scheduled state and have to be
    started through the exam-sessions endpoints.
    """
    try:
        service = QuizService(db)
        return service.create_quiz(request)
    except QuizRankError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception(f"Quiz generation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate quiz",
        )


@router.get("/{quiz_id}", response_model=StudentQuizResponse)
def get_quiz(quiz_id: int, db: Session = Depends(get_db)):
    try:
        service = QuizService(db)
        return service.get_quiz_for_student(quiz_id)
    except QuizRankError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception(f"Failed to load quiz {quiz_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load quiz",
        )


@router.get("/{quiz_id}/status", response_model=SessionStatusResponse)
def get_quiz_status(
    quiz_id: int,
    db: Session = Depends(get_db),
    student_id: Optional[str] = Depends(get_optional_student_id),
):
    """Whether the quiz can be attempted right now"""
    try:
        service = SessionService(db)
        return service.check_status(quiz_id, student_id)
    except QuizRankError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception(f"Failed to check status of quiz {quiz_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check quiz status",
        )


@router.post(
    "/{quiz_id}/submit",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
def submit_quiz(
    quiz_id: int,
    request: SubmissionRequest,
    db: Session = Depends(get_db),
    student_id: str = Depends(get_student_id),
):
    try:
        service = SubmissionService(db)
        return service.submit(quiz_id, student_id, request)
    except QuizRankError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception(f"Submission failed for quiz {quiz_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit quiz",
        )


@router.post("/{quiz_id}/explanation", response_model=ExplanationResponse)
def get_wrong_answer_explanation(
    quiz_id: int,
    request: ExplanationRequest,
    db: Session = Depends(get_db),
    student_id: str = Depends(get_student_id),
):
    """Pre-generated explanation for a wrong answer, available after submitting"""
    try:
        service = QuizService(db)
        return service.get_explanation(quiz_id, student_id, request)
    except QuizRankError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception(f"Failed to load explanation for quiz {quiz_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load explanation",
        )

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from quizrank.core.database import get_db
from quizrank.core.exceptions import QuizRankError
from quizrank.schemas.session import (
    ActiveExamSessionsResponse,
    ExamEndResponse,
    ExamStartRequest,
    ExamStartResponse,
)
from quizrank.services.session import SessionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/exam-sessions", tags=["exam-sessions"])


@router.post("/start/{quiz_id}", response_model=ExamStartResponse)
def start_exam_session(
    quiz_id: int,
    request: Optional[ExamStartRequest] = Body(None),
    db: Session = Depends(get_db),
):
    """
    Start the shared exam window of an exam-mode quiz

    Only a scheduled exam can be started; a second start is rejected.
    """
    try:
        service = SessionService(db)
        return service.start_exam(
            quiz_id, request.exam_duration_minutes if request else None
        )
    except QuizRankError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception(f"Failed to start exam session for quiz {quiz_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to start exam session",
        )


@router.post("/end/{quiz_id}", response_model=ExamEndResponse)
def end_exam_session(quiz_id: int, db: Session = Depends(get_db)):
    """End an exam session early"""
    try:
        service = SessionService(db)
        return service.end_exam(quiz_id)
    except QuizRankError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception(f"Failed to end exam session for quiz {quiz_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to end exam session",
        )


@router.get("/active/{class_id}", response_model=ActiveExamSessionsResponse)
def get_active_exam_sessions(class_id: str, db: Session = Depends(get_db)):
    try:
        service = SessionService(db)
        return service.active_sessions(class_id)
    except QuizRankError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception(f"Failed to load active exam sessions for class {class_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load active exam sessions",
        )

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from quizrank.core.config import settings
from quizrank.core.constants import MAX_TOP_RANKERS
from quizrank.core.database import get_db
from quizrank.core.exceptions import QuizRankError
from quizrank.core.identity import get_optional_student_id
from quizrank.schemas.ranking import (
    ClassRankingsResponse,
    LastQuizRankingsResponse,
    QuizRankingsResponse,
    QuizStatisticsResponse,
)
from quizrank.services.ranking import RankingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["rankings"])


@router.get("/classes/{class_id}/rankings", response_model=ClassRankingsResponse)
def get_class_rankings(class_id: str, db: Session = Depends(get_db)):
    """
    Participation-weighted class leaderboard

    base = score * 0.7 + time efficiency * 0.3, scaled by
    0.3 + 0.7 * participation rate.
    """
    try:
        service = RankingService(db)
        return service.class_rankings(class_id)
    except QuizRankError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception(f"Failed to compute rankings for class {class_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute class rankings",
        )


@router.get(
    "/classes/{class_id}/last-quiz-rankings", response_model=LastQuizRankingsResponse
)
def get_last_quiz_rankings(class_id: str, db: Session = Depends(get_db)):
    try:
        service = RankingService(db)
        return service.last_quiz_rankings(class_id)
    except QuizRankError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception(f"Failed to compute last quiz rankings for class {class_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute last quiz rankings",
        )


@router.get("/quizzes/{quiz_id}/rankings", response_model=QuizRankingsResponse)
def get_quiz_rankings(
    quiz_id: int,
    top_n: int = Query(settings.QUIZ_TOP_RANKERS, ge=1, le=MAX_TOP_RANKERS),
    db: Session = Depends(get_db),
    student_id: Optional[str] = Depends(get_optional_student_id),
):
    try:
        service = RankingService(db)
        return service.quiz_rankings(quiz_id, top_n=top_n, student_id=student_id)
    except QuizRankError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception(f"Failed to compute rankings for quiz {quiz_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute quiz rankings",
        )


@router.get("/quizzes/{quiz_id}/statistics", response_model=QuizStatisticsResponse)
def get_quiz_statistics(quiz_id: int, db: Session = Depends(get_db)):
    try:
        service = RankingService(db)
        return service.quiz_statistics(quiz_id)
    except QuizRankError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception(f"Failed to compute statistics for quiz {quiz_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute quiz statistics",
        )

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from quizrank.core.database import get_db
from quizrank.core.exceptions import QuizRankError
from quizrank.core.identity import get_student_id
from quizrank.schemas.submission import ResultDetailResponse
from quizrank.services.submission import SubmissionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/results", tags=["results"])


@router.get("/{result_id}", response_model=ResultDetailResponse)
def get_result_detail(
    result_id: int,
    db: Session = Depends(get_db),
    student_id: str = Depends(get_student_id),
):
    """Detailed review of a submitted attempt, visible only to its student"""
    try:
        service = SubmissionService(db)
        return service.get_result(result_id, student_id)
    except QuizRankError as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.exception(f"Failed to load result {result_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load result",
        )

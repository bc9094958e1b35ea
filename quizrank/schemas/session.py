from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from quizrank.core.constants import MAX_EXAM_DURATION_MINUTES, MIN_EXAM_DURATION_MINUTES


class ExamStatus(str, Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    ENDED = "ended"


class ExamStartRequest(BaseModel):
    exam_duration_minutes: Optional[int] = Field(
        None,
        description="Override the exam window length stored on the quiz",
        ge=MIN_EXAM_DURATION_MINUTES,
        le=MAX_EXAM_DURATION_MINUTES,
    )

    class Config:
        extra = "forbid"


class ExamStartResponse(BaseModel):
    quiz_id: int
    exam_status: ExamStatus
    exam_start_time: datetime
    exam_end_time: datetime
    exam_duration_minutes: int


class ExamEndResponse(BaseModel):
    quiz_id: int
    exam_status: ExamStatus
    exam_end_time: Optional[datetime] = None


class SessionStatusResponse(BaseModel):
    quiz_id: int
    is_exam_mode: bool
    exam_status: Optional[ExamStatus] = None
    can_attempt: bool
    seconds_remaining: Optional[int] = Field(
        None, description="Seconds until the exam window closes (exam mode only)"
    )
    within_grace: bool = False
    message: str


class ActiveExamSession(BaseModel):
    quiz_id: int
    lecture_title: Optional[str] = None
    exam_start_time: datetime
    exam_end_time: datetime
    exam_duration_minutes: int
    participant_count: int
    seconds_remaining: int


class ActiveExamSessionsResponse(BaseModel):
    class_id: str
    sessions: List[ActiveExamSession]
    total_active_sessions: int

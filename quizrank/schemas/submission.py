from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, validator

from quizrank.core.constants import MAX_TIME_SECONDS, OPTION_LETTERS


class SubmissionType(str, Enum):
    MANUAL = "manual"
    AUTO_QUIZ_TIMER = "auto_quiz_timer"
    AUTO_EXAM_TIMER = "auto_exam_timer"


class AnswerSubmission(BaseModel):
    question_index: int = Field(..., description="Zero-based question position", ge=0)
    selected_option: str = Field(..., description="One of A, B, C, D")

    @validator("selected_option")
    def validate_selected_option(cls, v):
        v = v.strip().upper()
        if v not in OPTION_LETTERS:
            raise ValueError("selected_option must be one of A, B, C, D")
        return v

    class Config:
        extra = "forbid"


class AntiCheatData(BaseModel):
    """Client-side telemetry. Recorded, never trusted."""

    violation_count: int = Field(0, ge=0)
    was_auto_submitted: bool = False
    grace_periods_used: int = Field(0, ge=0)

    class Config:
        extra = "forbid"


class SubmissionRequest(BaseModel):
    answers: List[AnswerSubmission] = Field(default_factory=list)
    time_taken_seconds: int = Field(..., ge=0, le=MAX_TIME_SECONDS)
    anti_cheat_data: Optional[AntiCheatData] = None
    exam_time_remaining: Optional[int] = Field(
        None,
        description="Client timer reading at submission (exam mode)",
        ge=-MAX_TIME_SECONDS,
        le=MAX_TIME_SECONDS,
    )

    @validator("answers")
    def validate_answers(cls, v):
        indices = [a.question_index for a in v]
        if len(indices) != len(set(indices)):
            raise ValueError("Each question may only be answered once")
        return v

    class Config:
        extra = "forbid"


class AnswerDetail(BaseModel):
    question_index: int
    selected_option: str
    correct_option: str
    is_correct: bool


class AntiCheatSummary(BaseModel):
    violation_count: int
    was_auto_submitted: bool
    grace_periods_used: int
    security_status: str
    submission_source: str


class SubmissionResponse(BaseModel):
    result_id: int
    quiz_id: int
    student_id: str
    score: int
    total_questions: int
    percentage: float
    time_taken_seconds: int
    submission_type: SubmissionType
    submission_date: datetime
    answers: List[AnswerDetail]
    anti_cheat_summary: AntiCheatSummary
    message: str


class ResultQuestionDetail(BaseModel):
    question_index: int
    question: str
    options: Dict[str, str]
    selected_option: Optional[str] = None
    correct_option: str
    is_correct: bool
    explanation: Optional[str] = Field(
        None, description="Why the selected option is wrong; empty for correct answers"
    )


class ResultDetailResponse(BaseModel):
    """A stored attempt read back by the student who made it"""

    result_id: int
    quiz_id: int
    lecture_title: Optional[str] = None
    student_id: str
    score: int
    total_questions: int
    percentage: float
    time_taken_seconds: int
    submission_type: SubmissionType
    submission_date: datetime
    was_exam_mode: bool
    questions: List[ResultQuestionDetail]

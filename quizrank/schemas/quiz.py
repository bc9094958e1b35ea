from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, validator

from quizrank.core.config import settings
from quizrank.core.constants import (
    DEFAULT_EXAM_DURATION_MINUTES,
    DEFAULT_QUESTIONS,
    MAX_EXAM_DURATION_MINUTES,
    MAX_QUESTIONS,
    MAX_QUIZ_DURATION_MINUTES,
    MIN_EXAM_DURATION_MINUTES,
    MIN_QUESTIONS,
    MIN_QUIZ_DURATION_MINUTES,
    OPTION_LETTERS,
)
from quizrank.schemas.session import ExamStatus


class QuizGenerateRequest(BaseModel):
    lecture_text: str = Field(
        ..., description="Text already extracted from the uploaded lecture", min_length=1
    )
    lecture_title: Optional[str] = Field(None, max_length=500)
    class_id: Optional[str] = Field(None, max_length=64)
    question_count: int = Field(
        DEFAULT_QUESTIONS, ge=MIN_QUESTIONS, le=MAX_QUESTIONS
    )
    duration_minutes: int = Field(
        settings.DEFAULT_QUIZ_DURATION_MINUTES,
        ge=MIN_QUIZ_DURATION_MINUTES,
        le=MAX_QUIZ_DURATION_MINUTES,
    )
    is_exam_mode: bool = False
    exam_duration_minutes: int = Field(
        DEFAULT_EXAM_DURATION_MINUTES,
        ge=MIN_EXAM_DURATION_MINUTES,
        le=MAX_EXAM_DURATION_MINUTES,
    )

    @validator("lecture_text")
    def validate_lecture_text(cls, v):
        if not v or not v.strip():
            raise ValueError("Lecture text cannot be empty")
        return v.strip()

    class Config:
        extra = "forbid"


class QuizCreatedResponse(BaseModel):
    quiz_id: int
    class_id: Optional[str] = None
    lecture_title: Optional[str] = None
    total_questions: int
    duration_minutes: int
    duration_seconds: int
    is_exam_mode: bool
    exam_duration_minutes: Optional[int] = None
    exam_status: Optional[ExamStatus] = None
    message: str


class StudentQuestion(BaseModel):
    question: str
    options: Dict[str, str]


class StudentQuizResponse(BaseModel):
    """Student-facing quiz: no answers, no explanations"""

    quiz_id: int
    class_id: Optional[str] = None
    lecture_title: Optional[str] = None
    total_questions: int
    duration_minutes: int
    duration_seconds: int
    is_exam_mode: bool
    exam_status: Optional[ExamStatus] = None
    exam_end_time: Optional[datetime] = None
    questions: List[StudentQuestion]


class ExplanationRequest(BaseModel):
    question_index: int = Field(..., ge=0)
    wrong_answer: str = Field(..., description="The option the student picked")

    @validator("wrong_answer")
    def validate_wrong_answer(cls, v):
        v = v.strip().upper()
        if v not in OPTION_LETTERS:
            raise ValueError("wrong_answer must be one of A, B, C, D")
        return v

    class Config:
        extra = "forbid"


class ExplanationResponse(BaseModel):
    quiz_id: int
    question_index: int
    explanation: str
    explanation_type: str = Field(..., description="'detailed' or 'basic'")
    correct_answer: str
    correct_option: str
    wrong_option: Optional[str] = None

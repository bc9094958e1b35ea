from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ClassRankingEntry(BaseModel):
    rank: int
    student_id: str
    student_name: Optional[str] = None
    total_quizzes: int
    average_score: float
    average_time_efficiency: float
    participation_rate: float
    base_points: float
    final_points: float
    average_time_seconds: int


class ClassRankingsResponse(BaseModel):
    class_id: str
    rankings: List[ClassRankingEntry]
    total_students: int
    total_quizzes_available: int
    formula: str = "Final Points = Base Points x (0.3 + 0.7 x Participation Rate)"
    base_formula: str = "Base Points = (Score x 0.7) + (Time Efficiency x 0.3)"


class QuizRankingEntry(BaseModel):
    rank: int
    student_id: str
    score: int
    percentage: float
    time_taken_seconds: int
    submission_date: datetime
    is_current_student: bool = False


class QuizRankingsResponse(BaseModel):
    quiz_id: int
    quiz_title: Optional[str] = None
    top_rankers: List[QuizRankingEntry]
    current_student_rank: Optional[int] = Field(
        None, description="Caller's position among all participants"
    )
    total_participants: int
    is_in_top: bool = False


class LastQuizRankingEntry(BaseModel):
    rank: int
    student_id: str
    score: float
    time_taken_seconds: int
    time_efficiency: float
    points: float
    submission_date: datetime


class LastQuizRankingsResponse(BaseModel):
    class_id: str
    quiz_id: Optional[int] = None
    quiz_title: Optional[str] = None
    quiz_date: Optional[datetime] = None
    rankings: List[LastQuizRankingEntry]


class QuizStatisticsResponse(BaseModel):
    quiz_id: int
    total_attempts: int
    average_score: float
    average_time_seconds: int
    average_efficiency: float
    fastest_completion_seconds: int
    slowest_completion_seconds: int

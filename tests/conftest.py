from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from quizrank import models  # noqa: F401
from quizrank.core.database import Base, get_db
from quizrank.main import app
from quizrank.models import Enrollment, Quiz, QuizResult

CLASS_ID = "class-101"
T0 = datetime(2025, 3, 10, 9, 0, 0, tzinfo=timezone.utc)


def build_questions(count: int = 10, correct: str = "B"):
    return [
        {
            "question": f"Question {i + 1}?",
            "options": {"A": "alpha", "B": "beta", "C": "gamma", "D": "delta"},
            "correct_answer": correct,
            "explanations": {
                letter: ("" if letter == correct else f"{letter} is not it")
                for letter in ("A", "B", "C", "D")
            },
            "correct_answer_explanation": f"{correct} matches the lecture",
        }
        for i in range(count)
    ]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_quiz(db):
    def _make_quiz(**overrides):
        data = {
            "class_id": CLASS_ID,
            "lecture_title": "Cell Biology",
            "total_questions": 10,
            "duration_minutes": 15,
            "questions": build_questions(10),
            "is_active": True,
            "is_exam_mode": False,
        }
        data.update(overrides)
        if "questions" in overrides and "total_questions" not in overrides:
            data["total_questions"] = len(overrides["questions"])
        quiz = Quiz(**data)
        db.add(quiz)
        db.commit()
        db.refresh(quiz)
        return quiz

    return _make_quiz


@pytest.fixture
def enroll(db):
    def _enroll(student_id: str, class_id: str = CLASS_ID, name: str = None, is_active=True):
        enrollment = Enrollment(
            class_id=class_id,
            student_id=student_id,
            student_name=name or student_id.title(),
            is_active=is_active,
        )
        db.add(enrollment)
        db.commit()
        return enrollment

    return _enroll


@pytest.fixture
def make_result(db):
    def _make_result(quiz, student_id: str, percentage: float, time_taken_seconds: int, **overrides):
        data = {
            "quiz_id": quiz.id,
            "class_id": quiz.class_id,
            "student_id": student_id,
            "score": round(percentage * quiz.total_questions / 100),
            "total_questions": quiz.total_questions,
            "percentage": percentage,
            "time_taken_seconds": time_taken_seconds,
            "submission_date": T0,
            "answers": [],
            "submission_type": "manual",
            "was_exam_mode": bool(quiz.is_exam_mode),
            "anti_cheat_metadata": {},
        }
        data.update(overrides)
        result = QuizResult(**data)
        db.add(result)
        db.commit()
        db.refresh(result)
        return result

    return _make_result


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def minutes_after(start: datetime, minutes: float = 0, seconds: float = 0) -> datetime:
    return start + timedelta(minutes=minutes, seconds=seconds)

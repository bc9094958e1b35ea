import pytest

from conftest import CLASS_ID, T0, minutes_after
from quizrank.core.exceptions import NotFoundError, StateError
from quizrank.core.timeutils import ensure_utc
from quizrank.schemas.session import ExamStatus
from quizrank.services.session import SessionService


@pytest.fixture
def service(db):
    return SessionService(db, grace_seconds=5)


@pytest.fixture
def exam(make_quiz):
    return make_quiz(
        is_exam_mode=True,
        exam_status=ExamStatus.SCHEDULED.value,
        exam_duration_minutes=30,
    )


class TestStartExam:
    def test_start_opens_window(self, service, exam, db):
        response = service.start_exam(exam.id, now=T0)

        assert response.exam_status == ExamStatus.ACTIVE
        assert response.exam_start_time == T0
        assert response.exam_end_time == minutes_after(T0, 30)
        assert response.exam_duration_minutes == 30

        db.refresh(exam)
        assert exam.exam_status == ExamStatus.ACTIVE.value
        assert ensure_utc(exam.exam_end_time) == minutes_after(T0, 30)

    def test_duration_override(self, service, exam):
        response = service.start_exam(exam.id, exam_duration_minutes=45, now=T0)

        assert response.exam_end_time == minutes_after(T0, 45)
        assert response.exam_duration_minutes == 45

    def test_start_twice_rejected(self, service, exam):
        service.start_exam(exam.id, now=T0)

        with pytest.raises(StateError) as exc_info:
            service.start_exam(exam.id, now=minutes_after(T0, 1))
        assert exc_info.value.code == "EXAM_ALREADY_STARTED"

    def test_start_plain_quiz_rejected(self, service, make_quiz):
        quiz = make_quiz()

        with pytest.raises(StateError) as exc_info:
            service.start_exam(quiz.id, now=T0)
        assert exc_info.value.code == "NOT_EXAM_MODE"

    def test_start_inactive_exam_rejected(self, service, make_quiz):
        quiz = make_quiz(is_exam_mode=True, exam_status="scheduled", is_active=False)

        with pytest.raises(StateError) as exc_info:
            service.start_exam(quiz.id, now=T0)
        assert exc_info.value.code == "QUIZ_INACTIVE"

    def test_start_unknown_quiz(self, service):
        with pytest.raises(NotFoundError):
            service.start_exam(999, now=T0)


class TestCheckStatus:
    def test_plain_quiz_is_open(self, service, make_quiz):
        quiz = make_quiz()

        status = service.check_status(quiz.id, now=T0)

        assert status.can_attempt is True
        assert status.exam_status is None
        assert status.seconds_remaining is None

    def test_scheduled_exam_not_attemptable(self, service, exam):
        status = service.check_status(exam.id, now=T0)

        assert status.can_attempt is False
        assert status.exam_status == ExamStatus.SCHEDULED

    def test_active_exam_reports_floor_of_remaining(self, service, exam):
        service.start_exam(exam.id, now=T0)

        status = service.check_status(exam.id, now=minutes_after(T0, 10, seconds=0.4))

        assert status.can_attempt is True
        assert status.exam_status == ExamStatus.ACTIVE
        assert status.seconds_remaining == 20 * 60 - 1

    def test_lazy_expiry_persists_ended(self, service, exam, db):
        service.start_exam(exam.id, now=T0)

        status = service.check_status(exam.id, now=minutes_after(T0, 30, seconds=6))

        assert status.can_attempt is False
        assert status.exam_status == ExamStatus.ENDED
        assert status.within_grace is False
        db.refresh(exam)
        assert exam.exam_status == ExamStatus.ENDED.value

    def test_expiry_inside_grace_window(self, service, exam):
        service.start_exam(exam.id, now=T0)

        status = service.check_status(exam.id, now=minutes_after(T0, 30, seconds=3))

        assert status.can_attempt is False
        assert status.within_grace is True

    def test_repeated_evaluation_is_idempotent(self, service, exam, db):
        service.start_exam(exam.id, now=T0)
        later = minutes_after(T0, 45)

        first = service.check_status(exam.id, now=later)
        second = service.check_status(exam.id, now=later)

        assert first.exam_status == second.exam_status == ExamStatus.ENDED

    def test_student_with_result_cannot_attempt(self, service, make_quiz, make_result):
        quiz = make_quiz()
        make_result(quiz, "s1", 80.0, 300)

        assert service.check_status(quiz.id, student_id="s1", now=T0).can_attempt is False
        assert service.check_status(quiz.id, student_id="s2", now=T0).can_attempt is True

    def test_inactive_quiz(self, service, make_quiz):
        quiz = make_quiz(is_active=False)

        assert service.check_status(quiz.id, now=T0).can_attempt is False


class TestEndExam:
    def test_end_active_exam_pulls_end_time_forward(self, service, exam, db):
        service.start_exam(exam.id, now=T0)
        ended_at = minutes_after(T0, 10)

        response = service.end_exam(exam.id, now=ended_at)

        assert response.exam_status == ExamStatus.ENDED
        assert response.exam_end_time == ended_at
        db.refresh(exam)
        assert exam.exam_status == ExamStatus.ENDED.value
        assert ensure_utc(exam.exam_end_time) == ended_at

    def test_end_scheduled_exam(self, service, exam):
        response = service.end_exam(exam.id, now=T0)

        assert response.exam_status == ExamStatus.ENDED
        assert response.exam_end_time is None

    def test_end_twice_rejected(self, service, exam):
        service.start_exam(exam.id, now=T0)
        service.end_exam(exam.id, now=minutes_after(T0, 5))

        with pytest.raises(StateError) as exc_info:
            service.end_exam(exam.id, now=minutes_after(T0, 6))
        assert exc_info.value.code == "EXAM_ALREADY_ENDED"

    def test_cannot_restart_ended_exam(self, service, exam):
        service.end_exam(exam.id, now=T0)

        with pytest.raises(StateError) as exc_info:
            service.start_exam(exam.id, now=minutes_after(T0, 1))
        assert exc_info.value.code == "EXAM_ALREADY_ENDED"


class TestActiveSessions:
    def test_lists_only_open_exams(self, service, make_quiz, make_result):
        running = make_quiz(is_exam_mode=True, exam_status="scheduled", exam_duration_minutes=30)
        overdue = make_quiz(is_exam_mode=True, exam_status="scheduled", exam_duration_minutes=5)
        make_quiz(is_exam_mode=True, exam_status="scheduled")
        make_quiz(is_exam_mode=True, exam_status="scheduled", class_id="other-class")

        service.start_exam(running.id, now=T0)
        service.start_exam(overdue.id, now=T0)
        make_result(running, "s1", 90.0, 120)

        response = service.active_sessions(CLASS_ID, now=minutes_after(T0, 10))

        assert response.total_active_sessions == 1
        session = response.sessions[0]
        assert session.quiz_id == running.id
        assert session.participant_count == 1
        assert session.seconds_remaining == 20 * 60
        assert service.check_status(overdue.id, now=minutes_after(T0, 10)).exam_status == ExamStatus.ENDED

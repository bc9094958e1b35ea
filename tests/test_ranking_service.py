import pytest

from conftest import CLASS_ID, T0, minutes_after
from quizrank.core.exceptions import NotFoundError
from quizrank.services.ranking import RankingService


@pytest.fixture
def service(db):
    return RankingService(db)


class TestClassRankings:
    def test_participation_weighted_points(self, service, make_quiz, make_result, enroll):
        enroll("alice", name="Alice")
        enroll("bob", name="Bob")
        quizzes = [make_quiz(duration_minutes=10) for _ in range(5)]

        # alice: 3 of 5 quizzes, avg 80%, 4 minutes of 10 used -> efficiency 60
        for quiz, percentage in zip(quizzes[:3], (70.0, 80.0, 90.0)):
            make_result(quiz, "alice", percentage, 240)
        # bob: every quiz, 60%, all the time used
        for quiz in quizzes:
            make_result(quiz, "bob", 60.0, 600)

        response = service.class_rankings(CLASS_ID)

        assert response.total_students == 2
        assert response.total_quizzes_available == 5
        alice = next(r for r in response.rankings if r.student_id == "alice")
        bob = next(r for r in response.rankings if r.student_id == "bob")

        assert alice.total_quizzes == 3
        assert alice.average_score == 80.0
        assert alice.average_time_efficiency == 60.0
        assert alice.participation_rate == 60.0
        assert alice.base_points == 74.0
        assert alice.final_points == 53.3
        assert alice.student_name == "Alice"
        assert alice.average_time_seconds == 240

        assert bob.base_points == 42.0
        assert bob.final_points == 42.0

        assert [r.student_id for r in response.rankings] == ["alice", "bob"]
        assert [r.rank for r in response.rankings] == [1, 2]

    def test_students_without_attempts_are_omitted(self, service, make_quiz, make_result, enroll):
        enroll("alice")
        enroll("idle")
        quiz = make_quiz()
        make_result(quiz, "alice", 50.0, 100)

        response = service.class_rankings(CLASS_ID)

        assert [r.student_id for r in response.rankings] == ["alice"]

    def test_unenrolled_results_are_ignored(self, service, make_quiz, make_result, enroll):
        enroll("alice")
        enroll("gone", is_active=False)
        quiz = make_quiz()
        make_result(quiz, "alice", 50.0, 100)
        make_result(quiz, "gone", 100.0, 10)

        response = service.class_rankings(CLASS_ID)

        assert [r.student_id for r in response.rankings] == ["alice"]

    def test_tie_broken_by_average_score_then_student(self, service, make_quiz, make_result, enroll):
        for student in ("carol", "dave", "erin"):
            enroll(student)
        quiz = make_quiz(duration_minutes=10)
        # carol: 70*0.7 + 30*0.3 = 58.0, dave: 40*0.7 + 100*0.3 = 58.0
        make_result(quiz, "carol", 70.0, 420)
        make_result(quiz, "dave", 40.0, 0)
        make_result(quiz, "erin", 70.0, 420)

        response = service.class_rankings(CLASS_ID)

        assert [r.final_points for r in response.rankings] == [58.0, 58.0, 58.0]
        assert [r.student_id for r in response.rankings] == ["carol", "erin", "dave"]

    def test_empty_class(self, service):
        response = service.class_rankings("nobody")

        assert response.rankings == []
        assert response.total_quizzes_available == 0


class TestQuizRankings:
    def test_top_n_and_current_student(self, service, make_quiz, make_result):
        quiz = make_quiz()
        make_result(quiz, "s1", 90.0, 400)
        make_result(quiz, "s2", 90.0, 300)
        make_result(quiz, "s3", 70.0, 100)
        make_result(quiz, "s4", 50.0, 100)

        response = service.quiz_rankings(quiz.id, top_n=3, student_id="s4")

        assert [r.student_id for r in response.top_rankers] == ["s2", "s1", "s3"]
        assert [r.rank for r in response.top_rankers] == [1, 2, 3]
        assert response.current_student_rank == 4
        assert response.is_in_top is False
        assert response.total_participants == 4
        assert response.quiz_title == "Cell Biology"

    def test_current_student_in_top(self, service, make_quiz, make_result):
        quiz = make_quiz()
        make_result(quiz, "s1", 90.0, 400)

        response = service.quiz_rankings(quiz.id, student_id="s1")

        assert response.is_in_top is True
        assert response.top_rankers[0].is_current_student is True

    def test_student_without_attempt(self, service, make_quiz, make_result):
        quiz = make_quiz()
        make_result(quiz, "s1", 90.0, 400)

        response = service.quiz_rankings(quiz.id, student_id="s9")

        assert response.current_student_rank is None
        assert response.is_in_top is False

    def test_unknown_quiz(self, service):
        with pytest.raises(NotFoundError):
            service.quiz_rankings(12345)


class TestLastQuizRankings:
    def test_uses_quiz_with_latest_submission(self, service, make_quiz, make_result):
        older = make_quiz(lecture_title="Week 1")
        latest = make_quiz(lecture_title="Week 2", duration_minutes=10)
        make_result(older, "s1", 100.0, 10, submission_date=T0)
        make_result(latest, "s1", 80.0, 300, submission_date=minutes_after(T0, 60))
        make_result(latest, "s2", 90.0, 540, submission_date=minutes_after(T0, 61))

        response = service.last_quiz_rankings(CLASS_ID)

        assert response.quiz_id == latest.id
        assert response.quiz_title == "Week 2"
        assert response.quiz_date == minutes_after(T0, 61)
        # s1: 80*0.7 + 50*0.3 = 71.0, s2: 90*0.7 + 10*0.3 = 66.0
        assert [(r.student_id, r.points) for r in response.rankings] == [("s1", 71.0), ("s2", 66.0)]
        assert response.rankings[0].time_efficiency == 50.0

    def test_no_submissions(self, service):
        response = service.last_quiz_rankings(CLASS_ID)

        assert response.quiz_id is None
        assert response.rankings == []


class TestQuizStatistics:
    def test_statistics(self, service, make_quiz, make_result):
        quiz = make_quiz(duration_minutes=10)
        make_result(quiz, "s1", 80.0, 300)
        make_result(quiz, "s2", 60.0, 600)

        stats = service.quiz_statistics(quiz.id)

        assert stats.total_attempts == 2
        assert stats.average_score == 70.0
        assert stats.average_time_seconds == 450
        assert stats.average_efficiency == 25.0
        assert stats.fastest_completion_seconds == 300
        assert stats.slowest_completion_seconds == 600

    def test_no_attempts(self, service, make_quiz):
        quiz = make_quiz()

        stats = service.quiz_statistics(quiz.id)

        assert stats.total_attempts == 0
        assert stats.average_score == 0.0

import logging
from collections import defaultdict
from typing import Dict, Optional

from sqlalchemy.orm import Session

from quizrank.core.config import settings
from quizrank.core.exceptions import NotFoundError
from quizrank.core.timeutils import ensure_utc
from quizrank.domain.ranking_domain import RankingFormula
from quizrank.models.quiz import Quiz
from quizrank.repositories.enrollment_repository import EnrollmentRepository
from quizrank.repositories.quiz_repository import QuizRepository
from quizrank.repositories.result_repository import ResultRepository
from quizrank.schemas.ranking import (
    ClassRankingEntry,
    ClassRankingsResponse,
    LastQuizRankingEntry,
    LastQuizRankingsResponse,
    QuizRankingEntry,
    QuizRankingsResponse,
    QuizStatisticsResponse,
)

logger = logging.getLogger(__name__)


class RankingService:
    """
    Leaderboards recomputed from the full result set on every request.

    Nothing is cached or maintained incrementally; at classroom scale (tens to
    low hundreds of results per class) a full pass is cheap and always
    consistent with the stored results.
    """

    def __init__(self, db: Session):
        self.db = db
        self.quiz_repository = QuizRepository(db)
        self.result_repository = ResultRepository(db)
        self.enrollment_repository = EnrollmentRepository(db)

    def _get_quiz(self, quiz_id: int) -> Quiz:
        quiz = self.quiz_repository.get_by_id(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found.", code="QUIZ_NOT_FOUND")
        return quiz

    @staticmethod
    def _allotted_seconds(quiz: Optional[Quiz]) -> int:
        if quiz is None or not quiz.duration_minutes:
            return settings.DEFAULT_QUIZ_DURATION_MINUTES * 60
        return quiz.duration_minutes * 60

    def class_rankings(self, class_id: str) -> ClassRankingsResponse:
        """Participation-weighted leaderboard of a class"""
        roster = {
            enrollment.student_id: enrollment.student_name
            for enrollment in self.enrollment_repository.get_active_by_class(class_id)
        }
        class_quizzes: Dict[int, Quiz] = {
            quiz.id: quiz for quiz in self.quiz_repository.get_active_by_class(class_id)
        }
        total_quizzes_available = len(class_quizzes)

        results_by_student = defaultdict(list)
        for result in self.result_repository.get_by_class(class_id):
            if result.student_id in roster and result.quiz_id in class_quizzes:
                results_by_student[result.student_id].append(result)

        entries = []
        # Students without attempts have no entry and are left out entirely
        for student_id, results in results_by_student.items():
            average_score = RankingFormula.average([r.percentage for r in results])
            average_efficiency = RankingFormula.average(
                [
                    RankingFormula.time_efficiency(
                        r.time_taken_seconds,
                        self._allotted_seconds(class_quizzes[r.quiz_id]),
                    )
                    for r in results
                ]
            )
            participation_rate = RankingFormula.participation_rate(
                len(results), total_quizzes_available
            )
            base_points = RankingFormula.base_points(average_score, average_efficiency)
            final_points = RankingFormula.final_points(base_points, participation_rate)

            entries.append(
                {
                    "student_id": student_id,
                    "student_name": roster.get(student_id),
                    "total_quizzes": len(results),
                    "average_score": round(average_score, 1),
                    "average_time_efficiency": round(average_efficiency, 1),
                    "participation_rate": round(participation_rate, 1),
                    "base_points": base_points,
                    "final_points": final_points,
                    "average_time_seconds": round(
                        RankingFormula.average([r.time_taken_seconds for r in results])
                    ),
                }
            )

        entries.sort(
            key=lambda e: (-e["final_points"], -e["average_score"], e["student_id"])
        )
        rankings = [
            ClassRankingEntry(rank=index + 1, **entry) for index, entry in enumerate(entries)
        ]

        logger.info(f"Participation-weighted rankings generated: {len(rankings)} students")
        return ClassRankingsResponse(
            class_id=class_id,
            rankings=rankings,
            total_students=len(rankings),
            total_quizzes_available=total_quizzes_available,
        )

    def quiz_rankings(
        self, quiz_id: int, top_n: Optional[int] = None, student_id: Optional[str] = None
    ) -> QuizRankingsResponse:
        """Top N of a quiz plus the caller's own position"""
        quiz = self._get_quiz(quiz_id)
        top_n = top_n or settings.QUIZ_TOP_RANKERS

        ordered = RankingFormula.sort_quiz_attempts(
            self.result_repository.get_by_quiz(quiz.id)
        )

        top_rankers = [
            QuizRankingEntry(
                rank=index + 1,
                student_id=result.student_id,
                score=result.score,
                percentage=round(result.percentage, 1),
                time_taken_seconds=result.time_taken_seconds,
                submission_date=ensure_utc(result.submission_date),
                is_current_student=student_id is not None and result.student_id == student_id,
            )
            for index, result in enumerate(ordered[:top_n])
        ]

        current_rank = None
        if student_id is not None:
            for index, result in enumerate(ordered):
                if result.student_id == student_id:
                    current_rank = index + 1
                    break

        logger.info(f"Rankings loaded for quiz {quiz.id}: top {top_n} of {len(ordered)} participants")
        return QuizRankingsResponse(
            quiz_id=quiz.id,
            quiz_title=quiz.lecture_title,
            top_rankers=top_rankers,
            current_student_rank=current_rank,
            total_participants=len(ordered),
            is_in_top=current_rank is not None and current_rank <= top_n,
        )

    def last_quiz_rankings(self, class_id: str) -> LastQuizRankingsResponse:
        """Leaderboard of the class quiz that received the latest submission"""
        latest = self.result_repository.get_latest_by_class(class_id)
        if not latest:
            return LastQuizRankingsResponse(class_id=class_id, rankings=[])

        quiz = self.quiz_repository.get_by_id(latest.quiz_id)
        allotted = self._allotted_seconds(quiz)

        entries = []
        for result in self.result_repository.get_by_quiz(latest.quiz_id):
            if result.class_id != class_id:
                continue
            efficiency = RankingFormula.time_efficiency(result.time_taken_seconds, allotted)
            entries.append(
                {
                    "student_id": result.student_id,
                    "score": round(result.percentage, 1),
                    "time_taken_seconds": result.time_taken_seconds,
                    "time_efficiency": round(efficiency, 1),
                    "points": RankingFormula.base_points(result.percentage, efficiency),
                    "submission_date": ensure_utc(result.submission_date),
                }
            )

        entries.sort(key=lambda e: (-e["points"], e["time_taken_seconds"]))
        return LastQuizRankingsResponse(
            class_id=class_id,
            quiz_id=latest.quiz_id,
            quiz_title=quiz.lecture_title if quiz else None,
            quiz_date=ensure_utc(latest.submission_date),
            rankings=[
                LastQuizRankingEntry(rank=index + 1, **entry)
                for index, entry in enumerate(entries)
            ],
        )

    def quiz_statistics(self, quiz_id: int) -> QuizStatisticsResponse:
        quiz = self._get_quiz(quiz_id)
        results = self.result_repository.get_by_quiz(quiz.id)

        if not results:
            return QuizStatisticsResponse(
                quiz_id=quiz.id,
                total_attempts=0,
                average_score=0.0,
                average_time_seconds=0,
                average_efficiency=0.0,
                fastest_completion_seconds=0,
                slowest_completion_seconds=0,
            )

        allotted = self._allotted_seconds(quiz)
        times = [r.time_taken_seconds for r in results]
        return QuizStatisticsResponse(
            quiz_id=quiz.id,
            total_attempts=len(results),
            average_score=round(RankingFormula.average([r.percentage for r in results]), 1),
            average_time_seconds=round(RankingFormula.average(times)),
            average_efficiency=round(
                RankingFormula.average(
                    [RankingFormula.time_efficiency(t, allotted) for t in times]
                ),
                1,
            ),
            fastest_completion_seconds=min(times),
            slowest_completion_seconds=max(times),
        )

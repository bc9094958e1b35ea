"""
Ranking formulas.

Base Points  = (Average Score x 0.7) + (Average Time Efficiency x 0.3)
Final Points = Base Points x (0.3 + 0.7 x Participation Rate / 100)

Time efficiency is the linear share of the allotted time left unused,
clamped to [0, 100].
"""

from typing import List, Optional, Sequence


class RankingFormula:
    SCORE_WEIGHT = 0.7
    TIME_EFFICIENCY_WEIGHT = 0.3
    PARTICIPATION_BASE = 0.3
    PARTICIPATION_WEIGHT = 0.7

    @staticmethod
    def time_efficiency(
        time_taken_seconds: Optional[float], allotted_seconds: Optional[float]
    ) -> float:
        if time_taken_seconds is None or allotted_seconds is None:
            return 0.0
        if allotted_seconds <= 0:
            return 0.0
        efficiency = (allotted_seconds - time_taken_seconds) / allotted_seconds * 100
        return max(0.0, min(100.0, efficiency))

    @staticmethod
    def base_points(average_score: float, average_efficiency: float) -> float:
        return round(
            (average_score or 0) * RankingFormula.SCORE_WEIGHT
            + (average_efficiency or 0) * RankingFormula.TIME_EFFICIENCY_WEIGHT,
            1,
        )

    @staticmethod
    def participation_rate(quizzes_attempted: int, quizzes_available: int) -> float:
        if quizzes_available <= 0:
            return 0.0
        return quizzes_attempted / quizzes_available * 100

    @staticmethod
    def final_points(base_points: float, participation_rate: float) -> float:
        multiplier = RankingFormula.PARTICIPATION_BASE + RankingFormula.PARTICIPATION_WEIGHT * (
            participation_rate / 100
        )
        return round(base_points * multiplier, 1)

    @staticmethod
    def sort_quiz_attempts(attempts: Sequence) -> List:
        """Higher percentage first; the faster attempt wins a tie"""
        return sorted(attempts, key=lambda a: (-a.percentage, a.time_taken_seconds))

    @staticmethod
    def average(values: Sequence[float]) -> float:
        if not values:
            return 0.0
        return sum(values) / len(values)

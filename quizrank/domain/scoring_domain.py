from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from quizrank.schemas.submission import AnswerSubmission


@dataclass
class ScoreResult:
    """Outcome of scoring one submission"""

    score: int
    total_questions: int
    percentage: float
    detailed_answers: List[Dict] = field(default_factory=list)


class ScoringEngine:
    """Scores multiple-choice submissions against a quiz's answer key"""

    @staticmethod
    def percentage(score: int, total_questions: int) -> float:
        if total_questions <= 0:
            return 0.0
        return round(score / total_questions * 100, 1)

    @staticmethod
    def score(
        questions: Sequence[Dict], answers: Sequence[AnswerSubmission]
    ) -> ScoreResult:
        """
        Compare each submitted option with the correct answer.

        Answers pointing outside the question list are skipped rather than
        counted wrong; only the first answer per question index is scored.
        Unanswered questions simply earn nothing.
        """
        total_questions = len(questions)
        score = 0
        detailed_answers = []
        seen = set()

        for answer in answers:
            index = answer.question_index
            if index < 0 or index >= total_questions or index in seen:
                continue
            seen.add(index)

            correct_option = questions[index].get("correct_answer")
            is_correct = answer.selected_option == correct_option
            if is_correct:
                score += 1

            detailed_answers.append(
                {
                    "question_index": index,
                    "selected_option": answer.selected_option,
                    "correct_option": correct_option,
                    "is_correct": is_correct,
                }
            )

        return ScoreResult(
            score=score,
            total_questions=total_questions,
            percentage=ScoringEngine.percentage(score, total_questions),
            detailed_answers=detailed_answers,
        )

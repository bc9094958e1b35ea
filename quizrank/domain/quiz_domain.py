import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from quizrank.core.constants import OPTION_LETTERS
from quizrank.core.exceptions import UpstreamError
from quizrank.core.timeutils import ensure_utc
from quizrank.models.quiz import Quiz
from quizrank.schemas.quiz import StudentQuestion, StudentQuizResponse

logger = logging.getLogger(__name__)

PLACEHOLDER_EXPLANATION = (
    "This option is incorrect. The correct answer is {correct}. "
    "Please review the lecture material for more details."
)


@dataclass
class Explanation:
    text: str
    explanation_type: str


class QuizDomain:
    """Domain logic for Quiz entities"""

    @staticmethod
    def normalize_questions(raw_questions: Any, question_count: int) -> List[Dict]:
        """
        Validate generator output and bring it into the stored question shape.

        The only repair is trimming an over-long list to ``question_count``.
        Empty output or malformed questions raise UpstreamError. Missing
        explanations for wrong options get a placeholder, and the correct
        option's explanation is always blank.
        """
        if not isinstance(raw_questions, list):
            raise UpstreamError("Generator response is not a list of questions.")

        if len(raw_questions) > question_count:
            logger.warning(
                f"Generator returned {len(raw_questions)} questions, expected {question_count}; trimming"
            )
            raw_questions = raw_questions[:question_count]
        elif len(raw_questions) < question_count:
            logger.warning(
                f"Generator returned {len(raw_questions)} questions, expected {question_count}"
            )

        if not raw_questions:
            raise UpstreamError("No questions generated.")

        return [
            QuizDomain._normalize_question(raw, index)
            for index, raw in enumerate(raw_questions)
        ]

    @staticmethod
    def _normalize_question(raw: Any, index: int) -> Dict:
        number = index + 1
        if not isinstance(raw, dict):
            raise UpstreamError(f"Question {number} is not an object.")

        text = raw.get("question")
        options = raw.get("options")
        correct = raw.get("correct_answer")
        if not text or not isinstance(options, dict) or not correct:
            raise UpstreamError(f"Question {number} is missing required fields.")

        correct = str(correct).strip().upper()
        if correct not in OPTION_LETTERS:
            raise UpstreamError(f"Question {number} has invalid correct_answer.")

        normalized_options = {}
        for letter in OPTION_LETTERS:
            option_text = options.get(letter)
            if option_text is None or not str(option_text).strip():
                raise UpstreamError(f"Question {number} is missing option {letter}.")
            normalized_options[letter] = str(option_text).strip()

        raw_explanations = raw.get("explanations") or {}
        if not isinstance(raw_explanations, dict):
            raw_explanations = {}

        explanations = {}
        for letter in OPTION_LETTERS:
            if letter == correct:
                explanations[letter] = ""
                continue
            explanation = str(raw_explanations.get(letter) or "").strip()
            if not explanation:
                logger.warning(f"Question {number}: missing explanation for wrong answer {letter}")
                explanation = PLACEHOLDER_EXPLANATION.format(correct=correct)
            explanations[letter] = explanation

        correct_explanation = (
            raw.get("correct_answer_explanation")
            or raw.get("correctAnswerExplanation")
            or ""
        )

        return {
            "question": str(text).strip(),
            "options": normalized_options,
            "correct_answer": correct,
            "explanations": explanations,
            "correct_answer_explanation": str(correct_explanation).strip(),
        }

    @staticmethod
    def to_student_view(quiz: Quiz) -> StudentQuizResponse:
        """Strip answers and explanations before a quiz reaches a student"""
        return StudentQuizResponse(
            quiz_id=quiz.id,
            class_id=quiz.class_id,
            lecture_title=quiz.lecture_title,
            total_questions=quiz.total_questions,
            duration_minutes=quiz.duration_minutes,
            duration_seconds=quiz.duration_minutes * 60,
            is_exam_mode=quiz.is_exam_mode,
            exam_status=quiz.exam_status,
            exam_end_time=ensure_utc(quiz.exam_end_time),
            questions=[
                StudentQuestion(question=q["question"], options=q["options"])
                for q in quiz.questions
            ],
        )

    @staticmethod
    def explain(question: Dict, wrong_answer: str) -> Explanation:
        """Pre-generated explanation for a wrong option, with a basic fallback"""
        correct = question["correct_answer"]
        correct_text = question["options"].get(correct, "")
        correct_explanation: Optional[str] = (
            question.get("correct_answer_explanation") or ""
        ).strip()
        detailed = (question.get("explanations") or {}).get(wrong_answer, "").strip()

        if detailed:
            text = detailed
            if correct_explanation:
                text += f"\n\nWhy {correct} is correct: {correct_explanation}"
            return Explanation(text=text, explanation_type="detailed")

        if correct_explanation:
            text = f"The correct answer is {correct}) {correct_text}.\n\n{correct_explanation}"
        else:
            text = (
                f"The correct answer is {correct}) {correct_text}. "
                "Please review the lecture material for detailed understanding."
            )
        return Explanation(text=text, explanation_type="basic")

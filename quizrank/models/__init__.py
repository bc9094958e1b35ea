from .enrollment import Enrollment
from .quiz import Quiz
from .result import QuizResult

__all__ = ["Quiz", "QuizResult", "Enrollment"]

from .enrollment_repository import EnrollmentRepository
from .quiz_repository import QuizRepository
from .result_repository import ResultRepository

__all__ = ["QuizRepository", "ResultRepository", "EnrollmentRepository"]

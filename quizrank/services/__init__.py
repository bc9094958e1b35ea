from .quiz import QuizService
from .ranking import RankingService
from .session import SessionService
from .submission import SubmissionService

__all__ = ["QuizService", "RankingService", "SessionService", "SubmissionService"]

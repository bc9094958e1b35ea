"""
Error taxonomy for the quiz session and ranking core.

Every error carries a stable ``code`` for clients and the HTTP status the
routes translate it to. Validation, state and duplicate errors are
deterministic and are never retried by the service.
"""

from fastapi import HTTPException, status


class QuizRankError(Exception):
    """Base class for all domain errors"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "ERROR"

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={"code": self.code, "message": self.message},
        )


class ValidationError(QuizRankError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "INVALID_INPUT"


class NotFoundError(QuizRankError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class AuthorizationError(QuizRankError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "NOT_ENROLLED"


class StateError(QuizRankError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "INVALID_STATE"


class DuplicateError(QuizRankError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "ALREADY_SUBMITTED"


class UpstreamError(QuizRankError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_code = "GENERATION_FAILED"

    def __init__(self, message: str, code: str = None, quota_exceeded: bool = False):
        super().__init__(message, code or ("QUOTA_EXCEEDED" if quota_exceeded else None))
        self.quota_exceeded = quota_exceeded
        if quota_exceeded:
            self.status_code = status.HTTP_429_TOO_MANY_REQUESTS


class PersistenceError(QuizRankError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "STORAGE_FAILURE"

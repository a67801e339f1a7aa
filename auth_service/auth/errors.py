"""
Error taxonomy for the auth service.

Every failure the service reports is one of a closed set of kinds:
- Client errors (bad input, missing resources, bad credentials or tokens)
- Application errors (store failures and anything unexpected)

Each error carries its kind, a message, an explanation and the HTTP status
the handlers respond with.
"""
from enum import Enum
from typing import Any, Dict, Optional
from fastapi import status


class ErrorKind(str, Enum):
    """Closed set of error kinds exposed in the response envelope."""
    CLIENT_ERROR = "CLIENT_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    INVALID_TOKEN = "INVALID_TOKEN"
    APP_ERROR = "APP_ERROR"
    REPOSITORY_ERROR = "REPOSITORY_ERROR"
    SERVICE_ERROR = "SERVICE_ERROR"


class AuthServiceError(Exception):
    """Base class for all errors raised by the repository and service layers."""
    kind: ErrorKind = ErrorKind.APP_ERROR
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong"

    def __init__(
        self,
        message: Optional[str] = None,
        explanation: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_message
        self.explanation = explanation or self.message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "explanation": self.explanation,
        }


class ClientError(AuthServiceError):
    kind = ErrorKind.CLIENT_ERROR
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class ValidationError(ClientError):
    """Malformed or conflicting input, e.g. a duplicate email."""
    kind = ErrorKind.VALIDATION_ERROR
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid data sent in the request"


class NotFound(ClientError):
    kind = ErrorKind.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class InvalidCredential(ClientError):
    kind = ErrorKind.INVALID_CREDENTIAL
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Incorrect password"


class InvalidToken(ClientError):
    kind = ErrorKind.INVALID_TOKEN
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid token"


class AppError(AuthServiceError):
    kind = ErrorKind.APP_ERROR


class RepositoryError(AppError):
    """Unexpected failure in the relational store."""
    kind = ErrorKind.REPOSITORY_ERROR
    default_message = "Cannot complete the database operation"


class ServiceError(AppError):
    """Catch-all for failures the service did not anticipate."""
    kind = ErrorKind.SERVICE_ERROR
    default_message = "Something went wrong in the service layer"

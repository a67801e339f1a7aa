"""
Authentication middleware.

This module provides:
- Bearer token extraction from the Authorization header
- Exception handlers mapping service errors and request validation
  failures to the response envelope
"""
from typing import Optional
from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth_service.auth.errors import AuthServiceError, ErrorKind, ValidationError
from auth_service.base_microservice import EnvelopeResponse

# auto_error is off so a missing header reaches the envelope handlers
bearer_scheme = HTTPBearer(auto_error=False)

# Validation messages for routes whose body carries a single required field
ROUTE_VALIDATION_MESSAGES = {
    "/api/v1/isAdmin": "User id is required.",
}


async def bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """
    Dependency returning the raw token from `Authorization: Bearer <token>`.

    Raises:
        ValidationError: If the header is missing or not a bearer credential
    """
    if credentials is None or not credentials.credentials:
        raise ValidationError(
            "Authorization header with a bearer token is required",
        )
    return credentials.credentials


async def auth_service_error_handler(request: Request, exc: AuthServiceError) -> EnvelopeResponse:
    service = request.app.state.service
    if exc.status_code >= 500:
        service.log_error(exc, context=f"{request.method} {request.url.path}: {exc.explanation}")
    else:
        service.log_event("request.rejected", {
            "path": request.url.path,
            "kind": exc.kind.value,
            "message": exc.message,
        })
    return EnvelopeResponse(
        message=exc.message,
        success=False,
        error=exc.to_dict(),
        status_code=exc.status_code,
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> EnvelopeResponse:
    errors = exc.errors()
    if request.url.path in ROUTE_VALIDATION_MESSAGES:
        message = ROUTE_VALIDATION_MESSAGES[request.url.path]
    elif any(error.get("type") == "missing" for error in errors):
        message = "All fields are required."
    else:
        message = ValidationError.default_message
    explanation = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in errors
    ]
    return EnvelopeResponse(
        message=message,
        success=False,
        error={"kind": ErrorKind.VALIDATION_ERROR.value, "explanation": explanation},
        status_code=ValidationError.status_code,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthServiceError, auth_service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

"""
Authentication router.

This module provides the FastAPI router for the v1 endpoints:
- User registration and login
- Token authentication check
- Admin role check

Service errors are not caught here; the handlers registered in
`auth_service.auth.middleware` turn them into envelopes.
"""
from fastapi import APIRouter, Depends, Request, status

from auth_service.auth.middleware import bearer_token
from auth_service.auth.users import (
    UserService, UserCreate, UserLogin, AdminCheck, get_user_service
)
from auth_service.base_microservice import EnvelopeResponse

# Create router
router = APIRouter(tags=["auth"])


def _service(request: Request):
    return request.app.state.service


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_user(
    request: Request,
    user_data: UserCreate,
    user_service: UserService = Depends(get_user_service),
) -> EnvelopeResponse:
    """
    Register a new user.

    Returns:
        Envelope with the created user (never the password)
    """
    user_info = await user_service.register(user_data)

    _service(request).log_event("user.registered", {
        "id": user_info.id,
        "email": user_info.email
    })

    return _service(request).response(
        data=user_info.model_dump(mode="json"),
        message="Successfully created a user",
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/login")
async def login(
    request: Request,
    login_data: UserLogin,
    user_service: UserService = Depends(get_user_service),
) -> EnvelopeResponse:
    """
    Authenticate a user and return a token.

    Returns:
        Envelope whose data is the signed token
    """
    try:
        token = await user_service.login(login_data.email, login_data.password)
    except Exception:
        _service(request).log_event("user.login.failed", {"email": login_data.email})
        raise

    _service(request).log_event("user.login", {"email": login_data.email})

    return _service(request).response(data=token, message="Successfully signed in")


@router.get("/isAuthenticated")
async def is_authenticated(
    request: Request,
    token: str = Depends(bearer_token),
    user_service: UserService = Depends(get_user_service),
) -> EnvelopeResponse:
    """
    Check a bearer token.

    Returns:
        Envelope whose data is the authenticated user's id
    """
    user_id = await user_service.is_authenticated(token)
    return _service(request).response(data=user_id, message="User is authenticated and token is valid")


@router.get("/isAdmin")
async def is_admin(
    request: Request,
    admin_check: AdminCheck,
    user_service: UserService = Depends(get_user_service),
) -> EnvelopeResponse:
    """
    Check whether a user holds the ADMIN role.

    Returns:
        Envelope whose data is a boolean
    """
    result = await user_service.is_admin(admin_check.id)
    return _service(request).response(data=result, message="Successfully fetched whether user is admin or not")

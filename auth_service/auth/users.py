"""
User management service.

This module provides functionality for:
- User registration
- User login and token issuance
- Token authentication
- Admin role checks
- User profile management
"""
import functools
import logging
from typing import Optional
from datetime import datetime
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from email_validator import validate_email, EmailNotValidError

from auth_service.auth.errors import AuthServiceError, InvalidCredential, ServiceError
from auth_service.auth.jwt import TokenClaims, TokenIssuer
from auth_service.auth.passwords import hash_password, verify_password, DEFAULT_ROUNDS
from auth_service.auth.repository import UserRepository, UserRecord

logger = logging.getLogger("auth_service")

PASSWORD_MIN_LENGTH = 3
PASSWORD_MAX_LENGTH = 15


def normalize_email(email: str) -> str:
    """
    Canonical form of an email address, as stored at registration.

    Uses the same normalization as pydantic's `EmailStr` (the domain is
    lowercased). Addresses that do not validate are returned unchanged so
    the lookup simply finds no user.
    """
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        return email


# Pydantic models for request validation
class UserCreate(BaseModel):
    """Model for user registration."""
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


class UserLogin(BaseModel):
    """Model for user login."""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    """Model for updating a user."""
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


class AdminCheck(BaseModel):
    """Model for the isAdmin request body."""
    id: int = Field(..., gt=0)


class UserOut(BaseModel):
    """Model for user information returned to clients."""
    id: int
    email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserOut":
        return cls.model_validate(record)


def _service_operation(context: str):
    """Pass known errors through unchanged and wrap anything else as ServiceError."""
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except AuthServiceError:
                raise
            except Exception as e:
                logger.error(f"ERROR: {str(e)} | Context: {context}")
                raise ServiceError(explanation=str(e)) from e
        return wrapper
    return decorator


class UserService:
    """
    Service for user authentication and authorization.

    Args:
        repository: Store for users and role memberships
        token_issuer: Signs and verifies bearer tokens
        bcrypt_rounds: Cost factor for new password hashes
    """

    def __init__(
        self,
        repository: UserRepository,
        token_issuer: TokenIssuer,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ):
        self._repository = repository
        self._token_issuer = token_issuer
        self._bcrypt_rounds = bcrypt_rounds

    @_service_operation("User registration")
    async def register(self, user_data: UserCreate) -> UserOut:
        """
        Register a new user.

        Raises:
            ValidationError: If the email is already registered
        """
        password_hash = hash_password(user_data.password, rounds=self._bcrypt_rounds)
        record = await self._repository.create(normalize_email(user_data.email), password_hash)
        return UserOut.from_record(record)

    @_service_operation("User login")
    async def login(self, email: str, password: str) -> str:
        """
        Check credentials and issue a token.

        Raises:
            NotFound: If no user has this email
            InvalidCredential: If the password does not match
        """
        record = await self._repository.get_by_email(normalize_email(email))
        if not verify_password(password, record.password):
            raise InvalidCredential()
        return self._token_issuer.issue(TokenClaims(id=record.id, email=record.email))

    @_service_operation("Token authentication")
    async def is_authenticated(self, token: str) -> int:
        """
        Resolve a bearer token to the id of an existing user.

        Raises:
            InvalidToken: If the token is tampered with or expired
            NotFound: If the token is valid but the user no longer exists
        """
        claims = self._token_issuer.verify(token)
        record = await self._repository.get(claims.id)
        return record.id

    @_service_operation("Admin check")
    async def is_admin(self, user_id: int) -> bool:
        """
        Raises:
            NotFound: If the user or the ADMIN role does not exist
        """
        return await self._repository.is_admin(user_id)

    @_service_operation("Get user")
    async def get_user(self, user_id: int) -> UserOut:
        return UserOut.from_record(await self._repository.get(user_id))

    @_service_operation("Update user")
    async def update_user(self, user_id: int, update_data: UserUpdate) -> UserOut:
        """Update email and/or password; a new password is re-hashed."""
        password_hash = None
        if update_data.password is not None:
            password_hash = hash_password(update_data.password, rounds=self._bcrypt_rounds)
        email = normalize_email(update_data.email) if update_data.email is not None else None
        record = await self._repository.update(
            user_id, email=email, password_hash=password_hash
        )
        return UserOut.from_record(record)

    @_service_operation("Delete user")
    async def delete_user(self, user_id: int) -> None:
        await self._repository.destroy(user_id)

    @_service_operation("Grant role")
    async def grant_role(self, user_id: int, role_name: str) -> None:
        await self._repository.add_role(user_id, role_name)


async def get_db_session(request: Request):
    """Dependency for getting a database session."""
    async with request.app.state.service.session_factory() as session:
        yield session


def get_user_service(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> UserService:
    """Dependency building a UserService for the current request."""
    config = request.app.state.service.config
    return UserService(
        UserRepository(db),
        request.app.state.token_issuer,
        bcrypt_rounds=config.bcrypt_rounds,
    )

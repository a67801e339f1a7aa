"""
JWT token handling for authentication.

This module provides functionality for:
- Signing expiring tokens that carry the user's id and email
- Verifying token signature and expiry
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
import jwt
from jwt.exceptions import PyJWTError
from pydantic import BaseModel, ValidationError as PydanticValidationError

from auth_service.auth.errors import InvalidToken

DEFAULT_ALGORITHM = "HS256"
DEFAULT_EXPIRES_DELTA = timedelta(hours=24)


class TokenClaims(BaseModel):
    """Token payload model."""
    id: int
    email: str


class TokenIssuer:
    """
    Signs and verifies bearer tokens with a server secret.

    The issuer holds no mutable state, so one instance can be shared
    across requests.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = DEFAULT_ALGORITHM,
        expires_delta: Optional[timedelta] = None,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_delta = expires_delta if expires_delta is not None else DEFAULT_EXPIRES_DELTA

    def issue(self, claims: TokenClaims) -> str:
        """
        Create a signed token for the given claims.

        Args:
            claims: User id and email to embed in the token

        Returns:
            Encoded JWT token string
        """
        now = datetime.now(timezone.utc)
        to_encode = claims.model_dump()
        to_encode.update({"iat": now, "exp": now + self.expires_delta})
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify a token and return its claims.

        Args:
            token: JWT token string

        Returns:
            The claims embedded at issuance

        Raises:
            InvalidToken: If the signature is invalid, the token expired,
                or the payload does not carry the expected claims
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidToken("Token expired", explanation=str(e)) from e
        except PyJWTError as e:
            raise InvalidToken(explanation=str(e)) from e

        try:
            return TokenClaims(id=payload.get("id"), email=payload.get("email"))
        except PydanticValidationError as e:
            raise InvalidToken("Token payload is missing user claims") from e

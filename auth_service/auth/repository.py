"""
User repository.

Data-access layer over the users, roles and user_roles tables. ORM
instances never leave this module: callers get plain `UserRecord`s.
Errors are translated into the service taxonomy:
- missing rows raise `NotFound`
- constraint violations raise `ValidationError`
- any other store failure raises `RepositoryError`
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Iterable
from sqlalchemy import select, delete, insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from auth_service.auth.errors import NotFound, ValidationError, RepositoryError, AuthServiceError
from auth_service.auth.models import User, Role, user_roles, ADMIN_ROLE, DEFAULT_ROLES


@dataclass(frozen=True)
class UserRecord:
    id: int
    email: str
    password: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, user: User) -> "UserRecord":
        return cls(
            id=user.id,
            email=user.email,
            password=user.password,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserRepository:
    """
    Repository for user and role-membership operations.

    Args:
        db: Session the repository runs its statements on
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_model(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFound(f"User with id {user_id} not found.")
        return user

    async def _get_role(self, role_name: str) -> Role:
        result = await self.db.execute(select(Role).where(Role.name == role_name))
        role = result.scalar_one_or_none()
        if role is None:
            raise NotFound(f"Role {role_name} not found.")
        return role

    async def get(self, user_id: int) -> UserRecord:
        """Fetch a user by id."""
        try:
            return UserRecord.from_model(await self._get_model(user_id))
        except AuthServiceError:
            raise
        except SQLAlchemyError as e:
            raise RepositoryError(explanation=str(e)) from e

    async def get_by_email(self, email: str) -> UserRecord:
        """Fetch a user by email."""
        try:
            result = await self.db.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
            if user is None:
                raise NotFound(f"User with email {email} not found.")
            return UserRecord.from_model(user)
        except AuthServiceError:
            raise
        except SQLAlchemyError as e:
            raise RepositoryError(explanation=str(e)) from e

    async def create(self, email: str, password_hash: str) -> UserRecord:
        """
        Insert a new user.

        Args:
            email: Unique email address
            password_hash: Already hashed password

        Raises:
            ValidationError: If the email is already registered
        """
        user = User(email=email, password=password_hash)
        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
            return UserRecord.from_model(user)
        except IntegrityError as e:
            await self.db.rollback()
            raise ValidationError(
                "Email already registered",
                explanation=f"Failed to create user. {e.orig}",
            ) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise RepositoryError(
                "Failed to create user",
                explanation=str(e),
            ) from e

    async def update(
        self,
        user_id: int,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
    ) -> UserRecord:
        """
        Update a user's email and/or password hash.

        Raises:
            NotFound: If no user has this id
            ValidationError: If the new email is taken
        """
        try:
            user = await self._get_model(user_id)
            if email is not None:
                user.email = email
            if password_hash is not None:
                user.password = password_hash
            await self.db.commit()
            await self.db.refresh(user)
            return UserRecord.from_model(user)
        except AuthServiceError:
            raise
        except IntegrityError as e:
            await self.db.rollback()
            raise ValidationError(
                "Email already registered",
                explanation=f"Failed to update user. {e.orig}",
            ) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise RepositoryError(explanation=str(e)) from e

    async def destroy(self, user_id: int) -> None:
        """Delete a user and its role memberships."""
        try:
            user = await self._get_model(user_id)
            await self.db.execute(delete(user_roles).where(user_roles.c.user_id == user_id))
            await self.db.delete(user)
            await self.db.commit()
        except AuthServiceError:
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise RepositoryError(explanation=str(e)) from e

    async def has_role(self, user_id: int, role_name: str) -> bool:
        """
        Check whether a user holds a role.

        Raises:
            NotFound: If the user or the role does not exist
        """
        try:
            await self._get_model(user_id)
            role = await self._get_role(role_name)
            result = await self.db.execute(
                select(user_roles.c.user_id).where(
                    user_roles.c.user_id == user_id,
                    user_roles.c.role_id == role.id,
                )
            )
            return result.first() is not None
        except AuthServiceError:
            raise
        except SQLAlchemyError as e:
            raise RepositoryError(explanation=str(e)) from e

    async def is_admin(self, user_id: int) -> bool:
        return await self.has_role(user_id, ADMIN_ROLE)

    async def add_role(self, user_id: int, role_name: str) -> None:
        """Grant a role to a user; granting a held role is a no-op."""
        if await self.has_role(user_id, role_name):
            return
        try:
            role = await self._get_role(role_name)
            await self.db.execute(insert(user_roles).values(user_id=user_id, role_id=role.id))
            await self.db.commit()
        except AuthServiceError:
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise RepositoryError(explanation=str(e)) from e


async def seed_roles(db: AsyncSession, names: Iterable[str] = DEFAULT_ROLES) -> None:
    """Insert the static roles that are not present yet."""
    result = await db.execute(select(Role.name))
    existing = set(result.scalars().all())
    for name in names:
        if name not in existing:
            db.add(Role(name=name))
    await db.commit()

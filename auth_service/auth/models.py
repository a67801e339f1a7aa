"""
Authentication models for the auth service.

This module defines SQLAlchemy models for:
- Users
- Roles
- The user/role membership table
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Table, func
from auth_service.base_microservice import Base

ADMIN_ROLE = "ADMIN"
CUSTOMER_ROLE = "CUSTOMER"
AIRLINE_BUSINESS_ROLE = "AIRLINE_BUSINESS"

DEFAULT_ROLES = (ADMIN_ROLE, CUSTOMER_ROLE, AIRLINE_BUSINESS_ROLE)

# Association table for many-to-many relationship between users and roles
user_roles = Table(
    'user_roles',
    Base.metadata,
    Column('user_id', Integer, ForeignKey('users.id', ondelete="CASCADE"), primary_key=True),
    Column('role_id', Integer, ForeignKey('roles.id', ondelete="CASCADE"), primary_key=True),
    Column('created_at', DateTime, server_default=func.now(), nullable=False),
    Column('updated_at', DateTime, server_default=func.now(), onupdate=func.now(), nullable=False),
)


class User(Base):
    """User account; `password` always holds a bcrypt hash."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)


class Role(Base):
    """Static role reference data (ADMIN, CUSTOMER, ...)."""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

"""
Test cases for the user repository.
"""
import pytest
from sqlalchemy import delete, select

from auth_service.auth.errors import NotFound, ValidationError
from auth_service.auth.models import Role, ADMIN_ROLE, CUSTOMER_ROLE, DEFAULT_ROLES
from auth_service.auth.repository import UserRepository, UserRecord, seed_roles


@pytest.mark.asyncio
async def test_create_and_get_user(db):
    repo = UserRepository(db)

    created = await repo.create("a@x.com", "hashed")
    fetched = await repo.get(created.id)

    assert isinstance(created, UserRecord)
    assert fetched.id == created.id
    assert fetched.email == "a@x.com"
    assert fetched.password == "hashed"
    assert fetched.created_at is not None


@pytest.mark.asyncio
async def test_create_duplicate_email_raises_validation_error(db):
    repo = UserRepository(db)
    await repo.create("a@x.com", "hashed")

    with pytest.raises(ValidationError):
        await repo.create("a@x.com", "other")


@pytest.mark.asyncio
async def test_get_missing_user_raises_not_found(db):
    with pytest.raises(NotFound) as exc_info:
        await UserRepository(db).get(999)
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_get_by_email(db):
    repo = UserRepository(db)
    created = await repo.create("a@x.com", "hashed")

    assert (await repo.get_by_email("a@x.com")).id == created.id
    with pytest.raises(NotFound):
        await repo.get_by_email("nobody@x.com")


@pytest.mark.asyncio
async def test_update_user(db):
    repo = UserRepository(db)
    created = await repo.create("a@x.com", "hashed")

    updated = await repo.update(created.id, email="b@x.com", password_hash="rehashed")

    assert updated.email == "b@x.com"
    assert updated.password == "rehashed"


@pytest.mark.asyncio
async def test_update_to_taken_email_raises_validation_error(db):
    repo = UserRepository(db)
    await repo.create("a@x.com", "hashed")
    other = await repo.create("b@x.com", "hashed")

    with pytest.raises(ValidationError):
        await repo.update(other.id, email="a@x.com")


@pytest.mark.asyncio
async def test_destroy_user(db):
    repo = UserRepository(db)
    created = await repo.create("a@x.com", "hashed")
    await repo.add_role(created.id, ADMIN_ROLE)

    await repo.destroy(created.id)

    with pytest.raises(NotFound):
        await repo.get(created.id)
    with pytest.raises(NotFound):
        await repo.destroy(created.id)


@pytest.mark.asyncio
async def test_role_membership(db):
    repo = UserRepository(db)
    user = await repo.create("a@x.com", "hashed")

    assert await repo.is_admin(user.id) is False

    await repo.add_role(user.id, ADMIN_ROLE)
    await repo.add_role(user.id, ADMIN_ROLE)

    assert await repo.is_admin(user.id) is True
    assert await repo.has_role(user.id, CUSTOMER_ROLE) is False


@pytest.mark.asyncio
async def test_is_admin_for_missing_user_raises_not_found(db):
    with pytest.raises(NotFound):
        await UserRepository(db).is_admin(999)


@pytest.mark.asyncio
async def test_is_admin_without_admin_role_raises_not_found(db):
    repo = UserRepository(db)
    user = await repo.create("a@x.com", "hashed")
    await db.execute(delete(Role).where(Role.name == ADMIN_ROLE))
    await db.commit()

    with pytest.raises(NotFound):
        await repo.is_admin(user.id)


@pytest.mark.asyncio
async def test_seed_roles_is_idempotent(db):
    await seed_roles(db)

    result = await db.execute(select(Role.name))
    names = result.scalars().all()

    assert sorted(names) == sorted(DEFAULT_ROLES)

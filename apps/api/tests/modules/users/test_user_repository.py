"""
Tests for the user repository against a real (SQLite) store.
"""

import pytest

from school_registry.core.security import hash_password
from school_registry.modules.users.repository import UserRepository


@pytest.mark.asyncio
async def test_create_and_find_by_email_ignoring_case(store_db):
    created = await UserRepository.create(
        store_db,
        email="Admin@Example.org",
        password_hash=hash_password("s3cret-pass"),
        name="Admin",
    )
    await store_db.commit()

    found = await UserRepository.get_by_email(store_db, "ADMIN@example.ORG")

    assert found is not None
    assert found.id == created.id
    assert found.email == "admin@example.org"
    assert found.is_active is True


@pytest.mark.asyncio
async def test_unknown_email(store_db):
    assert await UserRepository.get_by_email(store_db, "nobody@example.org") is None

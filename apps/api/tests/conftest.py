"""
Shared fixtures for the school registry tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from school_registry.core.auth import CurrentUser
from school_registry.core.database import Base
from school_registry.modules.catalog.models import Municipality, Nte, Typology
from school_registry.modules.school_units.models import Homologation, SchoolUnit  # noqa: F401
from school_registry.modules.users.models import User  # noqa: F401
from tests.factories import build_unit


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest_asyncio.fixture
async def store_db():
    """
    Real session on an in-memory SQLite database with every table created.

    Used where the behaviour depends on what the store returns (ordering,
    keyset pagination, server defaults).
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def seeded_catalog(store_db):
    """One NTE, one municipality in it and one typology."""
    nte = Nte(name="NTE 26")
    municipality = Municipality(name="Salvador", nte=nte)
    typology = Typology(name="SEDE")
    store_db.add_all([nte, municipality, typology])
    await store_db.commit()
    return {"nte": nte, "municipality": municipality, "typology": typology}


@pytest.fixture
def current_user():
    return CurrentUser(id=7, email="editor@example.org", name="Editor")


@pytest.fixture
def sample_unit():
    return build_unit()

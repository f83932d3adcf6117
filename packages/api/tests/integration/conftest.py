# This project was developed with assistance from AI tools.
"""Integration test fixtures -- the guarantor service over its SQL collaborators.

Each test gets its own SQLite file database (aiosqlite) with the tables
created from the ORM metadata, and one ``AsyncSession`` shared by every
collaborator, the same way a request wires them.
"""

import pytest
import pytest_asyncio
from db import Base
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.services.activity import SqlActivityLog
from src.services.address import SqlAddressService
from src.services.documents import SqlDocumentService
from src.services.guarantor import GuarantorService
from src.services.policy_completion import SqlPolicyCompletionChecker
from src.services.repository import SqlGuarantorRepository

from ..factories import FIXED_NOW


@pytest_asyncio.fixture
async def async_engine(tmp_path):
    """File-backed SQLite engine with every table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'guarantors.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine):
    """Request-style session; collaborators commit through it themselves."""
    factory = async_sessionmaker(async_engine, expire_on_commit=False, class_=AsyncSession)
    async with factory() as session:
        yield session


@pytest.fixture
def sql_service(db_session):
    """GuarantorService wired exactly like ``get_guarantor_service``."""
    return GuarantorService(
        repository=SqlGuarantorRepository(db_session),
        addresses=SqlAddressService(db_session),
        documents=SqlDocumentService(db_session),
        activity=SqlActivityLog(db_session),
        policy_checker=SqlPolicyCompletionChecker(db_session),
        now=lambda: FIXED_NOW,
    )


@pytest_asyncio.fixture
async def broken_activity_log(async_engine):
    """Make every activity write fail at flush time."""
    async with async_engine.begin() as conn:
        await conn.execute(text("DROP TABLE activity_log"))

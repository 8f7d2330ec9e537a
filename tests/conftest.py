# tests/conftest.py
from __future__ import annotations

from datetime import datetime
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.db.session import create_all
from tests.factories import NOW, FakeDataSource


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def fake_source() -> FakeDataSource:
    return FakeDataSource()


# =========================================
# 内存 SQLite（aiosqlite），每用例独立
# =========================================
@pytest_asyncio.fixture(scope="function")
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        future=True,
    )
    await create_all(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    maker = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as sess:
        try:
            yield sess
        finally:
            if sess.in_transaction():
                await sess.rollback()

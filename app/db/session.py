# app/db/session.py
# 统一的异步会话工厂 + FastAPI 依赖（get_session）
from __future__ import annotations

import logging
import re
from collections.abc import AsyncGenerator
from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import get_settings
from app.db.base import Base, init_models

log = logging.getLogger("dashboard.db")


# ---- DSN 归一：把 DSN 统一到 psycopg3 与 aiosqlite ----
def normalize_async_dsn(url: str) -> str:
    url = (url or "").strip()
    # 有些环境会把值写成 '"postgresql+psycopg://..."'，统一剥掉两侧引号
    if len(url) >= 2 and url[0] == url[-1] and url[0] in ("'", '"'):
        url = url[1:-1].strip()
    if not url:
        return "sqlite+aiosqlite:///./dashboard.db"
    # sqlite:/// → sqlite+aiosqlite:///
    if url.startswith("sqlite://") and not url.startswith("sqlite+"):
        return "sqlite+aiosqlite://" + url[len("sqlite://") :]
    # postgres/postgresql(+asyncpg) → postgresql+psycopg
    if url.startswith("postgresql+asyncpg://") or url.startswith("postgres+asyncpg://"):
        return re.sub(r"^postgres(?:ql)?\+asyncpg://", "postgresql+psycopg://", url)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def build_async_engine(url: Optional[str] = None, *, echo: Optional[bool] = None) -> AsyncEngine:
    settings = get_settings()
    dsn = normalize_async_dsn(url if url is not None else settings.DATABASE_URL)
    log.info("Using DSN (async): %s", dsn)
    return create_async_engine(
        dsn,
        future=True,
        pool_pre_ping=True,
        echo=settings.SQL_ECHO if echo is None else echo,
    )


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


_engine: Optional[AsyncEngine] = None
_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def async_session_maker() -> async_sessionmaker[AsyncSession]:
    """惰性创建进程内共享的 sessionmaker（首次调用时按 settings 建 engine）。"""
    global _engine, _session_maker
    if _session_maker is None:
        _engine = build_async_engine()
        _session_maker = build_session_maker(_engine)
    return _session_maker


# ---- FastAPI 依赖 ----
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker()() as session:
        yield session


async def create_all(engine: AsyncEngine) -> None:
    """本地/测试用：按模型建表（不走迁移）。"""
    init_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ---- 关闭引擎（测试/生命周期） ----
async def close_engines() -> None:
    global _engine, _session_maker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_maker = None

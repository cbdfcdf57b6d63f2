"""Local database session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from src.core.config import settings


def create_engine(url: str | None = None, **kwargs) -> AsyncEngine:
    """Create an async engine for the local database."""
    return create_async_engine(
        url or settings.local_database_url,
        echo=settings.LOCAL_DATABASE_ECHO,
        **kwargs,
    )


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async_engine = create_engine()

AsyncSessionLocal = create_session_factory(async_engine)


@asynccontextmanager
async def get_async_session(
    session_factory: sessionmaker = AsyncSessionLocal,
) -> AsyncGenerator[AsyncSession, None]:
    """获取异步数据库会话（正常退出时提交，异常时回滚）。

    Usage:
        async with get_async_session() as session:
            await ReminderDao(session).insert(reminder)
    """
    session = session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Check the local database connection."""
    engine = engine or async_engine
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Local database connection established successfully")
    except Exception as e:
        logger.error(f"Failed to connect to local database: {e}")
        raise

from typing import AsyncIterator, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from scheduling_core.core.config import settings

logger = structlog.get_logger(__name__)

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
    pool_pre_ping=True,
    pool_recycle=300,
)

AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

Base = declarative_base()


async def init_db(create_tables: bool = False, bind: Optional[AsyncEngine] = None):
    """Check the connection and optionally create the scheduling tables."""
    # Register the models on Base.metadata
    from scheduling_core import models  # noqa: F401

    bind = bind or engine
    try:
        async with bind.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if create_tables:
                await conn.run_sync(Base.metadata.create_all)

        logger.info("Database connection initialized", create_tables=create_tables)
    except Exception as e:
        logger.error("Failed to initialize database", exc_info=e)
        raise


async def get_db(
    session_factory: Optional[async_sessionmaker] = None,
) -> AsyncIterator[AsyncSession]:
    """Yield a session, rolling back if the caller fails."""
    async with (session_factory or AsyncSessionLocal)() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error("Database session error", exc_info=e)
            raise

"""Database connection and session management."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, AsyncIterator, Dict, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from judge.config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: Optional[AsyncEngine] = None
        self.sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

    async def connect(self) -> None:
        """Create the engine; idempotent."""
        if self.engine is not None:
            return

        engine_args: Dict[str, Any] = {
            "pool_pre_ping": True,
            "echo": self.settings.debug,
        }

        # SQLite (used in tests) doesn't support pool_size/max_overflow
        if not self.settings.db_url.startswith("sqlite"):
            engine_args["pool_size"] = self.settings.db_pool_size
            engine_args["max_overflow"] = self.settings.db_max_overflow
        elif ":memory:" in self.settings.db_url:
            # One shared connection, otherwise every checkout sees an empty database
            engine_args["poolclass"] = StaticPool

        self.engine = create_async_engine(self.settings.db_url, **engine_args)
        self.sessionmaker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        # For in-memory SQLite used in tests, create tables automatically
        if self.settings.db_url.startswith("sqlite"):
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        logger.info("Connected to database")

    async def disconnect(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            self.sessionmaker = None
            logger.info("Database disconnected")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self.sessionmaker is None:
            await self.connect()

        assert self.sessionmaker is not None

        async with self.sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session for dependency injection."""
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session

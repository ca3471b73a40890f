from typing import AsyncGenerator, Optional
from datetime import datetime, timezone
import logging
import uuid

from fastapi import Request
from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from mindyamsanzi.core.exceptions import DataStoreUnavailable, ValidationError

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_uuid(value) -> uuid.UUID:
    """Coerce an identity from a request or token into a UUID"""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid student id: {value!r}")


class _Base:
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


Base = declarative_base(cls=_Base)


class Database:
    """Async engine plus session factory for one configured data store"""

    def __init__(self, url: str, echo: bool = False):
        engine_kwargs = {"echo": echo}
        if url.startswith("sqlite") and ":memory:" in url:
            # one shared connection, otherwise every session sees an empty database
            engine_kwargs.update(
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def init_db(self) -> None:
        """Create all tables that do not exist yet"""
        # models must be imported so they register on Base.metadata
        import mindyamsanzi.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ready")

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for routes that cannot work without the data store"""
    database: Optional[Database] = request.app.state.database
    if database is None:
        raise DataStoreUnavailable("Data store is not configured")

    async with database.session() as session:
        yield session

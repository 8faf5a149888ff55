"""Engine, session factory and the request-scoped session dependency."""

from typing import Any, AsyncGenerator, Dict, Optional

from microguide.config import get_settings
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()

engine: Optional[AsyncEngine] = None
AsyncSessionLocal: Optional[async_sessionmaker[AsyncSession]] = None


def enable_sqlite_foreign_keys(target: AsyncEngine) -> None:
    """Turn on FK enforcement so node and progress rows cascade with their path."""

    @event.listens_for(target.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


async def init_db() -> None:
    """Create the engine and session factory from settings."""
    global engine, AsyncSessionLocal

    settings = get_settings()
    is_sqlite = settings.db_url.startswith("sqlite")

    engine_args: Dict[str, Any] = {"echo": settings.debug}
    if not is_sqlite:
        engine_args.update(
            pool_pre_ping=True,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )

    engine = create_async_engine(settings.db_url, **engine_args)
    AsyncSessionLocal = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    if is_sqlite:
        enable_sqlite_foreign_keys(engine)
        # Registers the tables on Base.metadata
        import microguide.models  # noqa: F401

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    global engine, AsyncSessionLocal

    if engine is not None:
        await engine.dispose()
        engine = None
        AsyncSessionLocal = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session per request; services commit their own writes."""
    if AsyncSessionLocal is None:
        await init_db()

    assert AsyncSessionLocal is not None

    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise

"""Async database engine and session factory."""

from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


def create_session_factory(
    database_url: str,
    echo: bool = False,
) -> Tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create an engine and a session factory for ``database_url``."""
    # SQLite doesn't support pool_size / max_overflow / pool_pre_ping
    is_sqlite = database_url.startswith("sqlite")

    engine_kwargs: dict = {"echo": echo}
    if not is_sqlite:
        engine_kwargs.update(pool_size=5, max_overflow=5, pool_pre_ping=True)

    engine = create_async_engine(database_url, **engine_kwargs)
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return engine, session_factory

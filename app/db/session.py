from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import Settings

Base = declarative_base()


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the process-wide async engine. Called once from the app lifespan."""
    if settings.DATABASE_URL.startswith("sqlite"):
        return create_async_engine(settings.DATABASE_URL, echo=settings.DATABASE_LOGS)
    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DATABASE_LOGS,
        pool_size=20,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,
        pool_pre_ping=True,
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine):
    """Create chatbot tables if they don't exist."""
    # Register models on Base.metadata
    from app.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request):
    """Dependency to get an async database session."""
    async with request.app.state.sessionmaker() as session:
        yield session

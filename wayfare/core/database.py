from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from wayfare.core.settings import settings


class Base(DeclarativeBase):
    pass


def _normalize_url(url: str) -> str:
    # Some providers hand out postgres:// but SQLAlchemy requires an async driver
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


# Global engine and session factory
engine = create_async_engine(
    _normalize_url(settings.DATABASE_URL), echo=settings.DATABASE_ECHO
)
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Database dependency for FastAPI dependency injection."""
    async with SessionLocal() as session:
        yield session


async def create_tables() -> None:
    """Create all tables. Used for development and tests; production uses migrations."""
    # Register the mapped tables on Base.metadata
    import wayfare.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

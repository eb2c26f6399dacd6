"""Async SQLAlchemy engine and session factory.

Usage in routes:
    from fileservice.database import get_db

    @router.get("/files")
    async def list_files(db: AsyncSession = Depends(get_db)):
        store = FileStore(db)
        ...
"""
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from fileservice.config import settings


def _engine_options() -> dict:
    # SQLite drivers reject the queue pool sizing arguments
    if settings.DATABASE_URL.startswith("sqlite"):
        return {"echo": settings.DATABASE_ECHO}
    return {
        "echo": settings.DATABASE_ECHO,
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,
    }


engine = create_async_engine(settings.DATABASE_URL, **_engine_options())

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    """FastAPI dependency that yields an async DB session."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()

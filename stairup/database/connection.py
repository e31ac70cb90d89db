from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine, async_sessionmaker
from sqlalchemy.pool import AsyncAdaptedQueuePool
from contextlib import asynccontextmanager
from stairup.core.logger import get_logger

logger = get_logger("database")


def create_engine_for(database_url: str, **kwargs) -> AsyncEngine:
    """Create the async engine; pooled for Postgres, driver defaults otherwise."""
    if database_url.startswith("postgresql"):
        options = dict(
            echo=False,
            connect_args={
                "server_settings": {
                    "application_name": "stairup",
                    "jit": "off",
                },
                "command_timeout": 30,
            },
            poolclass=AsyncAdaptedQueuePool,
            pool_size=5,
            max_overflow=10,
            pool_timeout=30,
            pool_recycle=1800,
            pool_pre_ping=True,
        )
        options.update(kwargs)
        return create_async_engine(database_url, **options)
    return create_async_engine(database_url, echo=False, **kwargs)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def session_scope(sessionmaker: async_sessionmaker):
    """Context manager for a database session, rolled back on error."""
    async with sessionmaker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

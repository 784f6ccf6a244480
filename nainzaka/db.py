# db.py
import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool

from nainzaka.settings import settings

# --- Configuration & Setup ---
logger = logging.getLogger(__name__)
DATABASE_URL = settings.DATABASE_URL

# Hosted PostgreSQL providers hand out plain URLs; the async engine needs asyncpg.
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql+asyncpg://", 1)
    logger.info("✅ Connecting to PostgreSQL database.")
elif DATABASE_URL.startswith("postgresql://"):
    DATABASE_URL = DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)
    logger.info("✅ Connecting to PostgreSQL database.")
else:
    logger.info("✅ Using local SQLite database for development.")


# --- SQLAlchemy Engine & Session ---

if DATABASE_URL.startswith("sqlite"):
    # SQLite connections are cheap and must not outlive the event loop that opened them.
    engine = create_async_engine(DATABASE_URL, echo=False, poolclass=NullPool)
else:
    engine = create_async_engine(
        DATABASE_URL,
        echo=False,
        pool_size=10,
        max_overflow=5,
        pool_timeout=30,
        pool_recycle=1800,  # recycle before idle connections are dropped upstream
    )

async_session_maker = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

# Base class for declarative models. All models in `models.py` inherit from this.
Base = declarative_base()


# --- FastAPI Dependency ---

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session to each request.
    """
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

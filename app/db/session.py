"""
Database session and engine configuration.

This file sets up the async database connection to the primary store
using SQLAlchemy + asyncpg.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from app.core.config import settings
from app.errors import ConflictError


# Create the async database engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,  # When DEBUG=True, prints SQL queries to console
    future=True,
)

# Sessions are used to interact with the database (read, write, update, delete)
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Keeps data accessible after commit
)

# Alias for dependencies
AsyncSessionLocal = async_session_maker


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session.

    This is used by FastAPI to provide a database connection to your API endpoints.
    Services commit their own writes; anything left pending is committed here
    and rolled back if the request failed.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def get_async_session_context() -> AsyncGenerator[AsyncSession, None]:
    """Context manager helper for async DB sessions (used in tests/scripts)."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def _run_or_conflict(db: AsyncSession, operation) -> None:
    try:
        await operation()
    except StaleDataError as e:
        await db.rollback()
        raise ConflictError(
            "O registo foi alterado por outro pedido; recarregue e tente novamente"
        ) from e
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError(
            "Violação de unicidade ou integridade",
            details={"error": str(e.orig)},
        ) from e


async def commit_or_conflict(db: AsyncSession) -> None:
    """
    Commit, translating lost-update and uniqueness failures into ConflictError.

    Candidates carry a version counter; a stale write surfaces as StaleDataError.
    """
    await _run_or_conflict(db, db.commit)


async def flush_or_conflict(db: AsyncSession) -> None:
    """Flush pending writes with the same translation as commit_or_conflict."""
    await _run_or_conflict(db, db.flush)

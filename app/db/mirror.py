"""
Secondary relational mirror.

A non-authoritative copy of primary rows, written after the primary store.
Reads never go to the mirror.

Write semantics:
- candidate creation is at-most-once: if the mirror write fails the caller
  deletes the primary record and reports the failure;
- every other write is best-effort: failures are logged and the two stores
  are left divergent.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import String, Boolean, DateTime, Index
from sqlalchemy.dialects.postgresql import JSONB, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

from app.core.config import settings
from app.errors import DependencyError
from app.utils.canonical_json import canonical_hash, json_safe

logger = logging.getLogger(__name__)


class MirrorBase(DeclarativeBase):
    """Metadata of the mirror database, kept apart from the primary models."""
    pass


class MirrorRow(MirrorBase):
    """One mirrored record, keyed by source table and record id."""

    __tablename__ = "mirror_row"

    table_name: Mapped[str] = mapped_column(String(100), primary_key=True)
    record_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    payload: Mapped[Dict[str, Any]] = mapped_column(JSONB, nullable=False)
    checksum: Mapped[str] = mapped_column(String(64), nullable=False)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    written_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_mirror_row_table_written", "table_name", "written_at"),
    )


class SecondaryMirror:
    """Interface of the mirror. Implementations raise DependencyError on failure."""

    async def write(self, table: str, row: Dict[str, Any]) -> None:
        raise NotImplementedError

    async def mark_deleted(self, table: str, record_id) -> None:
        raise NotImplementedError


class NullMirror(SecondaryMirror):
    """Used when no mirror database is configured."""

    async def write(self, table: str, row: Dict[str, Any]) -> None:
        logger.debug("Mirror disabled, skipping write to %s", table)

    async def mark_deleted(self, table: str, record_id) -> None:
        logger.debug("Mirror disabled, skipping delete on %s", table)


class SqlMirror(SecondaryMirror):
    """Upserts rows into ``mirror_row`` on a dedicated engine."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def create_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(MirrorBase.metadata.create_all)

    async def write(self, table: str, row: Dict[str, Any]) -> None:
        payload = json_safe(row)
        record_id = str(payload.get("id") or uuid.uuid4())
        stmt = insert(MirrorRow).values(
            table_name=table,
            record_id=record_id,
            payload=payload,
            checksum=canonical_hash(payload),
            deleted=False,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[MirrorRow.table_name, MirrorRow.record_id],
            set_={
                "payload": stmt.excluded.payload,
                "checksum": stmt.excluded.checksum,
                "deleted": False,
                "written_at": func.now(),
            },
        )
        try:
            async with self.engine.begin() as conn:
                await conn.execute(stmt)
        except SQLAlchemyError as e:
            raise DependencyError(
                f"Mirror write to {table} failed",
                details={"table": table, "record_id": record_id},
            ) from e

    async def mark_deleted(self, table: str, record_id) -> None:
        stmt = (
            MirrorRow.__table__.update()
            .where(
                MirrorRow.table_name == table,
                MirrorRow.record_id == str(record_id),
            )
            .values(deleted=True, written_at=func.now())
        )
        try:
            async with self.engine.begin() as conn:
                await conn.execute(stmt)
        except SQLAlchemyError as e:
            raise DependencyError(
                f"Mirror delete on {table} failed",
                details={"table": table, "record_id": str(record_id)},
            ) from e


async def mirror_best_effort(
    mirror: SecondaryMirror,
    table: str,
    row: Optional[Dict[str, Any]] = None,
    *,
    deleted_id=None,
) -> bool:
    """
    Write to the mirror after a committed primary write.

    Failures are logged at WARNING and the stores are left divergent.

    Returns:
        True if the mirror accepted the write
    """
    try:
        if deleted_id is not None:
            await mirror.mark_deleted(table, deleted_id)
        else:
            await mirror.write(table, row or {})
    except DependencyError as e:
        logger.warning("Mirror diverged on %s: %s", table, e.message)
        return False
    return True


_mirror_engine: Optional[AsyncEngine] = None


def get_mirror() -> SecondaryMirror:
    """FastAPI dependency: the configured mirror."""
    global _mirror_engine
    if not settings.MIRROR_DATABASE_URL:
        return NullMirror()
    if _mirror_engine is None:
        _mirror_engine = create_async_engine(settings.MIRROR_DATABASE_URL, future=True)
    return SqlMirror(_mirror_engine)

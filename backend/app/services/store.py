"""Read/write helpers shared by every collection-backed service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError

from app.exceptions import ConflictError, UpstreamError, ValidationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql import Select

logger = logging.getLogger(__name__)

_MISSING_COLLECTION_MARKERS = ("does not exist", "no such table", "undefinedtable")


def _is_missing_collection(exc: SQLAlchemyError) -> bool:
    text = str(getattr(exc, "orig", exc)).lower()
    return any(marker in text for marker in _MISSING_COLLECTION_MARKERS)


def _is_unique_violation(exc: IntegrityError) -> bool:
    if getattr(exc.orig, "sqlstate", None) == "23505":
        return True
    return "unique" in str(exc.orig).lower()


async def fetch_all(session: AsyncSession, statement: Select[Any]) -> list[Any]:
    """Execute a query and return its scalar rows.

    A collection that has not been created yet reads as empty, so a fresh
    deployment renders instead of failing. Any other store failure is
    raised as ``UpstreamError``.
    """
    try:
        result = await session.execute(statement)
    except DBAPIError as exc:
        if _is_missing_collection(exc):
            logger.warning("Collection not found, returning empty result: %s", exc.orig)
            await session.rollback()
            return []
        logger.exception("Document store query failed")
        raise UpstreamError("Document store query failed") from exc
    return list(result.scalars().all())


async def fetch_one(session: AsyncSession, statement: Select[Any]) -> Any | None:
    """Like ``fetch_all`` but returns the first row or ``None``."""
    rows = await fetch_all(session, statement.limit(1))
    return rows[0] if rows else None


async def commit(session: AsyncSession) -> None:
    """Commit the unit of work, mapping store failures to application errors.

    A duplicate key is a ``ConflictError``; any other constraint violation is a
    ``ValidationError``; everything else is ``UpstreamError``.
    """
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if _is_unique_violation(exc):
            raise ConflictError("A document with the same key already exists") from None
        logger.warning("Document store rejected the write: %s", exc.orig)
        raise ValidationError("Document violates a store constraint") from exc
    except DBAPIError as exc:
        await session.rollback()
        logger.exception("Document store write failed")
        raise UpstreamError("Document store write failed") from exc

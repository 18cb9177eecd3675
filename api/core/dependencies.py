"""
Request-scoped dependencies shared by the feature routers.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

import asyncpg
from fastapi import HTTPException, status

from . import db
from .results import STORE_ERRORS

logger = logging.getLogger(__name__)


async def connection() -> AsyncIterator[asyncpg.Connection]:
    """
    Borrow one pooled connection for the lifetime of a request.

    The connection goes back to the pool on every exit path, including
    handler exceptions.
    """
    pool = db.pool()
    try:
        conn = await pool.acquire()
    except STORE_ERRORS as exc:
        logger.exception("db_acquire_failed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from exc

    try:
        yield conn
    finally:
        await pool.release(conn)

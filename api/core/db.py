"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`). Requests borrow one connection for
their whole lifetime through `core.dependencies.connection`.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg
from dotenv import dotenv_values

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def env_file() -> Path:
    return Path(os.environ.get("ENV_FILE", ".env").strip() or ".env")


def database_url() -> str:
    """
    Resolve the connection string.

    Order: process environment, then the key=value file from `env_file()`.
    Raises RuntimeError when neither provides a value.
    """
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        path = env_file()
        if path.is_file():
            url = (dotenv_values(path).get("DATABASE_URL") or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set (checked environment and env file).")
    return _sanitize_database_url(url)


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    min_size = _env_int("DB_POOL_MIN_SIZE", 1)
    max_size = max(min_size, _env_int("DB_POOL_MAX_SIZE", 5))
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=min_size,
        max_size=max_size,
        command_timeout=_env_int("DB_COMMAND_TIMEOUT", 30),
    )
    logger.info("db_pool_ready min_size=%s max_size=%s", min_size, max_size)


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(conn: asyncpg.Connection, sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await conn.fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(conn: asyncpg.Connection, sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await conn.fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def execute(conn: asyncpg.Connection, sql: str, *args: Any) -> str:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL).

    Returns the command status tag, e.g. "UPDATE 1".
    """
    return await conn.execute(sql, *args)


def affected_rows(status: str) -> int:
    # Status tags look like "UPDATE 3" or "INSERT 0 1"; the count is last.
    try:
        return int((status or "").rsplit(" ", 1)[-1])
    except ValueError:
        return 0

"""
Tag persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db
from core.results import StoreResult, guarded

from .schemas import Tag


def _row_to_tag(row: dict[str, Any]) -> Tag:
    return Tag(
        id=str(row["id"]),
        name=str(row["name"]),
        description=str(row["description"] or ""),
        slug=str(row["slug"]),
    )


@guarded("list_tags")
async def list_tags(conn: asyncpg.Connection) -> StoreResult[list[Tag]]:
    rows = await db.fetch_all(
        conn,
        """
        SELECT id, name, description, slug
        FROM tags
        ORDER BY id
        """,
    )
    return StoreResult.success([_row_to_tag(row) for row in rows])


@guarded("tag_exists")
async def tag_exists(conn: asyncpg.Connection, tag_id: int) -> StoreResult[bool]:
    row = await db.fetch_one(
        conn,
        """
        SELECT 1 AS ok
        FROM tags
        WHERE id = $1
        LIMIT 1
        """,
        tag_id,
    )
    return StoreResult.success(row is not None)


@guarded("get_tag_by_slug")
async def get_tag_by_slug(conn: asyncpg.Connection, slug: str) -> StoreResult[Tag]:
    row = await db.fetch_one(
        conn,
        """
        SELECT id, name, description, slug
        FROM tags
        WHERE slug = $1
        LIMIT 1
        """,
        slug,
    )
    if row is None:
        return StoreResult.not_found()
    return StoreResult.success(_row_to_tag(row))


@guarded("insert_tag")
async def insert_tag(conn: asyncpg.Connection, tag: Tag) -> StoreResult[str]:
    """
    Insert a tag and return its new id. A duplicate slug is a constraint
    violation.
    """
    row = await db.fetch_one(
        conn,
        """
        INSERT INTO tags (name, description, slug)
        VALUES ($1, $2, $3)
        RETURNING id
        """,
        tag.name,
        tag.description,
        tag.slug,
    )
    if row is None:
        raise RuntimeError("Failed to insert tag.")
    return StoreResult.success(str(row["id"]))

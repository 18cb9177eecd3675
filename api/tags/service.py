"""
Tag business logic.
"""

from __future__ import annotations

from typing import Any

import asyncpg
from pydantic import ValidationError

from core.http import bad_request, raise_for_store_error, require_fields

from . import repository, schemas


async def list_tags(conn: asyncpg.Connection) -> list[dict]:
    tags = raise_for_store_error(await repository.list_tags(conn))
    return [tag.model_dump() for tag in tags]


async def create_tag(conn: asyncpg.Connection, payload: Any) -> dict:
    require_fields(payload, "name", "slug")
    try:
        request = schemas.CreateTagRequest.model_validate(payload)
    except ValidationError as exc:
        raise bad_request("Invalid tag request") from exc

    tag = schemas.Tag(name=request.name, description=request.description, slug=request.slug)
    tag_id = raise_for_store_error(
        await repository.insert_tag(conn, tag),
        conflict="Tag slug already exists",
    )
    return tag.model_copy(update={"id": tag_id}).model_dump()

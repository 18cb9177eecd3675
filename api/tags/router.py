"""
Tag API endpoints.
"""

from __future__ import annotations

import asyncpg
from fastapi import APIRouter, Depends, Request

from core.dependencies import connection
from core.http import json_body

from . import service

router = APIRouter()


@router.get("/api/tags")
async def list_tags(conn: asyncpg.Connection = Depends(connection)) -> dict:
    return {"tags": await service.list_tags(conn)}


@router.post("/api/tags")
async def create_tag(
    request: Request,
    conn: asyncpg.Connection = Depends(connection),
) -> dict:
    payload = await json_body(request, invalid="Invalid JSON format")
    return {"tag": await service.create_tag(conn, payload)}

"""
Question API endpoints.
"""

from __future__ import annotations

import asyncpg
from fastapi import APIRouter, Depends, Request

from core.dependencies import connection
from core.http import json_body

from . import service

router = APIRouter()


@router.get("/api/questions/tag/slug/{slug}")
async def list_questions_for_tag(
    slug: str,
    conn: asyncpg.Connection = Depends(connection),
) -> dict:
    return {"questions": await service.questions_for_tag_slug(conn, slug)}


@router.put("/api/questions/{question_id}/vote")
async def vote(
    question_id: str,
    request: Request,
    conn: asyncpg.Connection = Depends(connection),
) -> dict:
    payload = await json_body(request, invalid="Invalid vote request")
    return {"question": await service.vote(conn, question_id, payload)}


@router.post("/api/questions")
async def create_question(
    request: Request,
    conn: asyncpg.Connection = Depends(connection),
) -> dict:
    payload = await json_body(request, invalid="Invalid JSON format")
    return {"question": await service.create_question(conn, payload)}

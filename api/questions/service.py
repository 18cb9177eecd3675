"""
Question business logic.

Scope:
- list questions of a tag resolved by slug
- record up/down votes
- create questions under an existing tag
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg
from fastapi import HTTPException, status
from pydantic import ValidationError

from core.http import bad_request, raise_for_store_error, require_fields
from core.results import StoreErrorKind
from tags import repository as tag_repository

from . import repository, schemas

logger = logging.getLogger(__name__)


def _tag_missing() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tag does not exist")


async def questions_for_tag_slug(conn: asyncpg.Connection, slug: str) -> list[dict]:
    try:
        tag = raise_for_store_error(
            await tag_repository.get_tag_by_slug(conn, slug),
            not_found="Tag not found",
        )
        questions = raise_for_store_error(await repository.list_questions_by_tag(conn, tag.id))
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("questions_for_tag_slug_failed slug=%s", slug)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from exc
    return [question.to_json() for question in questions]


async def vote(conn: asyncpg.Connection, question_id: str, payload: Any) -> dict:
    try:
        request = schemas.VoteRequest.model_validate(payload)
    except ValidationError as exc:
        raise bad_request("Invalid vote request") from exc

    if request.vote_type in (schemas.VOTE_UP, schemas.VOTE_DOWN):
        result = await repository.increment_vote(conn, question_id, request.vote_type)
    else:
        # Any other vote type is accepted and leaves both counters unchanged.
        result = await repository.get_question_by_id(conn, question_id)

    question = raise_for_store_error(result, not_found="Question not found")
    return question.to_json()


async def create_question(conn: asyncpg.Connection, payload: Any) -> dict:
    require_fields(payload, "question", "answer", "tagId")
    try:
        tag_id = schemas.parse_serial_id(payload["tagId"])
    except ValueError as exc:
        raise bad_request("Invalid tag ID format") from exc
    try:
        request = schemas.CreateQuestionRequest.model_validate(payload)
    except ValidationError as exc:
        raise bad_request("Invalid question request") from exc

    if not raise_for_store_error(await tag_repository.tag_exists(conn, tag_id)):
        raise _tag_missing()

    question = schemas.Question(
        tag_id=str(tag_id),
        question=request.question,
        answer=request.answer,
        votes_up=request.votes_up,
        votes_down=request.votes_down,
    )
    inserted = await repository.insert_question(conn, question)
    if inserted.error is StoreErrorKind.CONSTRAINT_VIOLATION:
        # The tag vanished between the existence check and the insert.
        raise _tag_missing()
    question_id = raise_for_store_error(inserted)

    fetched = await repository.get_question_by_id(conn, question_id)
    if not fetched.ok:
        logger.error("inserted_question_missing question_id=%s kind=%s", question_id, fetched.error.value)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve inserted question",
        )
    return fetched.value.to_json()

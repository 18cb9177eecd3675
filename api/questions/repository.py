"""
Question persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db
from core.results import StoreResult, guarded

from .schemas import VOTE_DOWN, VOTE_UP, Question, parse_serial_id

_QUESTION_COLUMNS = "id, tag_id, question, answer, votes_up, votes_down"


def _row_to_question(row: dict[str, Any]) -> Question:
    return Question(
        id=str(row["id"]),
        tag_id=str(row["tag_id"]),
        question=str(row["question"]),
        answer=str(row["answer"]),
        votes_up=int(row["votes_up"]),
        votes_down=int(row["votes_down"]),
    )


def _parse_id(value: str) -> int | None:
    try:
        return parse_serial_id(value)
    except ValueError:
        return None


@guarded("list_questions_by_tag")
async def list_questions_by_tag(conn: asyncpg.Connection, tag_id: str) -> StoreResult[list[Question]]:
    parsed = _parse_id(tag_id)
    if parsed is None:
        return StoreResult.success([])
    rows = await db.fetch_all(
        conn,
        f"""
        SELECT {_QUESTION_COLUMNS}
        FROM questions
        WHERE tag_id = $1
        ORDER BY id
        """,
        parsed,
    )
    return StoreResult.success([_row_to_question(row) for row in rows])


@guarded("get_question_by_id")
async def get_question_by_id(conn: asyncpg.Connection, question_id: str) -> StoreResult[Question]:
    parsed = _parse_id(question_id)
    if parsed is None:
        return StoreResult.not_found()
    row = await db.fetch_one(
        conn,
        f"""
        SELECT {_QUESTION_COLUMNS}
        FROM questions
        WHERE id = $1
        """,
        parsed,
    )
    if row is None:
        return StoreResult.not_found()
    return StoreResult.success(_row_to_question(row))


async def insert_question(conn: asyncpg.Connection, question: Question) -> StoreResult[str]:
    """
    Insert a question and return its new id.

    Raises ValueError when `question.tag_id` is not an integer id; database
    failures come back as a failed result like every other operation.
    """
    tag_id = parse_serial_id(question.tag_id)
    return await _insert_question_row(conn, tag_id, question)


@guarded("insert_question")
async def _insert_question_row(conn: asyncpg.Connection, tag_id: int, question: Question) -> StoreResult[str]:
    row = await db.fetch_one(
        conn,
        """
        INSERT INTO questions (tag_id, question, answer, votes_up, votes_down)
        VALUES ($1, $2, $3, $4, $5)
        RETURNING id
        """,
        tag_id,
        question.question,
        question.answer,
        question.votes_up,
        question.votes_down,
    )
    if row is None:
        raise RuntimeError("Failed to insert question.")
    return StoreResult.success(str(row["id"]))


@guarded("update_question")
async def update_question(conn: asyncpg.Connection, question: Question) -> StoreResult[bool]:
    """
    Overwrite the vote counters of an existing question. Other fields are
    left untouched.
    """
    parsed = _parse_id(question.id)
    if parsed is None:
        return StoreResult.not_found()
    status = await db.execute(
        conn,
        """
        UPDATE questions
        SET votes_up = $1,
            votes_down = $2
        WHERE id = $3
        """,
        question.votes_up,
        question.votes_down,
        parsed,
    )
    if db.affected_rows(status) == 0:
        return StoreResult.not_found()
    return StoreResult.success(True)


@guarded("increment_vote")
async def increment_vote(conn: asyncpg.Connection, question_id: str, vote_type: str) -> StoreResult[Question]:
    """
    Add one vote in a single statement so concurrent votes never overwrite
    each other.
    """
    if vote_type not in (VOTE_UP, VOTE_DOWN):
        raise ValueError(f"Unknown vote type: {vote_type!r}")
    parsed = _parse_id(question_id)
    if parsed is None:
        return StoreResult.not_found()
    row = await db.fetch_one(
        conn,
        """
        UPDATE questions
        SET votes_up = votes_up + CASE WHEN $2::text = 'up' THEN 1 ELSE 0 END,
            votes_down = votes_down + CASE WHEN $2::text = 'down' THEN 1 ELSE 0 END
        WHERE id = $1
        RETURNING id, tag_id, question, answer, votes_up, votes_down
        """,
        parsed,
        vote_type,
    )
    if row is None:
        return StoreResult.not_found()
    return StoreResult.success(_row_to_question(row))

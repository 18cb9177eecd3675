"""
Question records and request schemas.

JSON uses camelCase (`tagId`, `votesUp`, `votesDown`); Python code uses the
snake_case field names.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

VOTE_UP = "up"
VOTE_DOWN = "down"

# Upper bound of a Postgres `serial` column.
MAX_SERIAL_ID = 2**31 - 1


class Question(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    tag_id: str = Field(..., alias="tagId")
    question: str
    answer: str
    votes_up: int = Field(default=0, ge=0, alias="votesUp")
    votes_down: int = Field(default=0, ge=0, alias="votesDown")

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class CreateQuestionRequest(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    # Validated separately so a bad value maps to its own error message.
    tag_id: Any = Field(..., alias="tagId")
    votes_up: int = Field(default=0, ge=0, le=MAX_SERIAL_ID, alias="votesUp")
    votes_down: int = Field(default=0, ge=0, le=MAX_SERIAL_ID, alias="votesDown")


class VoteRequest(BaseModel):
    vote_type: str = Field(..., alias="voteType")


def parse_serial_id(value: Any) -> int:
    """
    Accept a numeric string ("12") or a plain int within the `serial` range.
    Raises ValueError otherwise.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid id: {value!r}")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
    else:
        raise ValueError(f"Invalid id: {value!r}")
    if parsed < 0 or parsed > MAX_SERIAL_ID:
        raise ValueError(f"Invalid id: {value!r}")
    return parsed

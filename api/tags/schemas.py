"""
Tag records and request schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Tag(BaseModel):
    id: str = ""
    name: str
    description: str
    slug: str


class CreateTagRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    slug: str = Field(..., min_length=1, max_length=200, pattern=r"^[A-Za-z0-9_-]+$")

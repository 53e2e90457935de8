"""Pydantic schemas for notes.

Learn: Separate "Create"/"Update" schemas (input) from "Read" schemas
(output). Input schemas forbid unknown fields and never coerce types:
`"tags": "x"` is an error, not a one-element list.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from notekeeper.schemas.validation import Validated, validate


class NoteCreate(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    tags: Optional[list[str]] = None
    category: Optional[str] = None


class NoteUpdate(BaseModel):
    """Partial update — only supplied fields change."""

    model_config = ConfigDict(extra="forbid", strict=True)

    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = Field(None, min_length=1)
    tags: Optional[list[str]] = None
    category: Optional[str] = None

    def changes(self) -> dict:
        """Fields the client actually sent. An explicit null counts as not sent."""
        return {
            k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None
        }


def parse_note_create(payload: Any) -> Validated[NoteCreate]:
    return validate(NoteCreate, payload)


def parse_note_update(payload: Any) -> Validated[NoteUpdate]:
    return validate(NoteUpdate, payload)


class NoteRead(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    tags: list[str]
    category: str
    user: uuid.UUID = Field(validation_alias="owner_id")
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_as_list(cls, v):
        # ORM side hands back an association-proxy collection
        return list(v) if v is not None else []


class NoteList(BaseModel):
    notes: list[NoteRead]
    total: int
    page: int
    limit: int
    pages: int

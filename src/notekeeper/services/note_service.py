"""Note service — ownership-scoped note CRUD.

Learn: Every query here filters on owner_id. A note that belongs to
someone else is never loaded, so it is reported exactly like a note that
does not exist (404, never 403) — callers cannot probe for other users'
note ids.
"""

import math
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.db.models import Note, NoteTag, utcnow
from notekeeper.errors import InvalidId, NotFound

DEFAULT_CATEGORY = "general"
MAX_LIMIT = 100
# Largest page whose offset still fits a signed 64-bit integer
MAX_PAGE = (2**63 - 1) // MAX_LIMIT


def parse_note_id(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        raise InvalidId("note")


@dataclass
class NotePage:
    notes: list[Note]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit)


class NoteService:
    """Business logic for notes. `owner_id` is always the caller."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Create ──────────────────────────────────────────

    async def create(
        self,
        owner_id: uuid.UUID,
        title: str,
        content: str,
        tags: Optional[list[str]] = None,
        category: Optional[str] = None,
    ) -> Note:
        note = Note(
            owner_id=owner_id,
            title=title,
            content=content,
            category=DEFAULT_CATEGORY if category is None else category,
        )
        note.tags = list(tags or [])
        self.db.add(note)
        await self.db.commit()
        return note

    # ─── Read ────────────────────────────────────────────

    async def list_notes(
        self,
        owner_id: uuid.UUID,
        page: int = 1,
        limit: int = 10,
        category: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> NotePage:
        """Newest first, filtered by exact category and/or tag membership."""
        filters = [Note.owner_id == owner_id]
        if category:
            filters.append(Note.category == category)
        if tag:
            filters.append(Note.tag_rows.any(NoteTag.tag == tag))

        q = (
            select(Note)
            .where(*filters)
            .order_by(Note.created_at.desc(), Note.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        notes = list((await self.db.execute(q)).scalars().all())

        count_q = select(func.count()).select_from(Note).where(*filters)
        total = (await self.db.execute(count_q)).scalar_one()

        return NotePage(notes=notes, total=total, page=page, limit=limit)

    async def get_note(self, note_id: str, owner_id: uuid.UUID) -> Note:
        nid = parse_note_id(note_id)
        result = await self.db.execute(
            select(Note).where(Note.id == nid, Note.owner_id == owner_id)
        )
        note = result.scalars().first()
        if note is None:
            raise NotFound("Note")
        return note

    # ─── Update / Delete ─────────────────────────────────

    async def update_note(
        self, note_id: str, changes: dict, owner_id: uuid.UUID
    ) -> Note:
        """Apply only the fields present in `changes`."""
        note = await self.get_note(note_id, owner_id)

        if "title" in changes:
            note.title = changes["title"]
        if "content" in changes:
            note.content = changes["content"]
        if "category" in changes:
            note.category = changes["category"]
        if "tags" in changes:
            note.tags = list(changes["tags"])
        note.updated_at = utcnow()

        await self.db.commit()
        return note

    async def delete_note(self, note_id: str, owner_id: uuid.UUID) -> None:
        note = await self.get_note(note_id, owner_id)
        await self.db.delete(note)
        await self.db.commit()

"""Note API routes.

Learn: Every route here sits behind the access guard (applied when the
router is mounted in api/__init__.py) and passes the caller's id down
as the owner. The service never sees an owner id from the request body
or URL.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.auth.dependencies import CurrentIdentity, get_current_identity
from notekeeper.db.engine import get_db
from notekeeper.schemas.note import (
    NoteList,
    NoteRead,
    parse_note_create,
    parse_note_update,
)
from notekeeper.services.note_service import MAX_LIMIT, MAX_PAGE, NoteService

router = APIRouter(prefix="/notes")


def _svc(db: AsyncSession = Depends(get_db)) -> NoteService:
    return NoteService(db)


@router.post("", response_model=NoteRead, status_code=201)
async def create_note(
    payload: Any = Body(None),
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: NoteService = Depends(_svc),
):
    body = parse_note_create(payload).unwrap()
    return await svc.create(
        owner_id=identity.user_uuid,
        title=body.title,
        content=body.content,
        tags=body.tags,
        category=body.category,
    )


@router.get("", response_model=NoteList)
async def list_notes(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(10, ge=1, le=MAX_LIMIT),
    category: Optional[str] = None,
    tag: Optional[str] = None,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: NoteService = Depends(_svc),
):
    """List the caller's notes, newest first, optionally filtered."""
    result = await svc.list_notes(
        identity.user_uuid, page=page, limit=limit, category=category, tag=tag
    )
    return NoteList(
        notes=[NoteRead.model_validate(n) for n in result.notes],
        total=result.total,
        page=result.page,
        limit=result.limit,
        pages=result.pages,
    )


@router.get("/{note_id}", response_model=NoteRead)
async def get_note(
    note_id: str,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: NoteService = Depends(_svc),
):
    return await svc.get_note(note_id, identity.user_uuid)


@router.put("/{note_id}", response_model=NoteRead)
async def update_note(
    note_id: str,
    payload: Any = Body(None),
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: NoteService = Depends(_svc),
):
    """Partially update a note (title, content, tags, category)."""
    body = parse_note_update(payload).unwrap()
    return await svc.update_note(note_id, body.changes(), identity.user_uuid)


@router.delete("/{note_id}")
async def delete_note(
    note_id: str,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: NoteService = Depends(_svc),
):
    await svc.delete_note(note_id, identity.user_uuid)
    return {"deleted": True}

"""Notes CRUD: every query scoped to the caller's tenant."""

import uuid

from fastapi import APIRouter, Query, status

from notespace.api.deps import Gate, MemberPrincipal, Store
from notespace.models.note import (
    NoteCreate,
    NoteDeleted,
    NoteList,
    NotePinRead,
    NoteRead,
    NoteRecommendation,
    NoteUpdate,
)
from notespace.services import notes

router = APIRouter(prefix="/notes", tags=["notes"])


@router.post("", response_model=NoteRead, status_code=status.HTTP_201_CREATED)
async def create_note(
    body: NoteCreate,
    principal: MemberPrincipal,
    store: Store,
    gate: Gate,
) -> NoteRead:
    return await notes.create_note(store, gate, principal, body)


@router.get("", response_model=NoteList)
async def list_notes(
    principal: MemberPrincipal,
    store: Store,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=notes.DEFAULT_PAGE_SIZE, ge=1, le=notes.MAX_PAGE_SIZE),
) -> NoteList:
    return await notes.list_notes(store, principal, page=page, limit=limit)


# Declared before /{note_id} so the literal path wins
@router.get("/recommendations", response_model=list[NoteRecommendation])
async def list_recommendations(
    principal: MemberPrincipal,
    store: Store,
) -> list[NoteRecommendation]:
    return await notes.recommendations(store, principal)


@router.get("/{note_id}", response_model=NoteRead)
async def get_note(
    note_id: uuid.UUID,
    principal: MemberPrincipal,
    store: Store,
) -> NoteRead:
    return await notes.get_note(store, principal, note_id)


@router.put("/{note_id}", response_model=NoteRead)
async def update_note(
    note_id: uuid.UUID,
    body: NoteUpdate,
    principal: MemberPrincipal,
    store: Store,
) -> NoteRead:
    return await notes.update_note(store, principal, note_id, body)


@router.delete("/{note_id}", response_model=NoteDeleted)
async def delete_note(
    note_id: uuid.UUID,
    principal: MemberPrincipal,
    store: Store,
) -> NoteDeleted:
    return await notes.delete_note(store, principal, note_id)


@router.post("/{note_id}/toggle-pin", response_model=NotePinRead)
async def toggle_pin(
    note_id: uuid.UUID,
    principal: MemberPrincipal,
    store: Store,
) -> NotePinRead:
    return await notes.toggle_pin(store, principal, note_id)

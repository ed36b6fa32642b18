"""Note operations composed from the store, the policy gates and the subscription gate."""

import logging
import math
import uuid

from notespace.core.errors import LimitReached, NotFound, ValidationError
from notespace.models.note import (
    COLOR_MAX_LENGTH,
    CONTENT_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    Note,
    NoteAuthor,
    NoteCreate,
    NoteDeleted,
    NoteList,
    NotePinRead,
    NoteRead,
    NoteRecommendation,
    NoteUpdate,
    Pagination,
)
from notespace.models.user import User
from notespace.services.policy import ensure_author
from notespace.services.principal import Principal
from notespace.services.store import NotesStore
from notespace.services.subscription import SubscriptionGate

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
RECOMMENDATION_COUNT = 5


def to_read(note: Note, author: User | None) -> NoteRead:
    return NoteRead(
        id=note.id,
        tenant_id=note.tenant_id,
        title=note.title,
        content=note.content,
        is_pinned=note.is_pinned,
        bg_color=note.bg_color,
        text_color=note.text_color,
        author=NoteAuthor(id=author.id, email=author.email, role=author.role) if author else None,
        created_at=note.created_at,
        updated_at=note.updated_at,
    )


def validate_fields(
    title: str,
    content: str,
    bg_color: str | None = None,
    text_color: str | None = None,
) -> tuple[str, str]:
    """Return trimmed (title, content) or raise ValidationError."""
    title = (title or "").strip()
    content = (content or "").strip()
    if not title or not content:
        raise ValidationError("Title and content are required")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be {TITLE_MAX_LENGTH} characters or less")
    if len(content) > CONTENT_MAX_LENGTH:
        raise ValidationError(f"Content must be {CONTENT_MAX_LENGTH:,} characters or less")
    for name, value in (("bg_color", bg_color), ("text_color", text_color)):
        if value is not None and len(value) > COLOR_MAX_LENGTH:
            raise ValidationError(f"{name} must be {COLOR_MAX_LENGTH} characters or less")
    return title, content


async def create_note(
    store: NotesStore,
    gate: SubscriptionGate,
    principal: Principal,
    body: NoteCreate,
) -> NoteRead:
    title, content = validate_fields(body.title, body.content, body.bg_color, body.text_color)

    if not await gate.can_create_note(principal.tenant_id):
        note_count = await store.count_notes(principal.tenant_id)
        logger.info(
            "Note limit reached for tenant %s (%d notes)", principal.tenant_slug, note_count
        )
        raise LimitReached(
            note_count=note_count,
            note_limit=gate.free_note_limit,
            tenant_slug=principal.tenant_slug,
        )

    note = await store.add_note(Note(
        tenant_id=principal.tenant_id,
        author_id=principal.user_id,
        title=title,
        content=content,
        is_pinned=body.is_pinned,
        bg_color=body.bg_color,
        text_color=body.text_color,
    ))
    author = await store.get_tenant_user(principal.tenant_id, principal.user_id)
    return to_read(note, author)


async def list_notes(
    store: NotesStore,
    principal: Principal,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> NoteList:
    if page < 1:
        raise ValidationError("page must be 1 or greater")
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

    total = await store.count_notes(principal.tenant_id)
    rows = await store.list_notes(principal.tenant_id, offset=(page - 1) * limit, limit=limit)
    total_pages = math.ceil(total / limit)

    return NoteList(
        notes=[to_read(note, author) for note, author in rows],
        pagination=Pagination(
            current_page=page,
            total_pages=total_pages,
            total_notes=total,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        ),
    )


async def get_note(store: NotesStore, principal: Principal, note_id: uuid.UUID) -> NoteRead:
    note, author = await _get_or_404(store, principal, note_id)
    return to_read(note, author)


async def update_note(
    store: NotesStore,
    principal: Principal,
    note_id: uuid.UUID,
    body: NoteUpdate,
) -> NoteRead:
    title, content = validate_fields(body.title, body.content, body.bg_color, body.text_color)

    existing, author = await _get_or_404(store, principal, note_id)
    ensure_author(principal, existing, action="edit")

    changes = body.model_dump(exclude_unset=True)
    changes.update(title=title, content=content)
    if changes.get("is_pinned") is None:
        changes.pop("is_pinned", None)

    updated = await store.update_note(principal.tenant_id, note_id, changes)
    if updated is None:
        # Deleted between the check and the write
        raise NotFound("Note not found")
    return to_read(updated, author)


async def delete_note(store: NotesStore, principal: Principal, note_id: uuid.UUID) -> NoteDeleted:
    existing, _ = await _get_or_404(store, principal, note_id)
    ensure_author(principal, existing, action="delete")

    if not await store.delete_note(principal.tenant_id, note_id):
        raise NotFound("Note not found")
    return NoteDeleted(message="Note deleted successfully", note_id=note_id)


async def toggle_pin(store: NotesStore, principal: Principal, note_id: uuid.UUID) -> NotePinRead:
    existing, _ = await _get_or_404(store, principal, note_id)
    ensure_author(principal, existing, action="pin")

    updated = await store.update_note(
        principal.tenant_id, note_id, {"is_pinned": not existing.is_pinned}
    )
    if updated is None:
        raise NotFound("Note not found")
    return NotePinRead(id=updated.id, is_pinned=updated.is_pinned)


async def recommendations(store: NotesStore, principal: Principal) -> list[NoteRecommendation]:
    """Rule-based picks: pinned notes first, then the most recently updated."""
    notes = await store.top_notes(principal.tenant_id, limit=RECOMMENDATION_COUNT)
    return [
        NoteRecommendation(
            note_id=note.id,
            title=note.title,
            reason="Pinned as important" if note.is_pinned else "Recently updated",
            score=round((0.9 if note.is_pinned else 0.7) - idx * 0.05, 2),
        )
        for idx, note in enumerate(notes)
    ]


# ── Internal helper ───────────────────────────────────────────

async def _get_or_404(
    store: NotesStore, principal: Principal, note_id: uuid.UUID
) -> tuple[Note, User | None]:
    row = await store.get_note(principal.tenant_id, note_id)
    if row is None:
        raise NotFound("Note not found")
    return row

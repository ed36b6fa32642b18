"""Note model: authored by a user, partitioned by tenant."""

import uuid
from datetime import datetime

from sqlalchemy import Text
from sqlmodel import Column, Field, SQLModel

from notespace.models.base import TimestampMixin, new_uuid
from notespace.models.user import UserRole

TITLE_MAX_LENGTH = 200
CONTENT_MAX_LENGTH = 10_000
COLOR_MAX_LENGTH = 32


class Note(TimestampMixin, SQLModel, table=True):
    __tablename__ = "notes"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    # Copied from the author at creation time and never changed
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    author_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)

    title: str = Field(max_length=TITLE_MAX_LENGTH, nullable=False)
    content: str = Field(sa_column=Column(Text, nullable=False))

    is_pinned: bool = Field(default=False, index=True)
    bg_color: str | None = Field(default=None, max_length=COLOR_MAX_LENGTH)
    text_color: str | None = Field(default=None, max_length=COLOR_MAX_LENGTH)


# ── Pydantic schemas ─────────────────────────────────────────

class NoteCreate(SQLModel):
    # Length bounds are enforced by the note service, not here
    title: str
    content: str
    is_pinned: bool = False
    bg_color: str | None = None
    text_color: str | None = None


class NoteUpdate(SQLModel):
    title: str
    content: str
    is_pinned: bool | None = None
    bg_color: str | None = None
    text_color: str | None = None


class NoteAuthor(SQLModel):
    id: uuid.UUID
    email: str
    role: UserRole


class NoteRead(SQLModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    title: str
    content: str
    is_pinned: bool
    bg_color: str | None
    text_color: str | None
    author: NoteAuthor | None
    created_at: datetime
    updated_at: datetime


class Pagination(SQLModel):
    current_page: int
    total_pages: int
    total_notes: int
    has_next_page: bool
    has_prev_page: bool


class NoteList(SQLModel):
    notes: list[NoteRead]
    pagination: Pagination


class NotePinRead(SQLModel):
    id: uuid.UUID
    is_pinned: bool


class NoteDeleted(SQLModel):
    message: str
    note_id: uuid.UUID


class NoteRecommendation(SQLModel):
    note_id: uuid.UUID
    title: str
    reason: str
    score: float

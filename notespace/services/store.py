"""Tenant-scoped store over tenants, users and notes.

One instance is built at startup and shared by every request. Each method
runs in its own short-lived session, so callers never hold a session across
gates. Every note / user query that serves a principal is filtered by
``tenant_id``; the only unscoped reads are the identity lookups used by
login and principal resolution.

Updates and deletes follow an existence-check-then-write pattern inside a
single session: if the row disappears first, the method returns ``None`` /
``False`` rather than raising.
"""

import uuid
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select

from notespace.core.errors import Conflict, InvariantViolation
from notespace.models.base import utcnow
from notespace.models.note import Note
from notespace.models.tenant import SubscriptionTier, Tenant
from notespace.models.user import User, UserRole

NoteWithAuthor = tuple[Note, User | None]


class NotesStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # ── Tenants ───────────────────────────────────────────────

    async def get_tenant(self, tenant_id: uuid.UUID) -> Tenant | None:
        async with self._session_factory() as session:
            return await session.get(Tenant, tenant_id)

    async def get_tenant_by_slug(self, slug: str) -> Tenant | None:
        async with self._session_factory() as session:
            result = await session.execute(select(Tenant).where(Tenant.slug == slug))
            return result.scalar_one_or_none()

    async def create_tenant_with_admin(self, tenant: Tenant, admin: User) -> tuple[Tenant, User]:
        """Insert a tenant and its first admin in one transaction."""
        async with self._session_factory() as session:
            try:
                session.add(tenant)
                await session.flush()  # populate tenant.id
                admin.tenant_id = tenant.id
                admin.role = UserRole.ADMIN
                session.add(admin)
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise Conflict("Email or tenant slug is already taken") from exc
            return tenant, admin

    async def set_subscription_tier(
        self, tenant_id: uuid.UUID, tier: SubscriptionTier
    ) -> Tenant | None:
        async with self._session_factory() as session:
            tenant = await session.get(Tenant, tenant_id)
            if tenant is None:
                return None
            tenant.subscription_tier = tier
            tenant.updated_at = utcnow()
            session.add(tenant)
            await session.commit()
            return tenant

    # ── Users ─────────────────────────────────────────────────

    async def get_user(self, user_id: uuid.UUID) -> User | None:
        """Identity lookup by primary key, used only for principal resolution."""
        async with self._session_factory() as session:
            return await session.get(User, user_id)

    async def find_user_by_email(self, email: str) -> User | None:
        async with self._session_factory() as session:
            result = await session.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()

    async def get_tenant_user(self, tenant_id: uuid.UUID, user_id: uuid.UUID) -> User | None:
        async with self._session_factory() as session:
            return await self._scoped_user(session, tenant_id, user_id)

    async def list_tenant_users(self, tenant_id: uuid.UUID) -> Sequence[User]:
        async with self._session_factory() as session:
            stmt = (
                select(User)
                .where(User.tenant_id == tenant_id)
                .order_by(User.created_at.desc())  # type: ignore[union-attr]
            )
            result = await session.execute(stmt)
            return result.scalars().all()

    async def count_tenant_users(self, tenant_id: uuid.UUID) -> int:
        async with self._session_factory() as session:
            stmt = select(func.count()).select_from(User).where(User.tenant_id == tenant_id)
            return (await session.execute(stmt)).scalar_one()

    async def add_user(self, user: User) -> User:
        async with self._session_factory() as session:
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise Conflict("A user with this email already exists") from exc
            return user

    async def set_user_role(
        self, tenant_id: uuid.UUID, user_id: uuid.UUID, role: UserRole
    ) -> User | None:
        """Change a user's role. Demoting the tenant's last admin raises
        ``InvariantViolation`` and leaves the row untouched."""
        async with self._session_factory() as session:
            await self._lock_admins(session, tenant_id)
            user = await self._scoped_user(session, tenant_id, user_id)
            if user is None:
                return None
            was_admin = user.role == UserRole.ADMIN
            user.role = role
            user.updated_at = utcnow()
            session.add(user)
            await session.flush()
            if was_admin:
                await self._ensure_admin_remains(session, tenant_id)
            await session.commit()
            return user

    async def delete_user(self, tenant_id: uuid.UUID, user_id: uuid.UUID) -> int | None:
        """Delete a user and every note they authored. Returns the number of notes removed.

        Removing the tenant's last admin raises ``InvariantViolation`` and
        nothing is deleted.
        """
        async with self._session_factory() as session:
            await self._lock_admins(session, tenant_id)
            user = await self._scoped_user(session, tenant_id, user_id)
            if user is None:
                return None
            was_admin = user.role == UserRole.ADMIN
            result = await session.execute(
                delete(Note).where(
                    Note.tenant_id == tenant_id,
                    Note.author_id == user_id,
                )
            )
            await session.delete(user)
            await session.flush()
            if was_admin:
                await self._ensure_admin_remains(session, tenant_id)
            await session.commit()
            return result.rowcount

    # ── Notes ─────────────────────────────────────────────────

    async def get_note(self, tenant_id: uuid.UUID, note_id: uuid.UUID) -> NoteWithAuthor | None:
        async with self._session_factory() as session:
            stmt = self._notes_with_author(tenant_id).where(Note.id == note_id)
            row = (await session.execute(stmt)).first()
            if row is None:
                return None
            return row[0], row[1]

    async def list_notes(
        self, tenant_id: uuid.UUID, offset: int, limit: int
    ) -> list[NoteWithAuthor]:
        async with self._session_factory() as session:
            stmt = (
                self._notes_with_author(tenant_id)
                .order_by(
                    Note.is_pinned.desc(),  # type: ignore[attr-defined]
                    Note.created_at.desc(),  # type: ignore[union-attr]
                )
                .offset(offset)
                .limit(limit)
            )
            result = await session.execute(stmt)
            return [(note, author) for note, author in result.all()]

    async def top_notes(self, tenant_id: uuid.UUID, limit: int) -> Sequence[Note]:
        """Pinned notes first, then most recently updated."""
        async with self._session_factory() as session:
            stmt = (
                select(Note)
                .where(Note.tenant_id == tenant_id)
                .order_by(
                    Note.is_pinned.desc(),  # type: ignore[attr-defined]
                    Note.updated_at.desc(),  # type: ignore[union-attr]
                )
                .limit(limit)
            )
            result = await session.execute(stmt)
            return result.scalars().all()

    async def count_notes(
        self,
        tenant_id: uuid.UUID,
        since: datetime | None = None,
        author_id: uuid.UUID | None = None,
    ) -> int:
        async with self._session_factory() as session:
            stmt = select(func.count()).select_from(Note).where(Note.tenant_id == tenant_id)
            if since is not None:
                stmt = stmt.where(Note.created_at >= since)
            if author_id is not None:
                stmt = stmt.where(Note.author_id == author_id)
            return (await session.execute(stmt)).scalar_one()

    async def add_note(self, note: Note) -> Note:
        async with self._session_factory() as session:
            session.add(note)
            await session.commit()
            return note

    async def update_note(
        self, tenant_id: uuid.UUID, note_id: uuid.UUID, changes: dict[str, Any]
    ) -> Note | None:
        async with self._session_factory() as session:
            note = await self._scoped_note(session, tenant_id, note_id)
            if note is None:
                return None
            for field, value in changes.items():
                setattr(note, field, value)
            note.updated_at = utcnow()
            session.add(note)
            await session.commit()
            return note

    async def delete_note(self, tenant_id: uuid.UUID, note_id: uuid.UUID) -> bool:
        async with self._session_factory() as session:
            note = await self._scoped_note(session, tenant_id, note_id)
            if note is None:
                return False
            await session.delete(note)
            await session.commit()
            return True

    # ── Internal helpers ──────────────────────────────────────

    @staticmethod
    def _notes_with_author(tenant_id: uuid.UUID):
        return (
            select(Note, User)
            .join(User, User.id == Note.author_id, isouter=True)  # type: ignore[arg-type]
            .where(Note.tenant_id == tenant_id)
        )

    @staticmethod
    async def _scoped_user(
        session: AsyncSession, tenant_id: uuid.UUID, user_id: uuid.UUID
    ) -> User | None:
        stmt = select(User).where(User.id == user_id, User.tenant_id == tenant_id)
        return (await session.execute(stmt)).scalar_one_or_none()

    @staticmethod
    async def _scoped_note(
        session: AsyncSession, tenant_id: uuid.UUID, note_id: uuid.UUID
    ) -> Note | None:
        stmt = select(Note).where(Note.id == note_id, Note.tenant_id == tenant_id)
        return (await session.execute(stmt)).scalar_one_or_none()

    @staticmethod
    async def _lock_admins(session: AsyncSession, tenant_id: uuid.UUID) -> None:
        # Row locks serialize concurrent demotions on Postgres; SQLite ignores
        # FOR UPDATE and serializes on the write lock instead.
        stmt = (
            select(User.id)
            .where(User.tenant_id == tenant_id, User.role == UserRole.ADMIN)
            .with_for_update()
        )
        (await session.execute(stmt)).all()

    @staticmethod
    async def _ensure_admin_remains(session: AsyncSession, tenant_id: uuid.UUID) -> None:
        """Recount admins after a pending write; roll back if none are left."""
        stmt = (
            select(func.count())
            .select_from(User)
            .where(User.tenant_id == tenant_id, User.role == UserRole.ADMIN)
        )
        if (await session.execute(stmt)).scalar_one() == 0:
            await session.rollback()
            raise InvariantViolation("At least one admin is required per tenant")

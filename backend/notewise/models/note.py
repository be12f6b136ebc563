"""
NoteWise Backend - Note SQLAlchemy Model
========================================

What:  ORM model for the `notes` table.
Who:   NoteService for owner-scoped CRUD; Alembic for schema management.

Table design:
    - user_id: owner id issued by the external auth provider; every query
      filters on it
    - deleted_at: soft delete marker. NULL = active, set = in the trash
    - created_at / updated_at: UTC, timezone aware
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Index, Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from notewise.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A user's text note.

    Lifecycle:
        1. Created active (deleted_at IS NULL)
        2. Edited any number of times (updated_at bumped)
        3. Soft-deleted into the trash (deleted_at set), restorable
        4. Permanently deleted from the trash; summaries and tags cascade
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
        comment="Owner id from the auth provider",
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
        default=None,
        comment="Soft delete marker; NULL while the note is active",
    )

    __table_args__ = (
        Index("notes_user_id_idx", user_id),
        Index("notes_created_at_idx", created_at),
        Index("notes_deleted_at_idx", deleted_at),
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, user_id={self.user_id}, deleted={self.is_deleted})>"

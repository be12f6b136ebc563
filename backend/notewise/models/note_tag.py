"""ORM model for `note_tags`: one row per AI-suggested tag of a note."""

import uuid

from sqlalchemy import ForeignKey, Index, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from notewise.database import Base


class NoteTag(Base):
    __tablename__ = "note_tags"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    note_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
    )

    tag: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        Index("note_tags_note_id_idx", note_id),
        Index("note_tags_tag_idx", tag),
    )

    def __repr__(self) -> str:
        return f"<NoteTag(note_id={self.note_id}, tag='{self.tag}')>"

"""
NoteWise Backend - Summary SQLAlchemy Model
===========================================

What:  ORM model for `summaries`: AI-generated bullet summaries of a note.
How:   Regeneration replaces the note's rows with a single new one; reads
       take the newest row. `model` records which Gemini model wrote it.
"""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from notewise.database import Base
from notewise.models.note import utcnow


class Summary(Base):
    __tablename__ = "summaries"

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

    model: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("summaries_note_id_idx", note_id),
    )

    def __repr__(self) -> str:
        return f"<Summary(id={self.id}, note_id={self.note_id}, model='{self.model}')>"

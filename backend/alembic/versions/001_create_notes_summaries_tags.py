"""Create notes, summaries and note_tags tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema. Notes are owner-scoped and soft-deletable; summaries
       and tags hang off a note and cascade when it is permanently deleted.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "notes",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            comment="Owner id from the auth provider",
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "deleted_at",
            sa.TIMESTAMP(timezone=True),
            nullable=True,
            comment="Soft delete marker; NULL while the note is active",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("notes_user_id_idx", "notes", ["user_id"])
    op.create_index("notes_created_at_idx", "notes", ["created_at"])
    op.create_index("notes_deleted_at_idx", "notes", ["deleted_at"])

    op.create_table(
        "summaries",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("note_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("model", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["note_id"], ["notes.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("summaries_note_id_idx", "summaries", ["note_id"])

    op.create_table(
        "note_tags",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("note_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("tag", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["note_id"], ["notes.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("note_tags_note_id_idx", "note_tags", ["note_id"])
    op.create_index("note_tags_tag_idx", "note_tags", ["tag"])


def downgrade() -> None:
    op.drop_index("note_tags_tag_idx", table_name="note_tags")
    op.drop_index("note_tags_note_id_idx", table_name="note_tags")
    op.drop_table("note_tags")
    op.drop_index("summaries_note_id_idx", table_name="summaries")
    op.drop_table("summaries")
    op.drop_index("notes_deleted_at_idx", table_name="notes")
    op.drop_index("notes_created_at_idx", table_name="notes")
    op.drop_index("notes_user_id_idx", table_name="notes")
    op.drop_table("notes")

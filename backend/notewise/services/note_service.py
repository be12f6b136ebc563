"""
NoteWise Backend - Note Service (Business Logic Orchestrator)
=============================================================

What:  Owner-scoped note CRUD plus the AI summary/tag regeneration workflows.
How:   Composes the ORM models with an LLMService (GeminiService by default).
Who:   Called by route handlers; receives the request's AsyncSession.

Regeneration Flow (POST /api/notes/{id}/summary):
    ┌──────────────┐    ┌───────────────────┐    ┌─────────────────────┐
    │ Load note    │───▶│ generate_summary  │───▶│ Replace summary row │
    │ (owner only) │    │ (GeminiService)   │    │ (model, content)    │
    └──────────────┘    └───────────────────┘    └─────────────────────┘

    The AI call happens before any write, so a GeminiError leaves the
    stored summary untouched. The request's session commits or rolls back
    as a whole (database.get_db_session).

Ownership:
    Every lookup filters on user_id. Another user's note raises the same
    NotFoundError as a missing one.

Error Handling Strategy:
    SQLAlchemy failures become DatabaseError (generic message, details in
    logs). NotFoundError, GeminiError and ConfigurationError propagate as-is.
"""

import logging
import uuid
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notewise.exceptions import DatabaseError, NotFoundError
from notewise.models.note import Note, utcnow
from notewise.models.note_tag import NoteTag
from notewise.models.summary import Summary
from notewise.schemas.note import (
    PREVIEW_LENGTH,
    NoteCreateRequest,
    NoteListItem,
    NoteListResponse,
    NoteResponse,
    NoteUpdateRequest,
    SummaryResponse,
    TagsResponse,
    TrashResponse,
)
from notewise.services.gemini_service import gemini_service
from notewise.services.llm_base import LLMService

logger = logging.getLogger(__name__)


class NoteService:
    """
    Business logic layer for note operations.

    Stateless apart from the injected LLMService; one module-level instance
    serves every request.
    """

    def __init__(self, llm: LLMService = gemini_service):
        self.llm = llm

    # ── Lookups ───────────────────────────────────────────────────────────

    async def _get_owned_note(
        self,
        db: AsyncSession,
        user_id: UUID,
        note_id: UUID,
        in_trash: bool = False,
    ) -> Note:
        """
        Fetch a note owned by `user_id`.

        in_trash=False matches active notes only, in_trash=True matches
        soft-deleted notes only.
        """
        query = select(Note).where(Note.id == note_id, Note.user_id == user_id)
        if in_trash:
            query = query.where(Note.deleted_at.is_not(None))
        else:
            query = query.where(Note.deleted_at.is_(None))

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": str(note_id)},
            )

        note = result.scalar_one_or_none()
        if note is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        return note

    async def get_note(self, db: AsyncSession, user_id: UUID, note_id: UUID) -> NoteResponse:
        """Active note with its latest summary and its tags."""
        note = await self._get_owned_note(db, user_id, note_id)

        try:
            summary_result = await db.execute(
                select(Summary)
                .where(Summary.note_id == note.id)
                .order_by(desc(Summary.created_at))
                .limit(1)
            )
            summary = summary_result.scalar_one_or_none()

            tag_result = await db.execute(
                select(NoteTag.tag).where(NoteTag.note_id == note.id)
            )
            tags = list(tag_result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error loading AI data for note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": str(note_id)},
            )

        response = self._to_response(note)
        if summary is not None:
            response.summary = SummaryResponse.model_validate(summary)
        response.tags = tags
        return response

    async def list_notes(
        self,
        db: AsyncSession,
        user_id: UUID,
        limit: int = 20,
        cursor: Optional[str] = None,
    ) -> NoteListResponse:
        """
        Active notes, newest first, with created_at cursor pagination.

        One extra row is fetched to tell whether another page exists. An
        unparseable cursor is ignored (first page).
        """
        query = select(Note).where(Note.user_id == user_id, Note.deleted_at.is_(None))

        if cursor:
            cursor_dt = self._parse_cursor(cursor)
            if cursor_dt is not None:
                query = query.where(Note.created_at < cursor_dt)

        query = query.order_by(desc(Note.created_at)).limit(limit + 1)

        try:
            result = await db.execute(query)
            notes = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            )

        has_more = len(notes) > limit
        if has_more:
            notes = notes[:limit]

        next_cursor = notes[-1].created_at.isoformat() if has_more and notes else None

        return NoteListResponse(
            notes=[self._to_list_item(note) for note in notes],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def list_trash(self, db: AsyncSession, user_id: UUID) -> TrashResponse:
        """Soft-deleted notes, most recently deleted first."""
        query = (
            select(Note)
            .where(Note.user_id == user_id, Note.deleted_at.is_not(None))
            .order_by(desc(Note.deleted_at))
        )
        try:
            result = await db.execute(query)
            notes = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing trash: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not retrieve the trash. Please try again.")

        return TrashResponse(notes=[self._to_list_item(note) for note in notes])

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_note(
        self, db: AsyncSession, user_id: UUID, payload: NoteCreateRequest
    ) -> NoteResponse:
        now = utcnow()
        note = Note(
            id=uuid.uuid4(),
            user_id=user_id,
            title=payload.title,
            content=payload.content,
            created_at=now,
            updated_at=now,
        )
        db.add(note)
        await self._flush(db, "Could not save the note. Please try again.")
        logger.info("Note %s created (%d chars)", note.id, len(note.content))
        return self._to_response(note)

    async def update_note(
        self,
        db: AsyncSession,
        user_id: UUID,
        note_id: UUID,
        payload: NoteUpdateRequest,
    ) -> NoteResponse:
        note = await self._get_owned_note(db, user_id, note_id)
        note.title = payload.title
        note.content = payload.content
        note.updated_at = utcnow()
        await self._flush(db, "Could not update the note. Please try again.")
        logger.info("Note %s updated", note.id)
        return self._to_response(note)

    async def delete_note(self, db: AsyncSession, user_id: UUID, note_id: UUID) -> None:
        """Move an active note to the trash."""
        note = await self._get_owned_note(db, user_id, note_id)
        note.deleted_at = utcnow()
        await self._flush(db, "Could not delete the note. Please try again.")
        logger.info("Note %s moved to trash", note.id)

    async def restore_note(self, db: AsyncSession, user_id: UUID, note_id: UUID) -> NoteResponse:
        """Bring a trashed note back."""
        note = await self._get_owned_note(db, user_id, note_id, in_trash=True)
        note.deleted_at = None
        await self._flush(db, "Could not restore the note. Please try again.")
        logger.info("Note %s restored", note.id)
        return self._to_response(note)

    async def hard_delete_note(self, db: AsyncSession, user_id: UUID, note_id: UUID) -> None:
        """
        Permanently delete a note that is already in the trash.

        Summaries and tags go with it (ON DELETE CASCADE). Active notes must
        be trashed first and raise NotFoundError here.
        """
        note = await self._get_owned_note(db, user_id, note_id, in_trash=True)
        try:
            await db.delete(note)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e))
            raise DatabaseError(message="Could not delete the note. Please try again.")
        logger.info("Note %s permanently deleted", note_id)

    # ── AI Enrichment ─────────────────────────────────────────────────────

    async def regenerate_summary(
        self, db: AsyncSession, user_id: UUID, note_id: UUID
    ) -> SummaryResponse:
        """
        Generate a fresh summary and replace any stored one.

        Raises:
            NotFoundError: No active note with this id for this user.
            GeminiError: Generation failed (nothing is written).
            ConfigurationError: Gemini is not configured.
        """
        note = await self._get_owned_note(db, user_id, note_id)

        content = await self.llm.generate_summary(note.content)

        summary = Summary(
            id=uuid.uuid4(),
            note_id=note.id,
            model=self.llm.model,
            content=content,
            created_at=utcnow(),
        )
        try:
            await db.execute(delete(Summary).where(Summary.note_id == note.id))
            db.add(summary)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error saving summary for %s: %s", note_id, str(e))
            raise DatabaseError(message="Could not save the summary. Please try again.")

        logger.info("Summary regenerated for note %s (%d chars)", note.id, len(content))
        return SummaryResponse.model_validate(summary)

    async def regenerate_tags(
        self, db: AsyncSession, user_id: UUID, note_id: UUID
    ) -> TagsResponse:
        """Generate fresh tags and replace the stored ones. Raises like regenerate_summary."""
        note = await self._get_owned_note(db, user_id, note_id)

        tags = await self.llm.generate_tags(note.content)

        try:
            await db.execute(delete(NoteTag).where(NoteTag.note_id == note.id))
            db.add_all([NoteTag(id=uuid.uuid4(), note_id=note.id, tag=tag) for tag in tags])
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error saving tags for %s: %s", note_id, str(e))
            raise DatabaseError(message="Could not save the tags. Please try again.")

        logger.info("Tags regenerated for note %s: %d tags", note.id, len(tags))
        return TagsResponse(note_id=note.id, tags=tags)

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    async def _flush(db: AsyncSession, failure_message: str) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database flush failed: %s", str(e), exc_info=True)
            raise DatabaseError(message=failure_message)

    @staticmethod
    def _parse_cursor(cursor: str) -> Optional[datetime]:
        try:
            return datetime.fromisoformat(cursor)
        except ValueError:
            return None

    @staticmethod
    def _to_response(note: Note) -> NoteResponse:
        return NoteResponse(
            id=note.id,
            title=note.title,
            content=note.content,
            created_at=note.created_at,
            updated_at=note.updated_at,
            deleted_at=note.deleted_at,
        )

    @staticmethod
    def _to_list_item(note: Note) -> NoteListItem:
        return NoteListItem(
            id=note.id,
            title=note.title,
            preview=note.content[:PREVIEW_LENGTH],
            created_at=note.created_at,
            updated_at=note.updated_at,
            deleted_at=note.deleted_at,
        )


note_service = NoteService()

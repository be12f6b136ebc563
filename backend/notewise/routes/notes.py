"""
NoteWise Backend - Notes Route Handlers
=======================================

What:  Owner-scoped note CRUD, trash management and AI regeneration endpoints.
How:   Extracts path/query/body data, delegates to NoteService, returns JSON.

Route Inventory:
    POST   /api/notes                       create
    GET    /api/notes                       list active (cursor paginated)
    GET    /api/notes/trash                 list trashed
    GET    /api/notes/{id}                  detail (+ summary, tags)
    PUT    /api/notes/{id}                  replace title/content
    DELETE /api/notes/{id}                  move to trash
    POST   /api/notes/{id}/restore          restore from trash
    DELETE /api/notes/{id}/permanent        delete a trashed note for good
    POST   /api/notes/{id}/summary          regenerate AI summary
    POST   /api/notes/{id}/tags             regenerate AI tags
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from notewise.database import get_db_session
from notewise.dependencies import get_current_user_id
from notewise.schemas.note import (
    ErrorResponse,
    NoteCreateRequest,
    NoteListResponse,
    NoteResponse,
    NoteUpdateRequest,
    SummaryResponse,
    TagsResponse,
    TrashResponse,
)
from notewise.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notes", tags=["Notes"])

# Error responses shared by the AI regeneration endpoints.
AI_ERROR_RESPONSES = {
    404: {"description": "Note not found", "model": ErrorResponse},
    429: {"description": "AI rate limit exceeded after retries", "model": ErrorResponse},
    502: {"description": "AI service failed", "model": ErrorResponse},
    503: {"description": "AI service not configured or key rejected", "model": ErrorResponse},
    504: {"description": "AI request timed out", "model": ErrorResponse},
}


@router.post(
    "",
    status_code=201,
    response_model=NoteResponse,
    summary="Create a note",
)
async def create_note(
    payload: NoteCreateRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.create_note(db=db, user_id=user_id, payload=payload)


@router.get(
    "",
    response_model=NoteListResponse,
    summary="List active notes, newest first",
)
async def list_notes(
    limit: int = Query(default=20, ge=1, le=100, description="Items per page (max 100)"),
    cursor: str | None = Query(
        default=None,
        description="next_cursor from the previous page (ISO 8601). Omit for the first page.",
    ),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> NoteListResponse:
    return await note_service.list_notes(db=db, user_id=user_id, limit=limit, cursor=cursor)


# Declared before /{note_id} so "trash" is not parsed as a note id.
@router.get(
    "/trash",
    response_model=TrashResponse,
    summary="List notes in the trash",
)
async def list_trash(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> TrashResponse:
    return await note_service.list_trash(db=db, user_id=user_id)


@router.get(
    "/{note_id}",
    response_model=NoteResponse,
    responses={404: {"description": "Note not found", "model": ErrorResponse}},
    summary="Get a note with its summary and tags",
)
async def get_note(
    note_id: UUID,
    response: Response,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    result = await note_service.get_note(db=db, user_id=user_id, note_id=note_id)
    # Notes are editable, so only allow private revalidation.
    response.headers["Cache-Control"] = "private, no-cache"
    return result


@router.put(
    "/{note_id}",
    response_model=NoteResponse,
    responses={404: {"description": "Note not found", "model": ErrorResponse}},
    summary="Update a note's title and content",
)
async def update_note(
    note_id: UUID,
    payload: NoteUpdateRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.update_note(
        db=db, user_id=user_id, note_id=note_id, payload=payload
    )


@router.delete(
    "/{note_id}",
    status_code=204,
    responses={404: {"description": "Note not found", "model": ErrorResponse}},
    summary="Move a note to the trash",
)
async def delete_note(
    note_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await note_service.delete_note(db=db, user_id=user_id, note_id=note_id)
    return Response(status_code=204)


@router.post(
    "/{note_id}/restore",
    response_model=NoteResponse,
    responses={404: {"description": "Note not in trash", "model": ErrorResponse}},
    summary="Restore a note from the trash",
)
async def restore_note(
    note_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.restore_note(db=db, user_id=user_id, note_id=note_id)


@router.delete(
    "/{note_id}/permanent",
    status_code=204,
    responses={404: {"description": "Note not in trash", "model": ErrorResponse}},
    summary="Permanently delete a trashed note",
)
async def hard_delete_note(
    note_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await note_service.hard_delete_note(db=db, user_id=user_id, note_id=note_id)
    return Response(status_code=204)


@router.post(
    "/{note_id}/summary",
    response_model=SummaryResponse,
    responses=AI_ERROR_RESPONSES,
    summary="Regenerate the AI summary of a note",
    description=(
        "Summarizes the note as 3-6 bullet points with Google Gemini and replaces "
        "any stored summary. Notes longer than the 8000-token budget are truncated "
        "before they are sent."
    ),
)
async def regenerate_summary(
    note_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> SummaryResponse:
    return await note_service.regenerate_summary(db=db, user_id=user_id, note_id=note_id)


@router.post(
    "/{note_id}/tags",
    response_model=TagsResponse,
    responses=AI_ERROR_RESPONSES,
    summary="Regenerate the AI tags of a note",
    description="Asks Google Gemini for up to 6 tags and replaces the stored tags.",
)
async def regenerate_tags(
    note_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> TagsResponse:
    return await note_service.regenerate_tags(db=db, user_id=user_id, note_id=note_id)

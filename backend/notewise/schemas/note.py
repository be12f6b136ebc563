"""
NoteWise Backend - Note Request/Response Schemas
================================================

What:  Pydantic models defining the notes API contract.
How:   FastAPI validates request bodies against the *Request models (422 on
       schema errors) and serializes responses from ORM objects through
       `from_attributes`.

Input rules:
    - title:   required, not blank, at most 200 characters
    - content: required, not blank, at most 50,000 characters
    Both are stored trimmed.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

TITLE_MAX_LENGTH = 200
CONTENT_MAX_LENGTH = 50_000
PREVIEW_LENGTH = 200


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteWriteRequest(BaseModel):
    """Body for creating a note or replacing an existing note's text."""

    title: str = Field(max_length=TITLE_MAX_LENGTH, description="Note title")
    content: str = Field(max_length=CONTENT_MAX_LENGTH, description="Note body")

    @field_validator("title", "content")
    @classmethod
    def strip_and_require(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class NoteCreateRequest(NoteWriteRequest):
    pass


class NoteUpdateRequest(NoteWriteRequest):
    pass


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class SummaryResponse(BaseModel):
    """Latest AI summary of a note."""

    note_id: uuid.UUID
    model: str = Field(description="Gemini model that produced the summary")
    content: str = Field(description="3-6 bullet lines, newline separated")
    created_at: datetime

    model_config = {"from_attributes": True, "protected_namespaces": ()}


class TagsResponse(BaseModel):
    note_id: uuid.UUID
    tags: List[str] = Field(description="AI tags in model order (at most 6)")


class NoteResponse(BaseModel):
    """
    What:  Full representation of a note.
    Who:   Returned by create/get/update/restore.

    `summary` and `tags` are filled on GET; write endpoints return them
    empty.
    """

    id: uuid.UUID
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
    summary: Optional[SummaryResponse] = None
    tags: List[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class NoteListItem(BaseModel):
    """Compact note for list views; `preview` is the first 200 characters."""

    id: uuid.UUID
    title: str
    preview: str
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class NoteListResponse(BaseModel):
    """
    Paginated list of a user's notes, newest first.

    next_cursor is the created_at (ISO 8601) of the last item; send it back
    as `cursor` to get the next page.
    """

    notes: List[NoteListItem]
    next_cursor: Optional[str] = None
    has_more: bool = False


class TrashResponse(BaseModel):
    notes: List[NoteListItem]


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for every API error.

        {
            "error": "ai_rate_limited",
            "message": "The AI service is busy right now. Please try again shortly.",
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    gemini: str = Field(description="Gemini API status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")

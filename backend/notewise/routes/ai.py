"""
NoteWise Backend - AI Playground Route
======================================

What:  POST /api/ai/playground sends a free-form prompt to Gemini.
How:   The prompt is cut to the token budget first; the response says whether
       that happened. Errors surface through the global GeminiError handler.
Who:   Developers checking prompts and the API key from the docs UI.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from notewise.dependencies import get_current_user_id
from notewise.schemas.ai import PlaygroundRequest, PlaygroundResponse
from notewise.services.gemini_service import gemini_service
from notewise.services.token_utils import estimate_token_count, truncate_to_token_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["AI"])


@router.post(
    "/playground",
    response_model=PlaygroundResponse,
    summary="Send a raw prompt to Gemini",
)
async def playground(
    payload: PlaygroundRequest,
    user_id: UUID = Depends(get_current_user_id),
) -> PlaygroundResponse:
    prompt = truncate_to_token_limit(payload.prompt)
    truncated = prompt != payload.prompt
    if truncated:
        logger.info("Playground prompt from %s truncated to the token budget", user_id)

    text = await gemini_service.generate_text(prompt, model=payload.model)

    return PlaygroundResponse(
        response=text,
        truncated=truncated,
        estimated_tokens=estimate_token_count(prompt),
    )

"""Schemas for the AI playground endpoint (free-form prompt to Gemini)."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PlaygroundRequest(BaseModel):
    prompt: str = Field(description="Free-form prompt; truncated to the token budget")
    model: Optional[str] = Field(
        default=None,
        description="Gemini model name; the configured default when omitted",
    )

    model_config = {"protected_namespaces": ()}

    @field_validator("prompt")
    @classmethod
    def require_prompt(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class PlaygroundResponse(BaseModel):
    response: str = Field(description="Raw model output")
    truncated: bool = Field(description="Whether the prompt was cut to fit the token budget")
    estimated_tokens: int = Field(description="Estimated tokens of the prompt that was sent")

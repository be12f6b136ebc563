"""
NoteWise Backend - Abstract LLM Service Interface
=================================================

What:  Contract for the AI text generation service used by the notes workflow.
How:   Concrete providers inherit from LLMService; GeminiService is the only
       one today.
Who:   NoteService depends on this interface, not on the Gemini SDK, which
       also lets tests hand it a stub.
"""

from abc import ABC, abstractmethod
from typing import List, Optional


class LLMService(ABC):
    """
    Abstract interface for AI-powered note enrichment.

    Attributes:
        model: Name of the model that produces the output; stored with each
            generated summary.

    Contract:
        - Every method except test_connection raises GeminiError (or a
          ConfigurationError when the provider is not configured); none of
          them return sentinel values for failures.
        - Implementations own their retry policy and input budgeting.
    """

    model: str

    @abstractmethod
    async def generate_text(self, prompt: str, model: Optional[str] = None) -> str:
        """
        Send `prompt` to the model and return its text.

        Returns:
            The generated text, or "" when the provider returned no text.
        """
        ...

    @abstractmethod
    async def generate_summary(self, note_content: str) -> str:
        """
        Summarize a note as 3-6 bullet lines.

        Returns:
            The model output with surrounding whitespace trimmed.
        """
        ...

    @abstractmethod
    async def generate_tags(self, note_content: str) -> List[str]:
        """Suggest up to six short tags for a note, in model order."""
        ...

    @abstractmethod
    async def test_connection(self) -> bool:
        """
        Check that the service answers at all.

        Returns True only when a trivial prompt yields non-empty text.
        Never raises.
        """
        ...

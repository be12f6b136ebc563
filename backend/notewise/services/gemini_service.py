"""
NoteWise Backend - Google Gemini Service Implementation
=======================================================

What:  LLMService implementation backed by the Google Gen AI SDK (google-genai).
How:   One lazily-built genai.Client per process; every request goes through
       the rate-limit retry controller and the error classifier, and task
       methods add input budgeting, task instructions and output parsing.
Who:   NoteService (summary/tag regeneration), the AI playground route, the
       health check and scripts/check_gemini_connection.py.

Request flow (generate_summary):
    note content
      → truncate_to_token_limit         (token_utils)
      → generate_text(content, system_instruction=SUMMARY_INSTRUCTIONS)
          → with_retry(call_once)        (retry; 429s only)
              → client.aio.models.generate_content(model=..., contents=...)
          → classified GeminiError on failure
      → parse_summary                    (output_parsers)

The task instructions travel as the request's system instruction, so
`contents` is exactly the (truncated) note text and never exceeds
MAX_TOKENS * 4 + 3 characters.

Client handle:
    get_gemini_client() builds the client on first use from GEMINI_API_KEY
    and caches it for the life of the process. Construction is guarded by a
    lock with a double check, so concurrent first calls (threads included)
    still build exactly one client. A missing key raises ConfigurationError,
    which is never classified or retried.
"""

import asyncio
import logging
import threading
import time
import uuid
from typing import Any, Awaitable, Callable, List, Optional

from google import genai
from google.genai import types

from notewise.config import settings
from notewise.exceptions import ConfigurationError, GeminiError, GeminiTimeoutError
from notewise.services.llm_base import LLMService
from notewise.services.output_parsers import parse_summary, parse_tags
from notewise.services.retry import with_retry
from notewise.services.token_utils import truncate_to_token_limit

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Client Handle
# ══════════════════════════════════════════════════════════════════════════

_client: Optional[Any] = None
_client_lock = threading.Lock()


def get_gemini_client() -> Any:
    """
    Return the process-wide genai.Client, building it on first call.

    Raises:
        ConfigurationError: GEMINI_API_KEY is not configured.
    """
    global _client

    client = _client
    if client is not None:
        return client

    with _client_lock:
        if _client is None:
            if not settings.has_gemini_api_key:
                raise ConfigurationError(
                    "GEMINI_API_KEY environment variable is not set."
                )
            _client = genai.Client(api_key=settings.gemini_api_key)
            logger.info("Gemini client initialized")
        return _client


def reset_gemini_client() -> None:
    """Drop the cached client; the next get_gemini_client() builds a new one."""
    global _client
    with _client_lock:
        _client = None


# ══════════════════════════════════════════════════════════════════════════
# Gemini Service
# ══════════════════════════════════════════════════════════════════════════

class GeminiService(LLMService):
    """
    Google Gemini implementation of the note enrichment contract.

    Dependencies are constructor-injected so the composition root (or a
    test) decides which client and which retry timings are used:

        client_factory:      Callable returning a genai.Client-compatible object.
        model:               Default model name (settings.gemini_model).
        max_retries:         Total attempts for rate-limited calls.
        retry_initial_delay: Seconds before the first retry, doubling after.
        request_timeout:     Per-call deadline in seconds; None uses the
                             setting, 0 disables it.
        sleep:               Awaitable sleep used for backoff.

    Error Handling Chain:
        SDK raises → classified → RATE_LIMITED? retry with backoff : raise
        → attempts exhausted → RateLimitError raised to the caller
    """

    SUMMARY_INSTRUCTIONS = """You summarize personal notes.
Summarize the note you are given as 3 to 6 bullet points.

Rules:
1. Put each bullet point on its own line, starting with "- "
2. Keep each bullet to one short sentence
3. Cover the most important ideas first
4. Write in the same language as the note
5. Return ONLY the bullet points, with no title, preamble or closing remark"""

    TAG_INSTRUCTIONS = """You label personal notes with tags.
Suggest 3 to 6 short tags describing the topics of the note you are given.

Rules:
1. Return the tags on a single line, separated by commas
2. Each tag is one to three words
3. Write the tags in the same language as the note
4. Return ONLY the comma-separated tags, with no numbering or explanation"""

    HEALTH_CHECK_PROMPT = "Hello"

    def __init__(
        self,
        client_factory: Callable[[], Any] = get_gemini_client,
        model: Optional[str] = None,
        max_retries: Optional[int] = None,
        retry_initial_delay: Optional[float] = None,
        request_timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._client_factory = client_factory
        self.model = model or settings.gemini_model
        self.max_retries = (
            max_retries if max_retries is not None else settings.retry_max_attempts
        )
        self.retry_initial_delay = (
            retry_initial_delay
            if retry_initial_delay is not None
            else settings.retry_initial_delay
        )
        self.request_timeout = (
            request_timeout
            if request_timeout is not None
            else settings.gemini_request_timeout
        )
        self._sleep = sleep

    async def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        system_instruction: Optional[str] = None,
    ) -> str:
        """
        Generate text for `prompt` with rate-limit retry.

        Args:
            prompt:             Sent verbatim as the request `contents`.
            model:              Model name; defaults to self.model.
            system_instruction: Optional task instructions for the model.

        Returns:
            The response text, or "" when the response carries none.

        Raises:
            ConfigurationError: No API key (raised before any request).
            GeminiError: Classified provider failure after retries.
        """
        model_name = model or self.model
        request_id = str(uuid.uuid4())[:8]

        # Resolved outside the retry loop: a missing key is a configuration
        # problem, not a provider failure.
        client = self._client_factory()

        request: dict = {"model": model_name, "contents": prompt}
        if system_instruction:
            request["config"] = types.GenerateContentConfig(
                system_instruction=system_instruction,
            )

        async def call_once() -> str:
            start_time = time.perf_counter()
            try:
                response = await self._call_with_deadline(
                    client.aio.models.generate_content(**request)
                )
            except Exception as e:
                logger.warning(
                    "[%s] Gemini call failed after %.0fms: %s",
                    request_id,
                    (time.perf_counter() - start_time) * 1000,
                    str(e),
                )
                raise

            text = getattr(response, "text", None) or ""
            logger.info(
                "[%s] Gemini %s responded in %.0fms with %d chars",
                request_id,
                model_name,
                (time.perf_counter() - start_time) * 1000,
                len(text),
            )
            return text

        try:
            return await with_retry(
                call_once,
                max_retries=self.max_retries,
                initial_delay=self.retry_initial_delay,
                sleep=self._sleep,
            )
        except GeminiError as e:
            logger.error(
                "[%s] Gemini generation failed (%s): %s",
                request_id,
                e.kind.value,
                e.message,
            )
            raise

    async def _call_with_deadline(self, call: Awaitable[Any]) -> Any:
        if not self.request_timeout:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self.request_timeout)
        except asyncio.TimeoutError as exc:
            raise GeminiTimeoutError(
                context={"timeout_seconds": self.request_timeout}
            ) from exc

    async def test_connection(self) -> bool:
        """
        Send a trivial prompt and report whether any text came back.

        "Unreachable" and "reachable but empty" both answer False; there is
        no signal to tell them apart.
        """
        try:
            text = await self.generate_text(self.HEALTH_CHECK_PROMPT)
        except Exception as e:
            logger.warning("Gemini connection test failed: %s", str(e))
            return False
        return len(text) > 0

    async def generate_summary(self, note_content: str) -> str:
        content = self._budget(note_content)
        raw = await self.generate_text(
            content, system_instruction=self.SUMMARY_INSTRUCTIONS
        )
        return parse_summary(raw)

    async def generate_tags(self, note_content: str) -> List[str]:
        content = self._budget(note_content)
        raw = await self.generate_text(
            content, system_instruction=self.TAG_INSTRUCTIONS
        )
        tags = parse_tags(raw)
        logger.info("Generated %d tags", len(tags))
        return tags

    @staticmethod
    def _budget(note_content: str) -> str:
        content = truncate_to_token_limit(note_content)
        if content is not note_content:
            logger.info(
                "Note content truncated from %d to %d chars to fit the token budget",
                len(note_content),
                len(content),
            )
        return content


# ── Singleton Instance ────────────────────────────────────────────────────
# Building the service does not touch the network or require the API key;
# the client is created on the first request.
gemini_service = GeminiService()

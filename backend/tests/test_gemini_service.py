"""
NoteWise Backend - Gemini Service Unit Tests (Mocked)
=====================================================

What:  Tests for GeminiService with a fake google-genai client.
How:   The fake is passed through `client_factory`; backoff sleeps are
       recorded instead of awaited.

What we test:
    ✅ generate_text request shape, model override, empty responses
    ✅ Rate limits are retried; other failures classified and raised once
    ✅ Missing API key raises ConfigurationError before any request
    ✅ Exactly one client is built, even under concurrent first use
    ✅ Summary/tag tasks: truncation, instructions, parsing
    ✅ test_connection returns a bool and never raises
    ✅ Client-side deadline raises GeminiTimeoutError
    ❌ Real API calls
"""

import asyncio
import threading
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from notewise.config import settings
from notewise.exceptions import (
    ConfigurationError,
    GeminiError,
    GeminiErrorKind,
    GeminiTimeoutError,
    InvalidApiKeyError,
    RateLimitError,
)
from notewise.services import gemini_service as gemini_module
from notewise.services.gemini_service import (
    GeminiService,
    get_gemini_client,
    reset_gemini_client,
)

MODEL = "gemini-2.0-flash"


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def make_service(client, **kwargs):
    kwargs.setdefault("model", MODEL)
    kwargs.setdefault("max_retries", 3)
    kwargs.setdefault("retry_initial_delay", 1.0)
    kwargs.setdefault("request_timeout", 0)
    kwargs.setdefault("sleep", SleepRecorder())
    return GeminiService(client_factory=lambda: client, **kwargs)


@pytest.fixture
def fresh_client_handle():
    reset_gemini_client()
    yield
    reset_gemini_client()


class TestGenerateText:
    @pytest.mark.asyncio
    async def test_sends_prompt_as_contents(self, make_gemini_client):
        client = make_gemini_client("Hi there")
        service = make_service(client)

        result = await service.generate_text("Hello")

        assert result == "Hi there"
        client.aio.models.generate_content.assert_awaited_once_with(
            model=MODEL, contents="Hello"
        )

    @pytest.mark.asyncio
    async def test_model_override(self, make_gemini_client):
        client = make_gemini_client("ok")
        service = make_service(client)

        await service.generate_text("Hello", model="gemini-1.5-pro")

        kwargs = client.aio.models.generate_content.await_args.kwargs
        assert kwargs["model"] == "gemini-1.5-pro"

    @pytest.mark.asyncio
    async def test_missing_text_becomes_empty_string(self, make_gemini_client):
        client = make_gemini_client(None)
        service = make_service(client)

        assert await service.generate_text("Hello") == ""

    @pytest.mark.asyncio
    async def test_rate_limit_is_retried(self, make_gemini_client):
        client = make_gemini_client(
            Exception("429 Too Many Requests"),
            Exception("429 Too Many Requests"),
            "finally",
        )
        sleep = SleepRecorder()
        service = make_service(client, sleep=sleep)

        assert await service.generate_text("Hello") == "finally"
        assert client.aio.models.generate_content.await_count == 3
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_rate_limit_exhausted(self, make_gemini_client):
        client = make_gemini_client(*[Exception("quota exceeded")] * 3)
        service = make_service(client)

        with pytest.raises(RateLimitError):
            await service.generate_text("Hello")

        assert client.aio.models.generate_content.await_count == 3

    @pytest.mark.asyncio
    async def test_invalid_key_is_not_retried(self, make_gemini_client):
        client = make_gemini_client(Exception("API key not valid"), "unused")
        service = make_service(client)

        with pytest.raises(InvalidApiKeyError):
            await service.generate_text("Hello")

        assert client.aio.models.generate_content.await_count == 1

    @pytest.mark.asyncio
    async def test_unknown_failure_keeps_message(self, make_gemini_client):
        client = make_gemini_client(RuntimeError("backend exploded"))
        service = make_service(client)

        with pytest.raises(GeminiError) as exc_info:
            await service.generate_text("Hello")

        assert exc_info.value.kind is GeminiErrorKind.UNKNOWN
        assert exc_info.value.message == "backend exploded"

    @pytest.mark.asyncio
    async def test_deadline_raises_timeout_error(self):
        async def slow_call(**kwargs):
            await asyncio.sleep(5)

        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(side_effect=slow_call)
        service = make_service(client, request_timeout=0.01)

        with pytest.raises(GeminiTimeoutError):
            await service.generate_text("Hello")

        assert client.aio.models.generate_content.await_count == 1


class TestClientHandle:
    @pytest.mark.asyncio
    async def test_missing_key_raises_configuration_error(self, monkeypatch, fresh_client_handle):
        monkeypatch.setattr(settings, "gemini_api_key", "")
        service = GeminiService(request_timeout=0)

        with pytest.raises(ConfigurationError):
            await service.generate_text("Hello")

    def test_placeholder_key_counts_as_missing(self, monkeypatch, fresh_client_handle):
        monkeypatch.setattr(settings, "gemini_api_key", "your_gemini_api_key_here")

        with pytest.raises(ConfigurationError):
            get_gemini_client()

    def test_client_is_built_once(self, monkeypatch, fresh_client_handle):
        monkeypatch.setattr(settings, "gemini_api_key", "test-key-not-real")
        with patch.object(gemini_module, "genai") as mock_genai:
            first = get_gemini_client()
            second = get_gemini_client()

        assert first is second
        mock_genai.Client.assert_called_once_with(api_key="test-key-not-real")

    def test_concurrent_first_use_builds_one_client(self, monkeypatch, fresh_client_handle):
        monkeypatch.setattr(settings, "gemini_api_key", "test-key-not-real")
        results = []

        with patch.object(gemini_module, "genai") as mock_genai:
            threads = [
                threading.Thread(target=lambda: results.append(get_gemini_client()))
                for _ in range(8)
            ]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

        assert mock_genai.Client.call_count == 1
        assert len({id(client) for client in results}) == 1


class TestTasks:
    @pytest.mark.asyncio
    async def test_summary_is_trimmed_and_keeps_lines(self, make_gemini_client):
        client = make_gemini_client("\n- Point one\n- Point two\n- Point three\n\n")
        service = make_service(client)

        summary = await service.generate_summary("Some note text")

        assert summary == "- Point one\n- Point two\n- Point three"
        kwargs = client.aio.models.generate_content.await_args.kwargs
        assert kwargs["contents"] == "Some note text"
        assert kwargs["config"].system_instruction == GeminiService.SUMMARY_INSTRUCTIONS

    @pytest.mark.asyncio
    async def test_long_note_is_truncated_before_sending(self, make_gemini_client):
        client = make_gemini_client("- ok")
        service = make_service(client)
        note = "n" * 35000

        await service.generate_summary(note)

        sent = client.aio.models.generate_content.await_args.kwargs["contents"]
        assert len(sent) <= 32003
        assert sent == "n" * 32000 + "..."

    @pytest.mark.asyncio
    async def test_tags_are_parsed(self, make_gemini_client):
        client = make_gemini_client("태그1, , 태그2, , 태그3")
        service = make_service(client)

        tags = await service.generate_tags("노트 내용")

        assert tags == ["태그1", "태그2", "태그3"]
        kwargs = client.aio.models.generate_content.await_args.kwargs
        assert kwargs["config"].system_instruction == GeminiService.TAG_INSTRUCTIONS

    @pytest.mark.asyncio
    async def test_tags_are_capped_at_six(self, make_gemini_client):
        client = make_gemini_client("a, b, c, d, e, f, g")
        service = make_service(client)

        assert await service.generate_tags("note") == ["a", "b", "c", "d", "e", "f"]

    @pytest.mark.asyncio
    async def test_task_errors_propagate(self, make_gemini_client):
        client = make_gemini_client(Exception("DEADLINE_EXCEEDED"))
        service = make_service(client)

        with pytest.raises(GeminiTimeoutError):
            await service.generate_tags("note")


class TestConnection:
    @pytest.mark.asyncio
    async def test_true_when_text_comes_back(self, make_gemini_client):
        client = make_gemini_client("Hello!")
        service = make_service(client)

        assert await service.test_connection() is True
        kwargs = client.aio.models.generate_content.await_args.kwargs
        assert kwargs["contents"] == GeminiService.HEALTH_CHECK_PROMPT

    @pytest.mark.asyncio
    async def test_false_on_empty_reply(self, make_gemini_client):
        service = make_service(make_gemini_client(""))
        assert await service.test_connection() is False

    @pytest.mark.asyncio
    async def test_false_on_failure(self, make_gemini_client):
        service = make_service(make_gemini_client(Exception("API key not valid")))
        assert await service.test_connection() is False

    @pytest.mark.asyncio
    async def test_false_when_not_configured(self):
        def no_client():
            raise ConfigurationError()

        service = GeminiService(client_factory=no_client, request_timeout=0)
        assert await service.test_connection() is False

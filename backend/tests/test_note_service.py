"""
NoteWise Backend - Note Service Unit Tests
==========================================

What:  Tests for NoteService business logic.
How:   Mock DB sessions and a mock LLMService (no real DB or API calls).

What we test:
    ✅ Create/update/get/list with owner scoping
    ✅ Trash lifecycle: soft delete, restore, permanent delete
    ✅ Summary/tag regeneration replaces stored rows
    ✅ AI failures write nothing
    ✅ SQLAlchemy failures become DatabaseError
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import SQLAlchemyError

from conftest import build_note, result_with
from notewise.exceptions import DatabaseError, NotFoundError, RateLimitError
from notewise.models.note_tag import NoteTag
from notewise.models.summary import Summary
from notewise.schemas.note import NoteCreateRequest, NoteUpdateRequest
from notewise.services.gemini_service import GeminiService
from notewise.services.note_service import NoteService


@pytest.fixture
def llm():
    mock = MagicMock()
    mock.model = "gemini-2.5-pro"
    mock.generate_summary = AsyncMock(return_value="- First\n- Second\n- Third")
    mock.generate_tags = AsyncMock(return_value=["planning", "errands"])
    return mock


@pytest.fixture
def service(llm):
    return NoteService(llm=llm)


class TestNoteServiceWrite:
    @pytest.mark.asyncio
    async def test_create_note(self, service, mock_db_session, user_id):
        payload = NoteCreateRequest(title="  Groceries ", content=" milk, eggs ")

        result = await service.create_note(mock_db_session, user_id, payload)

        assert result.title == "Groceries"
        assert result.content == "milk, eggs"
        assert result.deleted_at is None
        assert result.summary is None
        assert result.tags == []
        added = mock_db_session.add.call_args.args[0]
        assert added.user_id == user_id
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_note_database_failure(self, service, mock_db_session, user_id):
        mock_db_session.flush = AsyncMock(side_effect=SQLAlchemyError("connection lost"))

        with pytest.raises(DatabaseError):
            await service.create_note(
                mock_db_session, user_id, NoteCreateRequest(title="t", content="c")
            )

    @pytest.mark.asyncio
    async def test_update_note(self, service, mock_db_session, user_id, sample_note):
        mock_db_session.execute.return_value = result_with(sample_note)
        before = sample_note.updated_at

        result = await service.update_note(
            mock_db_session,
            user_id,
            sample_note.id,
            NoteUpdateRequest(title="New title", content="New body"),
        )

        assert result.title == "New title"
        assert sample_note.content == "New body"
        assert sample_note.updated_at >= before

    @pytest.mark.asyncio
    async def test_update_missing_note(self, service, mock_db_session, user_id):
        mock_db_session.execute.return_value = result_with(None)

        with pytest.raises(NotFoundError):
            await service.update_note(
                mock_db_session, user_id, uuid4(), NoteUpdateRequest(title="t", content="c")
            )


class TestNoteServiceGet:
    @pytest.mark.asyncio
    async def test_get_note_with_summary_and_tags(self, service, mock_db_session, user_id, sample_note):
        summary = Summary(
            id=uuid4(),
            note_id=sample_note.id,
            model="gemini-2.0-flash",
            content="- One\n- Two\n- Three",
            created_at=sample_note.created_at,
        )
        mock_db_session.execute = AsyncMock(
            side_effect=[
                result_with(sample_note),
                result_with(summary),
                result_with(values=["work", "ideas"]),
            ]
        )

        result = await service.get_note(mock_db_session, user_id, sample_note.id)

        assert result.id == sample_note.id
        assert result.summary.content == "- One\n- Two\n- Three"
        assert result.summary.model == "gemini-2.0-flash"
        assert result.tags == ["work", "ideas"]

    @pytest.mark.asyncio
    async def test_get_note_without_ai_data(self, service, mock_db_session, user_id, sample_note):
        mock_db_session.execute = AsyncMock(
            side_effect=[result_with(sample_note), result_with(None), result_with(values=[])]
        )

        result = await service.get_note(mock_db_session, user_id, sample_note.id)

        assert result.summary is None
        assert result.tags == []

    @pytest.mark.asyncio
    async def test_get_note_not_found(self, service, mock_db_session, user_id):
        mock_db_session.execute.return_value = result_with(None)

        with pytest.raises(NotFoundError):
            await service.get_note(mock_db_session, user_id, uuid4())

    @pytest.mark.asyncio
    async def test_get_note_database_failure(self, service, mock_db_session, user_id):
        mock_db_session.execute = AsyncMock(side_effect=SQLAlchemyError("boom"))

        with pytest.raises(DatabaseError):
            await service.get_note(mock_db_session, user_id, uuid4())


class TestNoteServiceList:
    @pytest.mark.asyncio
    async def test_list_notes_empty(self, service, mock_db_session, user_id):
        mock_db_session.execute.return_value = result_with(values=[])

        result = await service.list_notes(mock_db_session, user_id, limit=20)

        assert result.notes == []
        assert result.has_more is False
        assert result.next_cursor is None

    @pytest.mark.asyncio
    async def test_list_notes_paginates(self, service, mock_db_session, user_id):
        notes = [build_note(user_id, title=f"Note {i}", age_minutes=i) for i in range(3)]
        mock_db_session.execute.return_value = result_with(values=notes)

        result = await service.list_notes(mock_db_session, user_id, limit=2)

        assert [item.title for item in result.notes] == ["Note 0", "Note 1"]
        assert result.has_more is True
        assert result.next_cursor == notes[1].created_at.isoformat()

    @pytest.mark.asyncio
    async def test_list_item_preview_is_capped(self, service, mock_db_session, user_id):
        note = build_note(user_id, content="z" * 500)
        mock_db_session.execute.return_value = result_with(values=[note])

        result = await service.list_notes(mock_db_session, user_id)

        assert result.notes[0].preview == "z" * 200

    @pytest.mark.asyncio
    async def test_bad_cursor_is_ignored(self, service, mock_db_session, user_id):
        mock_db_session.execute.return_value = result_with(values=[])

        result = await service.list_notes(mock_db_session, user_id, cursor="not-a-date")

        assert result.notes == []

    @pytest.mark.asyncio
    async def test_list_trash(self, service, mock_db_session, user_id):
        trashed = build_note(user_id, deleted=True)
        mock_db_session.execute.return_value = result_with(values=[trashed])

        result = await service.list_trash(mock_db_session, user_id)

        assert len(result.notes) == 1
        assert result.notes[0].deleted_at is not None


class TestNoteServiceTrash:
    @pytest.mark.asyncio
    async def test_delete_moves_note_to_trash(self, service, mock_db_session, user_id, sample_note):
        mock_db_session.execute.return_value = result_with(sample_note)

        await service.delete_note(mock_db_session, user_id, sample_note.id)

        assert sample_note.is_deleted
        mock_db_session.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_restore_clears_deleted_at(self, service, mock_db_session, user_id):
        trashed = build_note(user_id, deleted=True)
        mock_db_session.execute.return_value = result_with(trashed)

        result = await service.restore_note(mock_db_session, user_id, trashed.id)

        assert result.deleted_at is None
        assert not trashed.is_deleted

    @pytest.mark.asyncio
    async def test_hard_delete(self, service, mock_db_session, user_id):
        trashed = build_note(user_id, deleted=True)
        mock_db_session.execute.return_value = result_with(trashed)

        await service.hard_delete_note(mock_db_session, user_id, trashed.id)

        mock_db_session.delete.assert_awaited_once_with(trashed)
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_hard_delete_of_active_note_is_not_found(self, service, mock_db_session, user_id):
        # The trash-only lookup finds nothing for an active note.
        mock_db_session.execute.return_value = result_with(None)

        with pytest.raises(NotFoundError):
            await service.hard_delete_note(mock_db_session, user_id, uuid4())

        mock_db_session.delete.assert_not_awaited()


class TestNoteServiceAI:
    @pytest.mark.asyncio
    async def test_regenerate_summary(self, service, llm, mock_db_session, user_id, sample_note):
        mock_db_session.execute = AsyncMock(side_effect=[result_with(sample_note), MagicMock()])

        result = await service.regenerate_summary(mock_db_session, user_id, sample_note.id)

        llm.generate_summary.assert_awaited_once_with(sample_note.content)
        assert result.note_id == sample_note.id
        assert result.content == "- First\n- Second\n- Third"
        added = mock_db_session.add.call_args.args[0]
        assert isinstance(added, Summary)
        assert mock_db_session.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_summary_records_the_service_model(
        self, make_gemini_client, mock_db_session, user_id, sample_note
    ):
        client = make_gemini_client("- One\n- Two\n- Three")
        gemini = GeminiService(
            client_factory=lambda: client, model="gemini-2.5-pro", request_timeout=0
        )
        mock_db_session.execute = AsyncMock(side_effect=[result_with(sample_note), MagicMock()])

        result = await NoteService(llm=gemini).regenerate_summary(
            mock_db_session, user_id, sample_note.id
        )

        assert result.model == "gemini-2.5-pro"
        assert mock_db_session.add.call_args.args[0].model == "gemini-2.5-pro"
        assert client.aio.models.generate_content.await_args.kwargs["model"] == "gemini-2.5-pro"

    @pytest.mark.asyncio
    async def test_summary_failure_writes_nothing(self, service, llm, mock_db_session, user_id, sample_note):
        llm.generate_summary = AsyncMock(side_effect=RateLimitError())
        mock_db_session.execute.return_value = result_with(sample_note)

        with pytest.raises(RateLimitError):
            await service.regenerate_summary(mock_db_session, user_id, sample_note.id)

        mock_db_session.add.assert_not_called()
        assert mock_db_session.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_summary_of_missing_note_skips_ai(self, service, llm, mock_db_session, user_id):
        mock_db_session.execute.return_value = result_with(None)

        with pytest.raises(NotFoundError):
            await service.regenerate_summary(mock_db_session, user_id, uuid4())

        llm.generate_summary.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_regenerate_tags(self, service, llm, mock_db_session, user_id, sample_note):
        mock_db_session.execute = AsyncMock(side_effect=[result_with(sample_note), MagicMock()])

        result = await service.regenerate_tags(mock_db_session, user_id, sample_note.id)

        assert result.tags == ["planning", "errands"]
        rows = mock_db_session.add_all.call_args.args[0]
        assert [row.tag for row in rows] == ["planning", "errands"]
        assert all(isinstance(row, NoteTag) and row.note_id == sample_note.id for row in rows)

    @pytest.mark.asyncio
    async def test_tags_database_failure(self, service, mock_db_session, user_id, sample_note):
        mock_db_session.execute = AsyncMock(
            side_effect=[result_with(sample_note), SQLAlchemyError("deadlock")]
        )

        with pytest.raises(DatabaseError):
            await service.regenerate_tags(mock_db_session, user_id, sample_note.id)

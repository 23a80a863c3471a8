"""Tests for the memo detail dialog state machine."""

import asyncio
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from memo_app.client.detail import DetailMode, MemoDetailController
from memo_app.client.store import MemoStore
from memo_app.core.errors import DataAccessError, UpstreamError, ValidationError

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def loaded(gateway, service, form_factory):
    memo = await service.create_memo(form_factory(tags=["home"]))
    store = MemoStore(gateway)
    await store.load()
    return store, memo


@pytest.fixture
def closed():
    return []


@pytest.fixture
def detail(loaded, gateway, closed) -> MemoDetailController:
    store, memo = loaded
    controller = MemoDetailController(store, gateway, on_close=lambda: closed.append(True))
    controller.open(memo)
    return controller


class TestModes:
    async def test_opens_in_viewing(self, detail):
        assert detail.is_open
        assert detail.mode is DetailMode.VIEWING
        assert detail.draft.title == "Groceries"

    async def test_escape_while_editing_reverts(self, detail, closed):
        detail.start_edit()
        detail.draft.title = "Changed"
        detail.add_tag("weekly")

        detail.press_escape()

        assert detail.mode is DetailMode.VIEWING
        assert detail.draft.title == "Groceries"
        assert detail.draft.tags == ["home"]
        assert detail.is_open
        assert closed == []

    async def test_escape_while_viewing_closes(self, detail, closed):
        detail.press_escape()
        assert not detail.is_open
        assert closed == [True]

    async def test_background_click_ignored_while_editing(self, detail, closed):
        detail.start_edit()
        detail.click_background()
        assert detail.is_open
        assert closed == []

        detail.cancel_edit()
        detail.click_background()
        assert not detail.is_open

    async def test_reopen_resets_to_viewing(self, detail, loaded):
        _, memo = loaded
        detail.start_edit()
        detail.summary_error = "old"
        detail.open(memo)
        assert detail.mode is DetailMode.VIEWING
        assert detail.summary_error == ""


class TestSave:
    async def test_save_updates_store_and_returns_to_viewing(self, detail, loaded):
        store, memo = loaded
        detail.start_edit()
        detail.draft.content = "milk, eggs, bread"

        saved = await detail.save()

        assert detail.mode is DetailMode.VIEWING
        assert saved.content == "milk, eggs, bread"
        assert store.get_by_id(memo.id) == saved
        assert detail.memo == saved

    @pytest.mark.parametrize("field", ["title", "content"])
    async def test_blank_field_rejected_without_request(self, detail, gateway, field):
        gateway.update_memo = AsyncMock()
        detail.start_edit()
        setattr(detail.draft, field, "   ")

        with pytest.raises(ValidationError):
            await detail.save()
        gateway.update_memo.assert_not_awaited()
        assert detail.mode is DetailMode.EDITING

    async def test_overlong_title_raises_app_validation_error(self, detail, gateway):
        gateway.update_memo = AsyncMock()
        detail.start_edit()
        detail.draft.title = "x" * 256

        with pytest.raises(ValidationError, match="title"):
            await detail.save()
        gateway.update_memo.assert_not_awaited()
        assert detail.mode is DetailMode.EDITING

    async def test_failed_save_stays_editing(self, detail, gateway):
        detail.start_edit()
        detail.draft.title = "Keep me"
        gateway.fail_next = DataAccessError("Failed to update memo: boom")

        with pytest.raises(DataAccessError):
            await detail.save()
        assert detail.mode is DetailMode.EDITING
        assert detail.draft.title == "Keep me"

    async def test_delete_closes(self, detail, loaded, closed):
        store, memo = loaded
        await detail.delete()
        assert store.get_by_id(memo.id) is None
        assert closed == [True]


class TestTags:
    async def test_duplicate_tag_added_once(self, detail):
        detail.start_edit()
        detail.add_tag("a")
        with pytest.raises(ValidationError):
            detail.add_tag("a")
        assert detail.draft.tags.count("a") == 1

    async def test_tags_are_case_sensitive_and_trimmed(self, detail):
        detail.start_edit()
        detail.add_tag("  Home ")
        assert detail.draft.tags == ["home", "Home"]

    async def test_empty_tag_rejected(self, detail):
        with pytest.raises(ValidationError):
            detail.add_tag("   ")

    async def test_tag_input_is_consumed_and_cleared_on_open(self, detail, loaded):
        _, memo = loaded
        detail.tag_input = "  weekly "
        detail.add_tag()
        assert detail.draft.tags == ["home", "weekly"]
        assert detail.tag_input == ""

        detail.tag_input = "draft"
        detail.open(memo)
        assert detail.tag_input == ""

    async def test_remove_tag_exact_match(self, detail):
        detail.add_tag("Home")
        detail.remove_tag("home")
        assert detail.draft.tags == ["Home"]


class TestSummary:
    async def test_summary_for_displayed_memo(self, detail, gateway):
        await detail.generate_summary()

        gateway.summarize_mock.assert_awaited_once_with("Groceries", "milk, eggs")
        assert detail.summary == "A short summary."
        assert detail.summarizing is False

    async def test_not_available_while_editing(self, detail, gateway):
        detail.start_edit()
        await detail.generate_summary()
        gateway.summarize_mock.assert_not_awaited()

    async def test_failure_becomes_inline_error(self, detail, gateway):
        gateway.summarize_mock.side_effect = UpstreamError("Summary generation failed: timeout")
        await detail.generate_summary()
        assert detail.summary == ""
        assert detail.summary_error == "Summary generation failed: timeout"
        assert detail.summarizing is False

    async def test_flag_set_while_pending(self, detail, gateway):
        release = asyncio.Event()

        async def slow(title, content):
            await release.wait()
            return "done"

        gateway.summarize_mock.side_effect = slow
        task = asyncio.create_task(detail.generate_summary())
        await asyncio.sleep(0)
        assert detail.summarizing is True

        release.set()
        await task
        assert detail.summary == "done"

    async def test_save_while_pending_keeps_result(self, detail, gateway):
        release = asyncio.Event()

        async def slow(title, content):
            await release.wait()
            return "done"

        gateway.summarize_mock.side_effect = slow
        task = asyncio.create_task(detail.generate_summary())
        await asyncio.sleep(0)

        detail.start_edit()
        detail.draft.content = "milk, eggs, bread"
        await detail.save()
        release.set()
        await task

        assert detail.summarizing is False
        assert detail.summary == "done"

    async def test_result_dropped_after_reopen(self, detail, gateway, loaded):
        _, memo = loaded
        release = asyncio.Event()

        async def slow(title, content):
            await release.wait()
            return "stale"

        gateway.summarize_mock.side_effect = slow
        task = asyncio.create_task(detail.generate_summary())
        await asyncio.sleep(0)

        detail.open(memo)
        release.set()
        await task

        assert detail.summary == ""
        assert detail.summarizing is False

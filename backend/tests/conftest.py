"""Shared fixtures: in-memory repository, service-backed gateway and API client."""

import asyncio
import os
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

os.environ.setdefault("APP_SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("APP_SUPABASE_KEY", "test-supabase-key")

from memo_app.client.api_client import MemoGateway  # noqa: E402
from memo_app.core.errors import ConflictError, DataAccessError  # noqa: E402
from memo_app.core.filtering import category_value  # noqa: E402
from memo_app.core.models.memo import Memo, MemoFormData  # noqa: E402
from memo_app.core.repositories.memo_repository import MemoRepository  # noqa: E402
from memo_app.core.services.memo_service import (  # noqa: E402
    MemoListCache,
    MemoService,
    get_memo_list_cache,
)


class FakeMemoRepository(MemoRepository):
    """Dict-backed repository with a clock that advances one second per write."""

    def __init__(self) -> None:
        self.rows: dict[str, Memo] = {}
        self.list_calls = 0
        self.fail_with: Exception | None = None
        self._clock = datetime(2026, 1, 1, tzinfo=UTC)
        self._next_id = 0

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def list(self, *, category=None, search_query=None):
        self.list_calls += 1
        self._maybe_fail()
        wanted = category_value(category)
        term = (search_query or "").strip().lower()
        memos = sorted(self.rows.values(), key=lambda m: m.created_at, reverse=True)
        if wanted is not None:
            memos = [m for m in memos if m.category.value == wanted]
        if term:
            memos = [m for m in memos if term in m.title.lower() or term in m.content.lower()]
        return memos

    async def get(self, memo_id):
        self._maybe_fail()
        return self.rows.get(memo_id)

    async def create(self, form):
        self._maybe_fail()
        self._next_id += 1
        now = self._tick()
        memo = Memo(
            id=f"memo-{self._next_id}",
            title=form.title,
            content=form.content,
            category=form.category,
            tags=list(form.tags),
            created_at=now,
            updated_at=now,
        )
        self.rows[memo.id] = memo
        return memo

    async def update(self, memo_id, form, *, expected_updated_at=None):
        self._maybe_fail()
        existing = self.rows.get(memo_id)
        if existing is None:
            return None
        if expected_updated_at is not None and existing.updated_at != expected_updated_at:
            raise ConflictError("Memo was modified since it was loaded")
        updated = existing.model_copy(
            update={
                "title": form.title,
                "content": form.content,
                "category": form.category,
                "tags": list(form.tags),
                "updated_at": self._tick(),
            }
        )
        self.rows[memo_id] = updated
        return updated

    async def delete(self, memo_id):
        self._maybe_fail()
        return self.rows.pop(memo_id, None) is not None

    async def clear_all(self):
        self._maybe_fail()
        count = len(self.rows)
        self.rows.clear()
        return count


class ServiceGateway(MemoGateway):
    """MemoGateway that calls the services directly, with hooks for failures and ordering."""

    def __init__(self, service: MemoService) -> None:
        self.service = service
        self.fail_next: Exception | None = None
        # memo id -> event awaited before the write reaches the service
        self.hold: dict[str, asyncio.Event] = {}
        # memo id -> event awaited after the write, before the response returns
        self.hold_response: dict[str, asyncio.Event] = {}
        # behave like a server without conditional writes
        self.ignore_versions = False
        self.summarize_mock = AsyncMock(return_value="A short summary.")

    def _check(self) -> None:
        if self.fail_next is not None:
            err, self.fail_next = self.fail_next, None
            raise err

    async def list_memos(self, *, category=None, search_query=None):
        return list(await self.service.list_memos(category=category, search_query=search_query))

    async def get_memo(self, memo_id):
        return await self.service.get_memo(memo_id)

    async def create_memo(self, form):
        self._check()
        return await self.service.create_memo(form)

    async def update_memo(self, memo_id, form, *, expected_updated_at=None):
        self._check()
        gate = self.hold.pop(memo_id, None)
        if gate is not None:
            await gate.wait()
        if self.ignore_versions:
            expected_updated_at = None
        memo = await self.service.update_memo(memo_id, form, expected_updated_at=expected_updated_at)
        if memo is None:
            raise DataAccessError("Failed to update memo: Memo not found")
        gate = self.hold_response.pop(memo_id, None)
        if gate is not None:
            await gate.wait()
        return memo

    async def delete_memo(self, memo_id):
        self._check()
        return await self.service.delete_memo(memo_id)

    async def clear_all(self):
        self._check()
        return await self.service.clear_memos()

    async def summarize(self, title, content):
        return await self.summarize_mock(title, content)


def make_form(title="Groceries", content="milk, eggs", category="personal", tags=None) -> MemoFormData:
    return MemoFormData(title=title, content=content, category=category, tags=tags or [])


@pytest.fixture(autouse=True)
def _clear_list_cache():
    get_memo_list_cache().invalidate()
    yield
    get_memo_list_cache().invalidate()


@pytest.fixture
def repo() -> FakeMemoRepository:
    return FakeMemoRepository()


@pytest.fixture
def service(repo: FakeMemoRepository) -> MemoService:
    return MemoService(repo, MemoListCache())


@pytest.fixture
def gateway(service: MemoService) -> ServiceGateway:
    return ServiceGateway(service)


@pytest.fixture
def form_factory():
    return make_form


@pytest.fixture
def openai_client() -> MagicMock:
    client = MagicMock()
    client.responses.create = AsyncMock(return_value=SimpleNamespace(output_text="  Buy milk and eggs.  "))
    return client


@pytest.fixture
def app(repo: FakeMemoRepository, openai_client: MagicMock):
    from memo_app.core.services.summary_service import SummaryService
    from memo_app.dependencies import get_memo_repository, get_summary_service
    from memo_app.main import app as fastapi_app

    fastapi_app.dependency_overrides[get_memo_repository] = lambda: repo
    fastapi_app.dependency_overrides[get_summary_service] = lambda: SummaryService(client=openai_client)
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import httpx

from memo_app.core.errors import (
    ConflictError,
    DataAccessError,
    EmptyResultError,
    UpstreamError,
    ValidationError,
)
from memo_app.core.models.memo import Memo
from memo_app.utils.logging import get_logger

if TYPE_CHECKING:
    from datetime import datetime

    from memo_app.core.models.memo import MemoFormData

logger = get_logger(__name__)


class MemoGateway(ABC):
    """Remote operations the client state store and detail view depend on."""

    @abstractmethod
    async def list_memos(
        self,
        *,
        category: str | None = None,
        search_query: str | None = None,
    ) -> list[Memo]:  # pragma: no cover - interface only
        ...

    @abstractmethod
    async def get_memo(self, memo_id: str) -> Memo | None:  # pragma: no cover
        ...

    @abstractmethod
    async def create_memo(self, form: MemoFormData) -> Memo:  # pragma: no cover
        ...

    @abstractmethod
    async def update_memo(
        self,
        memo_id: str,
        form: MemoFormData,
        *,
        expected_updated_at: datetime | None = None,
    ) -> Memo:  # pragma: no cover
        ...

    @abstractmethod
    async def delete_memo(self, memo_id: str) -> bool:  # pragma: no cover
        ...

    @abstractmethod
    async def clear_all(self) -> int:  # pragma: no cover
        ...

    @abstractmethod
    async def summarize(self, title: str, content: str) -> str:  # pragma: no cover
        ...


class MemoApiClient(MemoGateway):
    """Async HTTP client for the memo API.

    Error responses are mapped back onto the service's error taxonomy so callers
    handle the same exceptions whether they talk to the API or the services.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> MemoApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def list_memos(
        self,
        *,
        category: str | None = None,
        search_query: str | None = None,
    ) -> list[Memo]:
        params: dict[str, str] = {}
        if category:
            params["category"] = str(getattr(category, "value", category))
        if search_query and search_query.strip():
            params["search"] = search_query
        resp = await self._request("GET", "/memos/", "list memos", params=params)
        return [Memo.model_validate(item) for item in resp.json()]

    async def get_memo(self, memo_id: str) -> Memo | None:
        resp = await self._request("GET", f"/memos/{memo_id}", "get memo", allow_not_found=True)
        if resp.status_code == httpx.codes.NOT_FOUND:
            return None
        return Memo.model_validate(resp.json())

    async def create_memo(self, form: MemoFormData) -> Memo:
        resp = await self._request("POST", "/memos/", "create memo", json=self._form_payload(form))
        return Memo.model_validate(resp.json())

    async def update_memo(
        self,
        memo_id: str,
        form: MemoFormData,
        *,
        expected_updated_at: datetime | None = None,
    ) -> Memo:
        payload = self._form_payload(form)
        if expected_updated_at is not None:
            payload["expectedUpdatedAt"] = expected_updated_at.isoformat()
        resp = await self._request("PUT", f"/memos/{memo_id}", "update memo", json=payload)
        return Memo.model_validate(resp.json())

    async def delete_memo(self, memo_id: str) -> bool:
        resp = await self._request("DELETE", f"/memos/{memo_id}", "delete memo", allow_not_found=True)
        return resp.status_code != httpx.codes.NOT_FOUND

    async def clear_all(self) -> int:
        resp = await self._request("DELETE", "/memos/", "clear memos")
        return int(resp.json().get("deleted", 0))

    async def summarize(self, title: str, content: str) -> str:
        if not content or not content.strip():
            raise ValidationError("Memo content is empty")
        try:
            resp = await self._client.post("/summarize", json={"title": title, "content": content})
        except httpx.HTTPError as err:
            logger.error("Summary request failed: %s", err)
            raise UpstreamError(f"Summary request failed: {err}") from err

        body = self._json_or_empty(resp)
        if resp.status_code == httpx.codes.BAD_REQUEST:
            raise ValidationError(body.get("error") or "Memo content is empty")
        if resp.is_error:
            message = body.get("error") or f"Summary request failed with HTTP {resp.status_code}"
            logger.error("Summary request failed: %s", message)
            raise UpstreamError(message)

        summary = (body.get("summary") or "").strip()
        if not summary:
            raise EmptyResultError("The model returned an empty summary")
        return summary

    async def _request(
        self,
        method: str,
        url: str,
        action: str,
        *,
        allow_not_found: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as err:
            logger.error("Failed to %s: %s", action, err, extra={"error_type": type(err).__name__})
            raise DataAccessError(f"Failed to {action}: {err}") from err

        if allow_not_found and resp.status_code == httpx.codes.NOT_FOUND:
            return resp
        if resp.is_error:
            detail = self._json_or_empty(resp).get("detail") or resp.reason_phrase
            if not isinstance(detail, str):
                detail = str(detail)
            logger.error(
                "Failed to %s: HTTP %s %s",
                action,
                resp.status_code,
                detail,
            )
            if resp.status_code == httpx.codes.CONFLICT:
                raise ConflictError(detail)
            raise DataAccessError(f"Failed to {action}: {detail}")
        return resp

    @staticmethod
    def _form_payload(form: MemoFormData) -> dict[str, Any]:
        return form.model_dump(mode="json", by_alias=True)

    @staticmethod
    def _json_or_empty(resp: httpx.Response) -> dict[str, Any]:
        try:
            body = resp.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

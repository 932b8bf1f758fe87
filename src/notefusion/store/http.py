"""REST chat store.

Talks to the Note Fusion backend's ``/api/chats`` resource with httpx.
Chats are identified by the backend's ``_id`` field.
"""

from datetime import datetime, timezone
from typing import Any

import httpx

from ..exceptions import ChatNotFoundError, StoreError
from .base import ChatStore
from .models import ChatRecord, ChatSummary, Role, StoredMessage, utcnow


def _parse_datetime(value: Any) -> datetime:
    if not isinstance(value, str) or not value:
        return utcnow()
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    # Naive timestamps from the backend are UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _record_from_payload(data: dict[str, Any]) -> ChatRecord:
    messages = [
        StoredMessage(
            role=Role(m["role"]),
            content=m.get("content") or "",
            timestamp=_parse_datetime(m.get("timestamp")),
        )
        for m in data.get("messages") or []
    ]
    return ChatRecord(
        id=str(data.get("_id") or data["id"]),
        title=data.get("title") or "",
        messages=messages,
        created_at=_parse_datetime(data.get("created_at")),
        updated_at=_parse_datetime(data.get("updated_at")),
    )


class HTTPChatStore(ChatStore):
    """Chat store backed by the Note Fusion REST API."""

    def __init__(
        self,
        api_url: str = "http://localhost:8000",
        token: str | None = None,
        timeout: float = 10.0,
        **client_kwargs: Any
    ):
        """Initialize the REST store.

        Args:
            api_url: Backend URL, with or without the trailing ``/api``
            token: Bearer token sent with every request
            timeout: Request timeout in seconds
            **client_kwargs: Additional kwargs for httpx.AsyncClient
        """
        base = api_url.rstrip("/")
        self._base_url = base if base.endswith("/api") else f"{base}/api"
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._headers = headers
        self._timeout = timeout
        self._client_kwargs = client_kwargs
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            **self._client_kwargs
        )

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, chat_id: str | None = None, **kwargs: Any) -> Any:
        if self._client is None:
            raise StoreError("HTTP chat store is not connected")
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise StoreError(f"Chat API request failed: {e}") from e

        if response.status_code == 404 and chat_id is not None:
            raise ChatNotFoundError(chat_id)
        if response.is_error:
            raise StoreError(
                f"Chat API returned {response.status_code} for {method} {path}",
                details={"status_code": response.status_code, "body": response.text},
            )
        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _body(title: str, messages: list[StoredMessage]) -> dict[str, Any]:
        return {
            "title": title,
            "messages": [m.model_dump(mode="json") for m in messages],
        }

    async def create(self, title: str, messages: list[StoredMessage]) -> ChatRecord:
        data = await self._request("POST", "/chats", json=self._body(title, messages))
        return _record_from_payload(data)

    async def update(self, chat_id: str, title: str, messages: list[StoredMessage]) -> ChatRecord:
        data = await self._request(
            "PUT", f"/chats/{chat_id}", chat_id=chat_id, json=self._body(title, messages)
        )
        if not data:
            return ChatRecord(id=chat_id, title=title, messages=list(messages))
        return _record_from_payload(data)

    async def get(self, chat_id: str) -> ChatRecord:
        data = await self._request("GET", f"/chats/{chat_id}", chat_id=chat_id)
        return _record_from_payload(data)

    async def list_summaries(self) -> list[ChatSummary]:
        data = await self._request("GET", "/chats") or []
        summaries = [_record_from_payload(item).summary() for item in data]
        return sorted(summaries, key=lambda s: s.updated_at, reverse=True)

    async def delete(self, chat_id: str) -> None:
        await self._request("DELETE", f"/chats/{chat_id}", chat_id=chat_id)

    @property
    def backend_type(self) -> str:
        return "http"

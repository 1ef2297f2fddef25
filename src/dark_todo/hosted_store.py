from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from .models import TaskRow
from .store import TABLE, RemoteError, TaskStore

logger = logging.getLogger(__name__)


class SupabaseTaskStore(TaskStore):
    """
    The hosted `tasks` table, reached through its PostgREST endpoint.

    Filters use PostgREST operators (`id=eq.<id>`, `category=not.is.null`).
    Transport failures and non-2xx answers surface as RemoteError.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._endpoint = f"{base_url.rstrip('/')}/rest/v1/{TABLE}"
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        *,
        params: Optional[dict] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> httpx.Response:
        headers = dict(self._headers)
        if prefer:
            headers["Prefer"] = prefer
        try:
            response = await self._client.request(
                method, self._endpoint, params=params, json=json, headers=headers
            )
        except httpx.HTTPError as exc:
            raise RemoteError(f"{method} {TABLE}: {exc}") from exc
        if response.is_error:
            raise RemoteError(f"{method} {TABLE}: {response.status_code} {_error_message(response)}")
        return response

    async def select(self) -> List[TaskRow]:
        response = await self._request("GET", params={"select": "*"})
        return _rows(response, "GET")

    async def select_categories(self) -> List[str]:
        response = await self._request(
            "GET", params={"select": "category", "category": "not.is.null"}
        )
        return [row["category"] for row in _rows(response, "GET") if row.get("category") is not None]

    async def insert(self, row: TaskRow) -> List[TaskRow]:
        response = await self._request("POST", json=[dict(row)], prefer="return=representation")
        return _rows(response, "POST")

    async def update(self, task_id: str, patch: TaskRow) -> None:
        await self._request(
            "PATCH", params={"id": f"eq.{task_id}"}, json=dict(patch), prefer="return=minimal"
        )

    async def delete(self, task_id: str) -> None:
        await self._request("DELETE", params={"id": f"eq.{task_id}"}, prefer="return=minimal")

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_message(response: httpx.Response) -> str:
    """PostgREST puts a human message in `message`; fall back to the raw body."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text


def _rows(response: httpx.Response, method: str) -> List[TaskRow]:
    """Decode a 2xx body as a list of row objects; anything else is a RemoteError."""
    try:
        body = response.json()
    except ValueError as exc:
        raise RemoteError(f"{method} {TABLE}: reply is not JSON ({exc})") from exc
    if not isinstance(body, list) or not all(isinstance(row, dict) for row in body):
        raise RemoteError(f"{method} {TABLE}: expected a list of rows, got {type(body).__name__}")
    return body

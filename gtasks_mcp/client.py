"""Async client for the Google Tasks REST API.

This module provides:
- TasksApiClient: thin wrapper over the ``tasklists.*`` and ``tasks.*`` endpoints
- TasksApiError: raised for any failed backend call

The client is handed google-auth credentials, refreshed on demand by
``gtasks_mcp.auth.CredentialsAuth``, or a fully configured ``httpx.AsyncClient``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx
from google.oauth2.credentials import Credentials

from .auth import CredentialsAuth, CredentialsError
from .models import MAX_TASK_RESULTS, Task, TaskList

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://tasks.googleapis.com/tasks/v1"


class TasksApiError(Exception):
    """A Google Tasks API call failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"Tasks API error {self.status_code}: {self.message}"


def _error_message(response: httpx.Response) -> str:
    """Extract Google's ``{"error": {"message": ...}}`` text when present."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return response.text or response.reason_phrase


def _segment(value: str) -> str:
    return quote(value, safe="@")


class TasksApiClient:
    """Client for the Google Tasks API v1."""

    def __init__(self, http: httpx.AsyncClient):
        self._http = http

    @classmethod
    def from_credentials(
        cls,
        credentials: Credentials,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
    ) -> TasksApiClient:
        """Build a client that authenticates with Google OAuth credentials."""
        http = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            timeout=timeout,
            auth=CredentialsAuth(credentials),
            headers={"Accept": "application/json"},
        )
        return cls(http)

    async def __aenter__(self) -> TasksApiClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Send one request and return the decoded JSON body ({} when empty)."""
        try:
            response = await self._http.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling Tasks API {method} {path}: {e}")
            raise TasksApiError(f"Request to {path} failed: {e}") from e
        except CredentialsError as e:
            logger.error(f"Authentication failed for Tasks API {method} {path}: {e}")
            raise TasksApiError(str(e), status_code=401) from e

        if response.is_error:
            error = TasksApiError(_error_message(response), status_code=response.status_code)
            logger.error(f"Tasks API {method} {path} failed: {error}")
            raise error

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Tasks API {method} {path} returned a non-JSON body")
            raise TasksApiError(
                f"Invalid JSON in response: {e}", status_code=response.status_code
            ) from e

    # ============== TASK LISTS ==============

    async def list_task_lists(
        self,
        page_token: Optional[str] = None,
        max_results: int = MAX_TASK_RESULTS,
    ) -> dict[str, Any]:
        """Fetch one page of task lists: ``{"items": [...], "nextPageToken": ...}``."""
        params: dict[str, Any] = {"maxResults": max_results}
        if page_token:
            params["pageToken"] = page_token
        return await self._request("GET", "users/@me/lists", params=params)

    async def get_task_list(self, task_list_id: str) -> TaskList:
        return await self._request("GET", f"users/@me/lists/{_segment(task_list_id)}")

    async def insert_task_list(self, title: str) -> TaskList:
        return await self._request("POST", "users/@me/lists", json={"title": title})

    async def update_task_list(self, task_list_id: str, body: dict[str, Any]) -> TaskList:
        return await self._request(
            "PATCH", f"users/@me/lists/{_segment(task_list_id)}", json=body
        )

    async def delete_task_list(self, task_list_id: str) -> None:
        await self._request("DELETE", f"users/@me/lists/{_segment(task_list_id)}")

    # ============== TASKS ==============

    async def list_tasks(
        self,
        task_list_id: str,
        params: Optional[dict[str, Any]] = None,
        page_token: Optional[str] = None,
    ) -> dict[str, Any]:
        """Fetch one page of tasks from a list.

        Args:
            task_list_id: The task list to read.
            params: ``tasks.list`` query parameters (filters, maxResults).
            page_token: Native page token from the previous page, if any.

        Returns:
            The raw page: ``{"items": [...], "nextPageToken": ...}``.
        """
        query = dict(params or {})
        if page_token:
            query["pageToken"] = page_token
        return await self._request(
            "GET", f"lists/{_segment(task_list_id)}/tasks", params=query
        )

    async def get_task(self, task_list_id: str, task_id: str) -> Task:
        return await self._request(
            "GET", f"lists/{_segment(task_list_id)}/tasks/{_segment(task_id)}"
        )

    async def insert_task(
        self,
        task_list_id: str,
        body: dict[str, Any],
        parent: Optional[str] = None,
        previous: Optional[str] = None,
    ) -> Task:
        params: dict[str, Any] = {}
        if parent:
            params["parent"] = parent
        if previous:
            params["previous"] = previous
        return await self._request(
            "POST", f"lists/{_segment(task_list_id)}/tasks", params=params, json=body
        )

    async def patch_task(self, task_list_id: str, task_id: str, body: dict[str, Any]) -> Task:
        return await self._request(
            "PATCH",
            f"lists/{_segment(task_list_id)}/tasks/{_segment(task_id)}",
            json=body,
        )

    async def delete_task(self, task_list_id: str, task_id: str) -> None:
        await self._request(
            "DELETE", f"lists/{_segment(task_list_id)}/tasks/{_segment(task_id)}"
        )

    async def clear_completed(self, task_list_id: str) -> None:
        await self._request("POST", f"lists/{_segment(task_list_id)}/clear")

    async def move_task(
        self,
        task_list_id: str,
        task_id: str,
        parent: Optional[str] = None,
        previous: Optional[str] = None,
        destination_tasklist: Optional[str] = None,
    ) -> Task:
        params: dict[str, Any] = {}
        if parent:
            params["parent"] = parent
        if previous:
            params["previous"] = previous
        if destination_tasklist:
            params["destinationTasklist"] = destination_tasklist
        return await self._request(
            "POST",
            f"lists/{_segment(task_list_id)}/tasks/{_segment(task_id)}/move",
            params=params,
        )

"""Exhaustive draining of the Tasks API's native pagination."""

import logging
from typing import Any, Awaitable, Callable, Optional

from .client import TasksApiClient
from .models import Task, TaskList

logger = logging.getLogger(__name__)

PageFetcher = Callable[[Optional[str]], Awaitable[dict[str, Any]]]


async def _drain(fetch_page: PageFetcher) -> list[dict[str, Any]]:
    """Follow ``nextPageToken`` until the backend stops returning one.

    Any failing page propagates; a partial result is never returned.
    """
    items: list[dict[str, Any]] = []
    page_token: Optional[str] = None
    pages = 0

    while True:
        response = await fetch_page(page_token)
        pages += 1
        items.extend(response.get("items") or [])
        page_token = response.get("nextPageToken") or None
        if not page_token:
            break

    logger.debug("Drained %d items over %d page(s)", len(items), pages)
    return items


async def fetch_all_task_lists(client: TasksApiClient) -> list[TaskList]:
    """Fetch every task list across API pages."""
    return await _drain(lambda token: client.list_task_lists(page_token=token))


async def fetch_all_tasks(
    client: TasksApiClient,
    task_list_id: str,
    params: Optional[dict[str, Any]] = None,
) -> list[Task]:
    """Fetch every task in one task list across API pages.

    Args:
        client: Tasks API client.
        task_list_id: The list to drain (must be non-empty).
        params: ``tasks.list`` filter parameters, sent unchanged on every page.

    Returns:
        The tasks in the order the backend emitted them.
    """
    if not task_list_id:
        raise ValueError("task_list_id is required")

    return await _drain(
        lambda token: client.list_tasks(task_list_id, params=params, page_token=token)
    )

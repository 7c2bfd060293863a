"""Shared fixtures: an in-memory stand-in for the Google Tasks API."""

from typing import Any, Optional

import pytest

from gtasks_mcp.client import TasksApiError


def make_tasks(prefix: str, count: int, **fields: Any) -> list[dict[str, Any]]:
    """Build ``count`` task records with ids ``{prefix}-{i}``."""
    return [
        {"id": f"{prefix}-{i}", "title": f"{prefix} task {i}", **fields}
        for i in range(count)
    ]


class FakeTasksApi:
    """Implements the TasksApiClient surface over in-memory task lists.

    Pages are served ``page_size`` items at a time with numeric page tokens, so
    exhaustive fetching is exercised. Lists named in ``failing`` raise on read.
    """

    def __init__(self, page_size: int = 7):
        self.page_size = page_size
        self.task_lists: list[dict[str, Any]] = []
        self.tasks: dict[str, list[dict[str, Any]]] = {}
        self.failing: set[str] = set()
        self.fail_registry = False
        self.calls: list[tuple] = []

    def add_list(self, task_list_id: Optional[str], tasks: list[dict[str, Any]], title: str = ""):
        self.task_lists.append({"id": task_list_id, "title": title or f"List {task_list_id}"})
        if task_list_id:
            self.tasks[task_list_id] = list(tasks)

    def _page(self, items: list, page_token: Optional[str]) -> dict[str, Any]:
        start = int(page_token or 0)
        end = start + self.page_size
        response: dict[str, Any] = {"items": items[start:end]}
        if end < len(items):
            response["nextPageToken"] = str(end)
        return response

    async def list_task_lists(self, page_token=None, max_results=100):
        self.calls.append(("list_task_lists", page_token))
        if self.fail_registry:
            raise TasksApiError("registry unavailable", status_code=503)
        return self._page(self.task_lists, page_token)

    async def list_tasks(self, task_list_id, params=None, page_token=None):
        self.calls.append(("list_tasks", task_list_id, params, page_token))
        if task_list_id in self.failing:
            raise TasksApiError(f"list {task_list_id} unavailable", status_code=500)
        if task_list_id not in self.tasks:
            raise TasksApiError("Task list not found.", status_code=404)
        return self._page(self.tasks[task_list_id], page_token)

    async def get_task(self, task_list_id, task_id):
        self.calls.append(("get_task", task_list_id, task_id))
        for task in self.tasks.get(task_list_id, []):
            if task["id"] == task_id:
                return task
        raise TasksApiError("Task not found.", status_code=404)

    async def get_task_list(self, task_list_id):
        self.calls.append(("get_task_list", task_list_id))
        for tl in self.task_lists:
            if tl["id"] == task_list_id:
                return tl
        raise TasksApiError("Task list not found.", status_code=404)

    async def insert_task_list(self, title):
        self.calls.append(("insert_task_list", title))
        task_list = {"id": f"list-{len(self.task_lists)}", "title": title}
        self.add_list(task_list["id"], [], title=title)
        return task_list

    async def update_task_list(self, task_list_id, body):
        self.calls.append(("update_task_list", task_list_id, body))
        return {"id": task_list_id, **body}

    async def delete_task_list(self, task_list_id):
        self.calls.append(("delete_task_list", task_list_id))

    async def insert_task(self, task_list_id, body, parent=None, previous=None):
        self.calls.append(("insert_task", task_list_id, body, parent, previous))
        return {"id": "new-task", **body}

    async def patch_task(self, task_list_id, task_id, body):
        self.calls.append(("patch_task", task_list_id, task_id, body))
        return {"title": "patched", **body}

    async def delete_task(self, task_list_id, task_id):
        self.calls.append(("delete_task", task_list_id, task_id))

    async def clear_completed(self, task_list_id):
        self.calls.append(("clear_completed", task_list_id))

    async def move_task(self, task_list_id, task_id, parent=None, previous=None,
                        destination_tasklist=None):
        self.calls.append(("move_task", task_list_id, task_id, parent, previous,
                           destination_tasklist))
        return {"id": task_id, "title": "moved task"}


@pytest.fixture
def fake_api() -> FakeTasksApi:
    return FakeTasksApi()

"""Tool handlers for Google Tasks tasks and task lists.

Each service owns the ``TasksApiClient`` it was constructed with and returns
plain text ready to be sent back as a tool result.
"""

from typing import Optional

from .aggregator import fetch_tasks
from .client import TasksApiClient
from .fetcher import fetch_all_task_lists
from .formatting import (
    format_task_list,
    format_task_list_details,
    format_task_list_summary,
    paginated_text,
)
from .models import DEFAULT_TASK_LIST, Task, TaskListFilter, TaskPage, TaskStatus
from .pagination import paginate, pagination_metadata


def matches_query(task: Task, query: str) -> bool:
    """Case-insensitive substring match against a task's title or notes."""
    needle = query.lower()
    title = task.get("title") or ""
    notes = task.get("notes") or ""
    return needle in title.lower() or needle in notes.lower()


def _render_page(page: TaskPage, found: str) -> str:
    if page.total == 0:
        header = f"{found}."
    else:
        header = (
            f"{found}. Showing {page.offset + 1}-{page.offset + page.returned}"
            f" of {page.total}."
        )

    body = format_task_list(page.items) if page.items else "No tasks on this page."
    cursor_line = f"\nNext cursor: {page.next_cursor}" if page.next_cursor else ""

    return paginated_text(f"{header}\n{body}{cursor_line}", pagination_metadata(page))


class TaskService:
    """Task operations: paginated list/search plus the write path."""

    def __init__(self, client: TasksApiClient):
        self.client = client

    async def list_page(
        self, filters: Optional[TaskListFilter] = None, cursor: Optional[str] = None
    ) -> TaskPage:
        tasks = await fetch_tasks(self.client, filters)
        return paginate(tasks, cursor)

    async def search_page(
        self,
        query: str,
        filters: Optional[TaskListFilter] = None,
        cursor: Optional[str] = None,
    ) -> TaskPage:
        tasks = await fetch_tasks(self.client, filters)
        matching = [task for task in tasks if matches_query(task, query)]
        return paginate(matching, cursor)

    async def list(
        self, filters: Optional[TaskListFilter] = None, cursor: Optional[str] = None
    ) -> str:
        """List tasks with cursor pagination (20 tasks per page)."""
        page = await self.list_page(filters, cursor)
        return _render_page(page, f"Found {page.total} tasks")

    async def search(
        self,
        query: str,
        filters: Optional[TaskListFilter] = None,
        cursor: Optional[str] = None,
    ) -> str:
        """Search tasks whose title or notes contain ``query``.

        The match runs over the full merged set before paging, so page
        boundaries are stable with respect to the query.
        """
        page = await self.search_page(query, filters, cursor)
        return _render_page(page, f'Found {page.total} tasks matching "{query}"')

    async def create(
        self,
        title: str,
        task_list_id: Optional[str] = None,
        notes: Optional[str] = None,
        due: Optional[str] = None,
        status: Optional[str] = None,
        parent: Optional[str] = None,
        previous: Optional[str] = None,
    ) -> str:
        """Create a task, optionally as a subtask or after a given sibling."""
        body: dict[str, str] = {"title": title}
        if notes:
            body["notes"] = notes
        if due:
            body["due"] = due
        if status:
            body["status"] = TaskStatus(status).value

        task = await self.client.insert_task(
            task_list_id or DEFAULT_TASK_LIST, body, parent=parent, previous=previous
        )
        return f"Task created: {task.get('title')}"

    async def update(
        self,
        task_id: str,
        task_list_id: Optional[str] = None,
        title: Optional[str] = None,
        notes: Optional[str] = None,
        status: Optional[str] = None,
        due: Optional[str] = None,
    ) -> str:
        """Patch a task. Only the provided fields are overwritten."""
        body: dict[str, str] = {"id": task_id}
        if title is not None:
            body["title"] = title
        if notes is not None:
            body["notes"] = notes
        if status is not None:
            body["status"] = TaskStatus(status).value
        if due is not None:
            body["due"] = due

        task = await self.client.patch_task(task_list_id or DEFAULT_TASK_LIST, task_id, body)
        return f"Task updated: {task.get('title')}"

    async def delete(self, task_id: str, task_list_id: Optional[str] = None) -> str:
        await self.client.delete_task(task_list_id or DEFAULT_TASK_LIST, task_id)
        return f"Task {task_id} deleted"

    async def clear(self, task_list_id: Optional[str] = None) -> str:
        """Remove all completed tasks from a task list."""
        task_list_id = task_list_id or DEFAULT_TASK_LIST
        await self.client.clear_completed(task_list_id)
        return f"Tasks from tasklist {task_list_id} cleared"

    async def move(
        self,
        task_list_id: str,
        task_id: str,
        parent: Optional[str] = None,
        previous: Optional[str] = None,
        destination_tasklist: Optional[str] = None,
    ) -> str:
        """Move a task under a new parent, after a sibling, or to another list."""
        task = await self.client.move_task(
            task_list_id,
            task_id,
            parent=parent,
            previous=previous,
            destination_tasklist=destination_tasklist,
        )
        return f"Task moved: {task.get('title')} (ID: {task.get('id')})"


class TaskListService:
    """Task list management."""

    def __init__(self, client: TasksApiClient):
        self.client = client

    async def list(self) -> str:
        task_lists = await fetch_all_task_lists(self.client)
        lines = [format_task_list_summary(tl) for tl in task_lists]
        return f"Found {len(task_lists)} task lists:\n" + "\n".join(lines)

    async def get(self, task_list_id: str) -> str:
        task_list = await self.client.get_task_list(task_list_id)
        return format_task_list_details(task_list)

    async def create(self, title: str) -> str:
        task_list = await self.client.insert_task_list(title)
        return f"Task list created: {task_list.get('title')} (ID: {task_list.get('id')})"

    async def update(self, task_list_id: str, title: Optional[str] = None) -> str:
        body = {"title": title} if title is not None else {}
        task_list = await self.client.update_task_list(task_list_id, body)
        return f"Task list updated: {task_list.get('title')}"

    async def delete(self, task_list_id: str) -> str:
        await self.client.delete_task_list(task_list_id)
        return f"Task list {task_list_id} deleted"

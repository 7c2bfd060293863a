"""Tasks exposed as MCP resources (``gtasks:///{task_id}``)."""

import asyncio
import logging

from .aggregator import fetch_tasks
from .client import TasksApiClient
from .fetcher import fetch_all_task_lists
from .models import Task, TaskListFilter

logger = logging.getLogger(__name__)

TASK_URI_PREFIX = "gtasks:///"


class TaskNotFoundError(LookupError):
    """No task list holds the requested task."""


def task_uri(task: Task) -> str:
    return f"{TASK_URI_PREFIX}{task.get('id')}"


class TaskResourceHandler:
    """Read and list capabilities for tasks as MCP resources."""

    def __init__(self, client: TasksApiClient):
        self.client = client

    async def read(self, task_id: str) -> Task:
        """Find a task by id across all task lists.

        The Tasks API needs a list id to fetch a task, so every list is asked
        in parallel; the first list in registry order that has it wins.

        Raises:
            TaskNotFoundError: No list returned the task.
        """
        task_lists = await fetch_all_task_lists(self.client)
        task_list_ids = [tl["id"] for tl in task_lists if tl.get("id")]

        results = await asyncio.gather(
            *(self.client.get_task(tl_id, task_id) for tl_id in task_list_ids),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                continue
            if isinstance(result, BaseException):
                raise result
            return result

        logger.info("Task %s not found in %d task lists", task_id, len(task_list_ids))
        raise TaskNotFoundError(f"Task not found: {task_id}")

    async def list(self) -> list[Task]:
        """All tasks from all task lists, with the backend's default filters."""
        return await fetch_tasks(self.client, TaskListFilter())

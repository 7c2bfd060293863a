"""Text rendering for tool and resource results."""

import json

from .models import PaginationMetadata, Task, TaskList


def format_task(task: Task) -> str:
    """Format a single task into a human-readable string with all fields."""
    return (
        f"{task.get('title')}\n"
        f" (Due: {task.get('due') or 'Not set'})"
        f" - Notes: {task.get('notes')}"
        f" - ID: {task.get('id')}"
        f" - Status: {task.get('status')}"
        f" - URI: {task.get('selfLink')}"
        f" - Hidden: {task.get('hidden')}"
        f" - Parent: {task.get('parent')}"
        f" - Deleted?: {task.get('deleted')}"
        f" - Completed Date: {task.get('completed')}"
        f" - Position: {task.get('position')}"
        f" - Updated Date: {task.get('updated')}"
        f" - ETag: {task.get('etag')}"
        f" - Links: {task.get('links')}"
        f" - Kind: {task.get('kind')}"
    )


def format_task_list(tasks: list[Task]) -> str:
    return "\n".join(format_task(task) for task in tasks)


def format_task_details(task: Task) -> str:
    """Multi-line view of one task, used by the task resource."""
    fields = [
        ("Title", task.get("title") or "No title"),
        ("Status", task.get("status") or "Unknown"),
        ("Due", task.get("due") or "Not set"),
        ("Notes", task.get("notes") or "No notes"),
        ("Hidden", task.get("hidden") or "Unknown"),
        ("Parent", task.get("parent") or "Unknown"),
        ("Deleted?", task.get("deleted") or "Unknown"),
        ("Completed Date", task.get("completed") or "Unknown"),
        ("Position", task.get("position") or "Unknown"),
        ("ETag", task.get("etag") or "Unknown"),
        ("Links", task.get("links") or "Unknown"),
        ("Kind", task.get("kind") or "Unknown"),
        ("Updated", task.get("updated") or "Unknown"),
    ]
    return "\n".join(f"{label}: {value}" for label, value in fields)


def format_task_list_summary(task_list: TaskList) -> str:
    return (
        f"{task_list.get('title')} - ID: {task_list.get('id')}"
        f" - Updated: {task_list.get('updated')}"
    )


def format_task_list_details(task_list: TaskList) -> str:
    return "\n".join(
        [
            f"Title: {task_list.get('title')}",
            f"ID: {task_list.get('id')}",
            f"Updated: {task_list.get('updated')}",
            f"Kind: {task_list.get('kind')}",
            f"ETag: {task_list.get('etag')}",
        ]
    )


def paginated_text(text: str, pagination: PaginationMetadata) -> str:
    """Append pagination metadata to a text result as a JSON trailer."""
    payload = {"pagination": pagination.model_dump(by_alias=True)}
    return f"{text}\n\n{json.dumps(payload)}"

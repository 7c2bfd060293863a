"""Fan-out of task queries across task lists.

A query naming a task list reads only that list and fails if it fails. A query
without one reads every list concurrently; a list that fails is logged and
left out of the merge while the others still contribute.
"""

import asyncio
import logging
from typing import Any, Optional

from .client import TasksApiClient
from .fetcher import fetch_all_task_lists, fetch_all_tasks
from .models import ListFetchOutcome, Task, TaskListFilter

logger = logging.getLogger(__name__)


async def _fetch_list_outcome(
    client: TasksApiClient,
    task_list_id: str,
    params: dict[str, Any],
) -> ListFetchOutcome:
    try:
        tasks = await fetch_all_tasks(client, task_list_id, params)
    except Exception as e:
        return ListFetchOutcome(task_list_id=task_list_id, error=e)
    return ListFetchOutcome(task_list_id=task_list_id, tasks=tasks)


async def fetch_list_outcomes(
    client: TasksApiClient,
    task_list_ids: list[str],
    params: dict[str, Any],
) -> list[ListFetchOutcome]:
    """Fetch every list concurrently and settle each one independently.

    Outcomes come back in the same order as ``task_list_ids``.
    """
    return list(
        await asyncio.gather(
            *(_fetch_list_outcome(client, tl_id, params) for tl_id in task_list_ids)
        )
    )


def merge_outcomes(outcomes: list[ListFetchOutcome]) -> list[Task]:
    """Concatenate successful outcomes in order, logging the failures."""
    merged: list[Task] = []
    failed = 0
    for outcome in outcomes:
        if not outcome.succeeded:
            failed += 1
            logger.error(
                "Error fetching tasks from task list %s: %s",
                outcome.task_list_id,
                outcome.error,
            )
            continue
        merged.extend(outcome.tasks)

    if failed:
        logger.warning(
            "Merged %d tasks from %d of %d task lists",
            len(merged),
            len(outcomes) - failed,
            len(outcomes),
        )
    return merged


async def fetch_tasks(
    client: TasksApiClient,
    filters: Optional[TaskListFilter] = None,
) -> list[Task]:
    """Fetch tasks from one task list, or from all of them, with filters.

    Args:
        client: Tasks API client.
        filters: Query filters. When ``filters.task_list_id`` is set only that
            list is read and its failure propagates.

    Returns:
        The merged tasks, lists concatenated in registry order.
    """
    filters = filters or TaskListFilter()
    params = filters.to_query_params()

    if filters.task_list_id:
        return await fetch_all_tasks(client, filters.task_list_id, params)

    task_lists = await fetch_all_task_lists(client)
    task_list_ids = [tl["id"] for tl in task_lists if tl.get("id")]
    logger.debug("Fanning out over %d task lists", len(task_list_ids))

    outcomes = await fetch_list_outcomes(client, task_list_ids, params)
    return merge_outcomes(outcomes)

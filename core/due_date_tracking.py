# =============================================================================
# core/due_date_tracking.py  —  Postponement history from task stories
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Reconstructs due-date history from each task's stories (Asana's change
#   log).  A story counts when ChangeEvent.is_due_date_change() says so.
#
# BEST EFFORT SCANS:
#   The postponement and recent-changes scans fetch stories for many tasks,
#   one task at a time.  When one task's fetch fails it is logged and
#   skipped; the scan still returns what it found.
# =============================================================================

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from core.asana_client import AsanaClient
from core.dates import resolve_now
from core.envelopes import failure
from core.models import ChangeEvent, Task, format_timestamp

logger = logging.getLogger(__name__)


@dataclass
class TaskDueDateChanges:
    task: Task
    changes: list[ChangeEvent]

    @property
    def change_count(self) -> int:
        return len(self.changes)

    @property
    def latest_change(self) -> ChangeEvent:
        return max(self.changes, key=lambda c: c.created_at)


def due_date_changes(stories: list[ChangeEvent], since: Optional[datetime] = None) -> list[ChangeEvent]:
    """Stories recording a due-date change, optionally no older than `since`."""
    return [
        story for story in stories
        if (since is None or story.created_at >= since) and story.is_due_date_change()
    ]


def _render_old(story: ChangeEvent) -> str:
    return story.old_due_on or format_timestamp(story.old_due_at) or "No due date"


def _render_new(story: ChangeEvent) -> str:
    return story.new_due_on or format_timestamp(story.new_due_at) or "Removed"


async def get_task_due_date_changes(client: AsanaClient, task_gid: str) -> dict:
    """Every recorded due-date change for one task."""
    try:
        task = await client.get_task(task_gid)
        stories = await client.get_task_stories(task_gid)
    except Exception as exc:
        return failure("fetch due date changes", exc, collection="changes", changeCount=0)

    changes = due_date_changes(stories)
    summary = {
        "taskName": task.name,
        "taskGid": task.gid,
        "currentDueDate": task.due_on or "No due date",
        "changeCount": len(changes),
        "count": len(changes),
        "changes": [
            {
                "date": format_timestamp(story.created_at),
                "oldDueDate": _render_old(story),
                "newDueDate": _render_new(story),
                "changedBy": story.author_name,
            }
            for story in changes
        ],
    }

    if not changes:
        return {"message": f'Task "{task.name}" has no due date changes recorded.', **summary}

    return {
        "message": f'Task "{task.name}" has had its due date changed {len(changes)} time(s).',
        **summary,
    }


async def scan_due_date_changes(
    client: AsanaClient,
    tasks: list[Task],
    since: Optional[datetime] = None,
) -> list[TaskDueDateChanges]:
    """Fetch stories for each task in order; skip tasks whose fetch fails."""
    found = []
    for task in tasks:
        try:
            stories = await client.get_task_stories(task.gid)
        except Exception as exc:
            logger.warning("Skipping task %s, could not fetch stories: %s", task.gid, exc)
            continue
        changes = due_date_changes(stories, since)
        if changes:
            found.append(TaskDueDateChanges(task=task, changes=changes))
    return found


async def get_most_postponed_tasks(client: AsanaClient, limit: int = 10) -> dict:
    """Incomplete tasks ranked by how often their due date changed."""
    try:
        tasks = await client.get_tasks()
    except Exception as exc:
        return failure("analyze postponed tasks", exc)

    candidates = [task for task in tasks if not task.completed and task.due_on]
    if not candidates:
        return {"message": "No incomplete tasks with due dates found.", "count": 0, "tasks": []}

    with_changes = await scan_due_date_changes(client, candidates)
    if not with_changes:
        return {"message": "No tasks with due date changes found.", "count": 0, "tasks": []}

    with_changes.sort(key=lambda item: item.change_count, reverse=True)
    top = with_changes[:max(limit, 0)]

    return {
        "message": (
            f"Found {len(with_changes)} task(s) with due date changes. "
            f"Showing top {len(top)}."
        ),
        "count": len(top),
        "totalTasksWithChanges": len(with_changes),
        "tasks": [
            {
                "taskName": item.task.name,
                "taskGid": item.task.gid,
                "currentDueDate": item.task.due_on,
                "assignee": item.task.assignee_name,
                "project": item.task.project_name,
                "postponeCount": item.change_count,
                "lastChange": format_timestamp(item.latest_change.created_at),
            }
            for item in top
        ],
    }


async def get_recent_due_date_changes(
    client: AsanaClient,
    days: int = 7,
    now: Optional[datetime] = None,
) -> dict:
    """Tasks whose due date changed in the last `days` days, newest first."""
    cutoff = resolve_now(now) - timedelta(days=days)

    try:
        tasks = await client.get_tasks(modified_since=cutoff)
    except Exception as exc:
        return failure("fetch recent due date changes", exc)

    if not tasks:
        return {"message": f"No tasks were modified in the last {days} day(s).", "count": 0, "tasks": []}

    recent = await scan_due_date_changes(client, tasks, since=cutoff)
    if not recent:
        return {"message": f"No due date changes found in the last {days} day(s).", "count": 0, "tasks": []}

    recent.sort(key=lambda item: item.latest_change.created_at, reverse=True)

    results = []
    for item in recent:
        latest = item.latest_change
        results.append({
            "taskName": item.task.name,
            "taskGid": item.task.gid,
            "assignee": item.task.assignee_name,
            "project": item.task.project_name,
            "oldDueDate": _render_old(latest),
            "newDueDate": _render_new(latest),
            "changedBy": latest.author_name,
            "changedAt": format_timestamp(latest.created_at),
            "changeCount": item.change_count,
        })

    return {
        "message": f"Found {len(results)} task(s) with due date changes in the last {days} day(s).",
        "count": len(results),
        "tasks": results,
    }

# =============================================================================
# core/daily_status.py  —  "What happened today?" queries
# =============================================================================
#
# Three questions: what was completed, updated, or is due today.
#
# DOUBLE FILTERING:
#   The completed/updated queries ask Asana for a coarse pre-filter
#   (completed_since / modified_since = start of today) and then re-check the
#   exact boundary locally.  Asana's filters can be inclusive at boundaries
#   (completed_since also returns every INCOMPLETE task), so the local check
#   decides membership.
# =============================================================================

from datetime import datetime
from typing import Optional

from core.asana_client import AsanaClient
from core.dates import resolve_now, start_of_day, today_str
from core.envelopes import failure, task_placement
from core.models import format_timestamp


async def get_tasks_completed_today(
    client: AsanaClient,
    assignee: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Tasks marked complete since local midnight."""
    now = resolve_now(now)
    day_start = start_of_day(now)

    try:
        tasks = await client.get_tasks(completed_since=day_start, assignee=assignee)
    except Exception as exc:
        return failure("fetch completed tasks", exc)

    completed_today = [
        task for task in tasks
        if task.completed and task.completed_at is not None and task.completed_at >= day_start
    ]

    if not completed_today:
        return {"message": "No tasks were completed today.", "count": 0, "tasks": []}

    return {
        "message": f"{len(completed_today)} task(s) completed today.",
        "count": len(completed_today),
        "tasks": [
            {
                "name": task.name,
                "gid": task.gid,
                "completedAt": format_timestamp(task.completed_at),
                **task_placement(task),
            }
            for task in completed_today
        ],
        "date": today_str(now),
    }


async def get_tasks_updated_today(
    client: AsanaClient,
    assignee: Optional[str] = None,
    include_completed: bool = True,
    now: Optional[datetime] = None,
) -> dict:
    """Tasks with any field modified since local midnight."""
    now = resolve_now(now)
    day_start = start_of_day(now)

    try:
        tasks = await client.get_tasks(modified_since=day_start, assignee=assignee)
    except Exception as exc:
        return failure("fetch updated tasks", exc)

    updated = [
        task for task in tasks
        if task.modified_at is not None and task.modified_at >= day_start
    ]
    if not include_completed:
        updated = [task for task in updated if not task.completed]

    if not updated:
        return {"message": "No tasks were updated today.", "count": 0, "tasks": []}

    return {
        "message": f"{len(updated)} task(s) updated today.",
        "count": len(updated),
        "tasks": [
            {
                "name": task.name,
                "gid": task.gid,
                "modifiedAt": format_timestamp(task.modified_at),
                "completed": task.completed,
                **task_placement(task),
            }
            for task in updated
        ],
        "date": today_str(now),
    }


async def get_tasks_due_today(
    client: AsanaClient,
    assignee: Optional[str] = None,
    exclude_completed: bool = True,
    now: Optional[datetime] = None,
) -> dict:
    now = resolve_now(now)
    today = today_str(now)

    try:
        tasks = await client.get_tasks(assignee=assignee)
    except Exception as exc:
        return failure("fetch tasks due today", exc)

    due_today = [task for task in tasks if task.due_on == today]
    if exclude_completed:
        due_today = [task for task in due_today if not task.completed]

    if not due_today:
        return {"message": "No tasks are due today.", "count": 0, "tasks": []}

    return {
        "message": f"{len(due_today)} task(s) due today.",
        "count": len(due_today),
        "tasks": [
            {
                "name": task.name,
                "gid": task.gid,
                "dueOn": task.due_on,
                "completed": task.completed,
                **task_placement(task),
            }
            for task in due_today
        ],
        "date": today,
    }

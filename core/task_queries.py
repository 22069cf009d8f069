# =============================================================================
# core/task_queries.py  —  Ad-hoc task and user lookups
# =============================================================================
#
# Overdue, unassigned and undated tasks; name search; workspace users; the
# current user; tasks for a given assignee.
#
# Name search is a case-insensitive substring scan over the fetched task set
# (Asana's own search endpoint is not used).
# =============================================================================

from datetime import datetime
from typing import Optional

from core.asana_client import AsanaClient
from core.dates import days_overdue, resolve_now, today_str
from core.envelopes import failure, task_placement
from core.models import User, format_timestamp


def _user_summary(user: User) -> dict:
    return {"name": user.name, "gid": user.gid, "email": user.email or "No email"}


async def get_overdue_tasks(
    client: AsanaClient,
    assignee: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Incomplete tasks whose due date is before today, oldest first."""
    now = resolve_now(now)
    today = today_str(now)

    try:
        tasks = await client.get_tasks(assignee=assignee)
    except Exception as exc:
        return failure("fetch overdue tasks", exc)

    overdue = sorted(
        (t for t in tasks if not t.completed and t.due_on is not None and t.due_on < today),
        key=lambda t: t.due_on,
    )

    if not overdue:
        return {"message": "No overdue tasks found.", "count": 0, "tasks": []}

    return {
        "message": f"{len(overdue)} overdue task(s) found.",
        "count": len(overdue),
        "tasks": [
            {
                "name": task.name,
                "gid": task.gid,
                "dueOn": task.due_on,
                "daysOverdue": days_overdue(task.due_on, now),
                **task_placement(task),
            }
            for task in overdue
        ],
    }


async def get_unassigned_tasks(client: AsanaClient, exclude_completed: bool = True) -> dict:
    try:
        tasks = await client.get_tasks()
    except Exception as exc:
        return failure("fetch unassigned tasks", exc)

    unassigned = [task for task in tasks if task.assignee is None]
    if exclude_completed:
        unassigned = [task for task in unassigned if not task.completed]

    if not unassigned:
        return {"message": "No unassigned tasks found.", "count": 0, "tasks": []}

    return {
        "message": f"{len(unassigned)} unassigned task(s) found.",
        "count": len(unassigned),
        "tasks": [
            {
                "name": task.name,
                "gid": task.gid,
                "dueOn": task.due_on or "No due date",
                "completed": task.completed,
                "project": task.project_name,
                "section": task.section_name,
            }
            for task in unassigned
        ],
    }


async def get_tasks_without_due_dates(
    client: AsanaClient,
    exclude_completed: bool = True,
    assignee: Optional[str] = None,
) -> dict:
    """Tasks with neither a due date nor a due time."""
    try:
        tasks = await client.get_tasks(assignee=assignee)
    except Exception as exc:
        return failure("fetch tasks without due dates", exc)

    undated = [task for task in tasks if not task.due_on and not task.due_at]
    if exclude_completed:
        undated = [task for task in undated if not task.completed]

    if not undated:
        return {"message": "No tasks without due dates found.", "count": 0, "tasks": []}

    return {
        "message": f"{len(undated)} task(s) without due dates found.",
        "count": len(undated),
        "tasks": [
            {
                "name": task.name,
                "gid": task.gid,
                "completed": task.completed,
                "createdAt": format_timestamp(task.created_at),
                **task_placement(task),
            }
            for task in undated
        ],
    }


async def search_tasks_by_name(
    client: AsanaClient,
    search_query: str,
    exclude_completed: bool = False,
) -> dict:
    try:
        tasks = await client.get_tasks()
    except Exception as exc:
        return failure("search tasks", exc)

    needle = search_query.lower()
    matches = [task for task in tasks if needle in task.name.lower()]
    if exclude_completed:
        matches = [task for task in matches if not task.completed]

    if not matches:
        return {"message": f'No tasks found matching "{search_query}".', "count": 0, "tasks": []}

    return {
        "message": f'Found {len(matches)} task(s) matching "{search_query}".',
        "count": len(matches),
        "searchQuery": search_query,
        "tasks": [
            {
                "name": task.name,
                "gid": task.gid,
                "completed": task.completed,
                "dueOn": task.due_on or "No due date",
                **task_placement(task),
            }
            for task in matches
        ],
    }


async def get_tasks_assigned_to(
    client: AsanaClient,
    assignee: str,
    exclude_completed: bool = True,
) -> dict:
    """Tasks assigned to one user, named by display name in the message."""
    try:
        tasks = await client.get_tasks(assignee=assignee)
    except Exception as exc:
        return failure("fetch assigned tasks", exc)

    # The assignee filter accepts "me" and emails as well as gids, so the
    # display name comes from the tasks themselves.
    assignee_name = next((t.assignee.name for t in tasks if t.assignee), assignee)

    if exclude_completed:
        tasks = [task for task in tasks if not task.completed]

    if not tasks:
        return {
            "message": f"No tasks found assigned to {assignee_name}.",
            "count": 0,
            "assignee": assignee_name,
            "tasks": [],
        }

    return {
        "message": f"Found {len(tasks)} task(s) assigned to {assignee_name}.",
        "count": len(tasks),
        "assignee": assignee_name,
        "tasks": [
            {
                "name": task.name,
                "gid": task.gid,
                "completed": task.completed,
                "dueOn": task.due_on or "No due date",
                "project": task.project_name,
                "section": task.section_name,
            }
            for task in tasks
        ],
    }


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------
async def get_workspace_users(client: AsanaClient) -> dict:
    try:
        users = await client.get_workspace_users()
    except Exception as exc:
        return failure("fetch workspace users", exc, collection="users")

    if not users:
        return {"message": "No users found in the workspace.", "count": 0, "users": []}

    return {
        "message": f"Found {len(users)} user(s) in the workspace.",
        "count": len(users),
        "users": [_user_summary(user) for user in users],
    }


async def get_me(client: AsanaClient) -> dict:
    """The user the access token belongs to."""
    try:
        me = await client.get_me()
    except Exception as exc:
        return failure("fetch current user", exc, collection="users")

    return {
        "message": f"Current user identified: {me.name}",
        "count": 1,
        "user": _user_summary(me),
    }


async def search_users(client: AsanaClient, query: str) -> dict:
    try:
        users = await client.search_users(query)
    except Exception as exc:
        return failure("search users", exc, collection="users")

    if not users:
        return {"message": f'No users found matching "{query}".', "count": 0, "users": []}

    return {
        "message": f'Found {len(users)} user(s) matching "{query}".',
        "count": len(users),
        "users": [_user_summary(user) for user in users],
    }

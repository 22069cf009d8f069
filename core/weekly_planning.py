# =============================================================================
# core/weekly_planning.py  —  This week's plan and team workload
# =============================================================================
#
# The week runs Monday to Sunday.  Workload buckets are keyed by assignee
# gid; tasks without an assignee land in a synthetic "unassigned" bucket.
# =============================================================================

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.asana_client import AsanaClient
from core.dates import resolve_now, today_str, week_bounds
from core.envelopes import failure
from core.models import Task, User

UNASSIGNED = User(gid="unassigned", name="Unassigned")


@dataclass
class UserWorkload:
    user: User
    total_tasks: int = 0
    completed_tasks: int = 0
    overdue_tasks: int = 0
    upcoming_tasks: int = 0

    @property
    def completion_rate(self) -> int:
        return completion_rate(self.completed_tasks, self.total_tasks)


def completion_rate(completed: int, total: int) -> int:
    """Percentage of completed tasks, rounded; 0 for an empty set."""
    if total == 0:
        return 0
    return round(completed / total * 100)


async def get_weekly_planned_tasks(
    client: AsanaClient,
    assignee: Optional[str] = None,
    exclude_completed: bool = True,
    now: Optional[datetime] = None,
) -> dict:
    """Tasks due between this Monday and Sunday, grouped by due date."""
    now = resolve_now(now)
    week_start, week_end = week_bounds(now)

    try:
        tasks = await client.get_tasks(assignee=assignee)
    except Exception as exc:
        return failure("fetch weekly tasks", exc)

    weekly = [
        task for task in tasks
        if task.due_on is not None and week_start <= task.due_on <= week_end
    ]
    if exclude_completed:
        weekly = [task for task in weekly if not task.completed]

    if not weekly:
        return {
            "message": "No tasks planned for this week.",
            "count": 0,
            "tasks": [],
            "weekStart": week_start,
            "weekEnd": week_end,
        }

    tasks_by_day: dict[str, list[dict]] = {}
    for task in weekly:
        tasks_by_day.setdefault(task.due_on, []).append({
            "name": task.name,
            "gid": task.gid,
            "completed": task.completed,
            "assignee": task.assignee_name,
            "project": task.project_name,
            "section": task.section_name,
        })

    return {
        "message": f"{len(weekly)} task(s) planned for this week.",
        "count": len(weekly),
        "weekStart": week_start,
        "weekEnd": week_end,
        "tasksByDay": dict(sorted(tasks_by_day.items())),
    }


def build_workload(tasks: list[Task], today: str, include_completed: bool) -> list[UserWorkload]:
    """Tally tasks per assignee, busiest first."""
    workloads: dict[str, UserWorkload] = {}

    for task in tasks:
        if task.completed and not include_completed:
            continue

        user = task.assignee or UNASSIGNED
        workload = workloads.setdefault(user.gid, UserWorkload(user=user))
        workload.total_tasks += 1

        if task.completed:
            workload.completed_tasks += 1
        elif task.due_on:
            if task.due_on < today:
                workload.overdue_tasks += 1
            else:
                workload.upcoming_tasks += 1

    return sorted(workloads.values(), key=lambda w: w.total_tasks, reverse=True)


async def get_team_workload(
    client: AsanaClient,
    include_completed: bool = False,
    now: Optional[datetime] = None,
) -> dict:
    """Per-person totals: all, completed, overdue and upcoming tasks."""
    now = resolve_now(now)

    try:
        tasks = await client.get_tasks()
    except Exception as exc:
        return failure("analyze team workload", exc, collection="workload", teamMembers=0)

    workload = build_workload(tasks, today_str(now), include_completed)

    if not workload:
        return {
            "message": "No tasks found for workload analysis.",
            "count": 0,
            "teamMembers": 0,
            "workload": [],
        }

    return {
        "message": f"Workload analysis for {len(workload)} team member(s).",
        "count": len(workload),
        "teamMembers": len(workload),
        "totalTasks": sum(w.total_tasks for w in workload),
        "workload": [
            {
                "user": w.user.name,
                "userGid": w.user.gid,
                "totalTasks": w.total_tasks,
                "completedTasks": w.completed_tasks,
                "overdueTasks": w.overdue_tasks,
                "upcomingTasks": w.upcoming_tasks,
                "completionRate": w.completion_rate,
            }
            for w in workload
        ],
    }


async def get_overdue_tasks_by_person(
    client: AsanaClient,
    now: Optional[datetime] = None,
) -> dict:
    now = resolve_now(now)
    today = today_str(now)

    try:
        tasks = await client.get_tasks()
    except Exception as exc:
        return failure("fetch overdue tasks", exc, collection="byPerson", totalOverdue=0)

    overdue = [
        task for task in tasks
        if not task.completed and task.due_on is not None and task.due_on < today
    ]

    if not overdue:
        return {"message": "No overdue tasks found.", "count": 0, "totalOverdue": 0, "byPerson": []}

    by_person: dict[str, dict] = {}
    for task in overdue:
        user = task.assignee or UNASSIGNED
        person = by_person.setdefault(user.gid, {
            "user": user.name,
            "userGid": user.gid,
            "overdueCount": 0,
            "tasks": [],
        })
        person["overdueCount"] += 1
        person["tasks"].append({
            "name": task.name,
            "gid": task.gid,
            "dueOn": task.due_on,
            "project": task.project_name,
        })

    people = sorted(by_person.values(), key=lambda p: p["overdueCount"], reverse=True)

    return {
        "message": f"{len(overdue)} overdue task(s) across {len(people)} team member(s).",
        "count": len(people),
        "totalOverdue": len(overdue),
        "byPerson": people,
    }

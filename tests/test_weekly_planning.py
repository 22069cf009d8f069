"""Tests for this week's plan, team workload and overdue-by-person."""

import pytest

from conftest import ALICE, BOB, NOW, make_task
from core.weekly_planning import (
    build_workload,
    completion_rate,
    get_overdue_tasks_by_person,
    get_team_workload,
    get_weekly_planned_tasks,
)


def test_completion_rate_of_empty_set_is_zero():
    assert completion_rate(0, 0) == 0
    assert completion_rate(1, 3) == 33
    assert completion_rate(2, 3) == 67


class TestWeeklyPlannedTasks:

    @pytest.mark.asyncio
    async def test_groups_this_weeks_tasks_by_day(self, client):
        client.tasks = [
            make_task("t-1", due_on="2024-03-15", assignee=ALICE),
            make_task("t-2", due_on="2024-03-11"),
            make_task("t-3", due_on="2024-03-17"),
            make_task("t-4", due_on="2024-03-15"),
            make_task("t-5", due_on="2024-03-10"),
            make_task("t-6", due_on="2024-03-18"),
            make_task("t-7", due_on="2024-03-12", completed=True),
            make_task("t-8"),
        ]

        result = await get_weekly_planned_tasks(client, now=NOW)

        assert result["weekStart"] == "2024-03-11"
        assert result["weekEnd"] == "2024-03-17"
        assert result["count"] == 4
        assert list(result["tasksByDay"]) == ["2024-03-11", "2024-03-15", "2024-03-17"]
        assert [t["gid"] for t in result["tasksByDay"]["2024-03-15"]] == ["t-1", "t-4"]
        assert result["tasksByDay"]["2024-03-15"][0]["assignee"] == "Alice Cohen"

    @pytest.mark.asyncio
    async def test_can_include_completed(self, client):
        client.tasks = [make_task("t-7", due_on="2024-03-12", completed=True)]

        result = await get_weekly_planned_tasks(client, exclude_completed=False, now=NOW)

        assert result["count"] == 1
        assert result["tasksByDay"]["2024-03-12"][0]["completed"] is True

    @pytest.mark.asyncio
    async def test_empty_week_still_reports_bounds(self, client):
        result = await get_weekly_planned_tasks(client, now=NOW)

        assert result == {
            "message": "No tasks planned for this week.",
            "count": 0,
            "tasks": [],
            "weekStart": "2024-03-11",
            "weekEnd": "2024-03-17",
        }


class TestTeamWorkload:

    @pytest.fixture
    def tasks(self):
        return [
            make_task("a-1", assignee=ALICE, due_on="2024-03-01"),
            make_task("a-2", assignee=ALICE, due_on="2024-03-20"),
            make_task("a-3", assignee=ALICE, due_on="2024-03-13"),
            make_task("a-4", assignee=ALICE, completed=True, due_on="2024-03-01"),
            make_task("b-1", assignee=BOB),
            make_task("n-1"),
            make_task("n-2", completed=True),
        ]

    def test_bucket_totals_sum_to_incomplete_count(self, tasks):
        workload = build_workload(tasks, "2024-03-13", include_completed=False)

        incomplete = sum(1 for t in tasks if not t.completed)
        assert sum(w.total_tasks for w in workload) == incomplete

        alice = workload[0]
        assert alice.user.name == "Alice Cohen"
        assert (alice.total_tasks, alice.overdue_tasks, alice.upcoming_tasks) == (3, 1, 2)
        assert alice.completion_rate == 0

    def test_unassigned_tasks_get_their_own_bucket(self, tasks):
        workload = build_workload(tasks, "2024-03-13", include_completed=True)

        unassigned = next(w for w in workload if w.user.gid == "unassigned")
        assert unassigned.user.name == "Unassigned"
        assert unassigned.total_tasks == 2
        assert unassigned.completion_rate == 50

    @pytest.mark.asyncio
    async def test_envelope(self, client, tasks):
        client.tasks = tasks

        result = await get_team_workload(client, include_completed=True, now=NOW)

        assert result["teamMembers"] == 3
        assert result["count"] == 3
        assert result["totalTasks"] == 7
        assert result["workload"][0] == {
            "user": "Alice Cohen",
            "userGid": "u-alice",
            "totalTasks": 4,
            "completedTasks": 1,
            "overdueTasks": 1,
            "upcomingTasks": 2,
            "completionRate": 25,
        }

    @pytest.mark.asyncio
    async def test_failure_envelope(self, client):
        client.fail("get_tasks", "503 Service Unavailable")

        result = await get_team_workload(client, now=NOW)

        assert result == {
            "error": "Failed to analyze team workload: 503 Service Unavailable",
            "count": 0,
            "workload": [],
            "teamMembers": 0,
        }


class TestOverdueByPerson:

    @pytest.mark.asyncio
    async def test_groups_overdue_tasks_by_assignee(self, client):
        client.tasks = [
            make_task("a-1", assignee=ALICE, due_on="2024-03-01", project="Marketing"),
            make_task("b-1", assignee=BOB, due_on="2024-03-05"),
            make_task("b-2", assignee=BOB, due_on="2024-03-12"),
            make_task("b-3", assignee=BOB, due_on="2024-03-13"),
            make_task("b-4", assignee=BOB, due_on="2024-03-01", completed=True),
        ]

        result = await get_overdue_tasks_by_person(client, now=NOW)

        assert result["totalOverdue"] == 3
        assert result["count"] == 2
        assert [p["user"] for p in result["byPerson"]] == ["Bob Levi", "Alice Cohen"]
        assert result["byPerson"][0]["overdueCount"] == 2
        assert result["byPerson"][1]["tasks"] == [
            {"name": "Task a-1", "gid": "a-1", "dueOn": "2024-03-01", "project": "Marketing"},
        ]

    @pytest.mark.asyncio
    async def test_nothing_overdue(self, client):
        client.tasks = [make_task("t-1", due_on="2024-03-13")]

        result = await get_overdue_tasks_by_person(client, now=NOW)

        assert result["count"] == 0
        assert result["byPerson"] == []

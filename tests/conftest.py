"""Shared fixtures: an in-memory Asana client and record builders.

Every query function takes its client as the first argument, so the tests
drive them with FakeAsanaClient instead of HTTP.  The fake ignores the
server-side filters (completed_since, modified_since) and returns every
task it holds, which makes the local boundary checks observable.
"""

from datetime import datetime, timezone
from typing import Optional

import pytest

from core.asana_client import FetchError
from core.models import ChangeEvent, Project, Section, Task, User

# Wednesday; the week runs 2024-03-11 (Mon) to 2024-03-17 (Sun).
NOW = datetime(2024, 3, 13, 15, 30, tzinfo=timezone.utc)

ALICE = User(gid="u-alice", name="Alice Cohen", email="alice@example.com")
BOB = User(gid="u-bob", name="Bob Levi", email="bob@example.com")
CAROL = User(gid="u-carol", name="Carol Katz")


def make_task(
    gid: str,
    name: Optional[str] = None,
    completed: bool = False,
    completed_at: Optional[str] = None,
    modified_at: Optional[str] = None,
    created_at: Optional[str] = None,
    due_on: Optional[str] = None,
    due_at: Optional[str] = None,
    assignee: Optional[User] = None,
    project: Optional[str] = None,
    section: Optional[str] = None,
) -> Task:
    """Build a Task through the same payload parser the client uses."""
    memberships = []
    if project or section:
        memberships.append({
            "project": {"gid": f"p-{project}", "name": project} if project else None,
            "section": {"gid": f"s-{section}", "name": section} if section else None,
        })
    return Task.from_api({
        "gid": gid,
        "name": name or f"Task {gid}",
        "completed": completed,
        "completed_at": completed_at,
        "modified_at": modified_at,
        "created_at": created_at,
        "due_on": due_on,
        "due_at": due_at,
        "assignee": (
            {"gid": assignee.gid, "name": assignee.name, "email": assignee.email}
            if assignee else None
        ),
        "memberships": memberships,
    })


def due_change(
    gid: str,
    created_at: str,
    old_due_on: Optional[str] = None,
    new_due_on: Optional[str] = None,
    author: Optional[User] = ALICE,
) -> ChangeEvent:
    return ChangeEvent.from_api({
        "gid": gid,
        "created_at": created_at,
        "created_by": {"gid": author.gid, "name": author.name} if author else None,
        "resource_subtype": "due_date_changed",
        "old_due_on": old_due_on,
        "new_due_on": new_due_on,
    })


def comment(gid: str, created_at: str, text: str = "Looks good") -> ChangeEvent:
    return ChangeEvent.from_api({
        "gid": gid,
        "created_at": created_at,
        "created_by": {"gid": BOB.gid, "name": BOB.name},
        "resource_subtype": "comment_added",
        "text": text,
    })


class FakeAsanaClient:
    """Same async surface as AsanaClient, backed by in-memory records."""

    def __init__(self):
        self.tasks: list[Task] = []
        self.stories: dict[str, list[ChangeEvent]] = {}
        self.projects: list[Project] = []
        self.sections: dict[str, list[Section]] = {}
        self.section_tasks: dict[str, list[Task]] = {}
        self.users: list[User] = []
        self.me: Optional[User] = None
        self.failures: dict[str, Exception] = {}
        self.story_failures: set[str] = set()
        self.calls: list[tuple[str, dict]] = []

    def fail(self, method: str, reason: str = "500 Internal Server Error") -> None:
        self.failures[method] = FetchError(method.replace("_", " "), reason)

    def _record(self, method: str, **kwargs) -> None:
        self.calls.append((method, kwargs))
        if method in self.failures:
            raise self.failures[method]

    async def get_tasks(self, project=None, section=None, assignee=None,
                        completed_since=None, modified_since=None, opt_fields=None):
        self._record("get_tasks", project=project, section=section, assignee=assignee,
                     completed_since=completed_since, modified_since=modified_since)
        if assignee is not None and assignee != "me":
            return [t for t in self.tasks if t.assignee and t.assignee.gid == assignee]
        return list(self.tasks)

    async def get_task(self, task_gid):
        self._record("get_task", task_gid=task_gid)
        for task in self.tasks:
            if task.gid == task_gid:
                return task
        raise FetchError("fetch task", "404 Not Found")

    async def get_task_stories(self, task_gid):
        self._record("get_task_stories", task_gid=task_gid)
        if task_gid in self.story_failures:
            raise FetchError("fetch task stories", "404 Not Found")
        return list(self.stories.get(task_gid, []))

    async def get_project_sections(self, project_gid):
        self._record("get_project_sections", project_gid=project_gid)
        return list(self.sections.get(project_gid, []))

    async def get_section_tasks(self, section_gid):
        self._record("get_section_tasks", section_gid=section_gid)
        return list(self.section_tasks.get(section_gid, []))

    async def get_workspace_users(self):
        self._record("get_workspace_users")
        return list(self.users)

    async def get_me(self):
        self._record("get_me")
        return self.me

    async def search_users(self, query):
        needle = query.lower()
        return [
            u for u in await self.get_workspace_users()
            if needle in u.name.lower() or (u.email and needle in u.email.lower())
        ]

    async def get_workspace_projects(self):
        self._record("get_workspace_projects")
        return list(self.projects)

    async def find_project_by_name(self, project_name):
        for project in await self.get_workspace_projects():
            if project.name.lower() == project_name.lower():
                return project
        return None


@pytest.fixture
def client() -> FakeAsanaClient:
    return FakeAsanaClient()

# =============================================================================
# core/asana_client.py  —  Rate-limited Asana REST client
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Exposes one async method per fetch shape the query tools need.  Every
#   method does exactly three things:
#     1. awaits the client's RateLimiter (may suspend the caller)
#     2. issues ONE GET against the Asana REST API with an explicit
#        opt_fields list and a result-size cap
#     3. narrows the JSON "data" payload into core.models records
#
#   Any transport, HTTP-status, JSON or payload-shape failure surfaces as a
#   FetchError carrying the vendor's message.  Tools catch it and return an
#   error envelope; nothing here retries.
#
#   search_users() and find_project_by_name() are local filters over a fresh
#   full listing; they add no vendor call of their own.
# =============================================================================

import logging
from datetime import datetime
from typing import Any, Callable, Optional, TypeVar

import httpx

from core.models import ChangeEvent, PayloadError, Project, Section, Task, User
from core.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

T = TypeVar("T")

ASANA_BASE_URL = "https://app.asana.com/api/1.0"
DEFAULT_PAGE_LIMIT = 100
DEFAULT_TIMEOUT = 30.0

TASK_FIELDS = [
    "gid",
    "name",
    "notes",
    "completed",
    "completed_at",
    "created_at",
    "modified_at",
    "due_on",
    "due_at",
    "assignee",
    "assignee.name",
    "assignee.email",
    "projects",
    "projects.name",
    "memberships",
    "memberships.project",
    "memberships.project.name",
    "memberships.section",
    "memberships.section.name",
]

SECTION_TASK_FIELDS = [
    "gid",
    "name",
    "completed",
    "completed_at",
    "modified_at",
    "due_on",
    "due_at",
    "assignee",
    "assignee.name",
]

STORY_FIELDS = [
    "gid",
    "created_at",
    "created_by",
    "created_by.name",
    "resource_subtype",
    "text",
    "type",
    "old_due_on",
    "new_due_on",
    "old_due_at",
    "new_due_at",
]

SECTION_FIELDS = ["gid", "name", "project", "project.name"]
USER_FIELDS = ["gid", "name", "email"]
PROJECT_FIELDS = ["gid", "name"]


class FetchError(Exception):
    """An Asana request failed (transport, auth, not found, bad payload).

    ``reason`` is the vendor's message (e.g. "401 Not Authorized"); the
    string form reads "Failed to <action>: <reason>".
    """

    def __init__(self, action: str, reason: str):
        super().__init__(f"Failed to {action}: {reason}")
        self.action = action
        self.reason = reason


def _vendor_message(exc: Exception) -> str:
    """Pull the human-readable message out of an Asana error response."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        # Gateways in front of Asana may answer with non-object bodies.
        errors = body.get("errors") if isinstance(body, dict) else None
        if not isinstance(errors, list):
            errors = []
        messages = [e.get("message") for e in errors if isinstance(e, dict) and e.get("message")]
        if messages:
            return f"{exc.response.status_code} {'; '.join(messages)}"
        return f"{exc.response.status_code} {exc.response.reason_phrase}"
    return str(exc) or exc.__class__.__name__


class AsanaClient:
    """Async Asana API client scoped to one workspace.

    Args:
        access_token: Personal access token, sent as a bearer token.
        workspace_gid: The workspace every listing is scoped to.
        rate_limiter: Request window for this client.  A fresh 100/minute
            limiter is created when omitted.
        http_client: Pre-built ``httpx.AsyncClient`` (tests pass one with a
            mock transport).  When omitted the client builds and owns one.
        page_limit: Result-size cap sent as ``limit`` on list calls.
    """

    def __init__(
        self,
        access_token: str,
        workspace_gid: str,
        rate_limiter: Optional[RateLimiter] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = ASANA_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        page_limit: int = DEFAULT_PAGE_LIMIT,
    ):
        self.workspace_gid = workspace_gid
        self.rate_limiter = rate_limiter or RateLimiter()
        self.page_limit = page_limit
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }

    async def __aenter__(self) -> "AsanaClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # -------------------------------------------------------------------------
    # Request plumbing
    # -------------------------------------------------------------------------
    async def _get(self, path: str, params: dict[str, Any], action: str) -> Any:
        """Rate-limit, GET, and return the unwrapped ``data`` member."""
        await self.rate_limiter.acquire()

        query = {k: v for k, v in params.items() if v is not None}
        try:
            response = await self._http.get(path, params=query, headers=self._headers)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            message = _vendor_message(exc)
            logger.error("Error while trying to %s: %s", action, message)
            raise FetchError(action, message) from exc

        if not isinstance(body, dict) or "data" not in body:
            logger.error("Unexpected response while trying to %s: %r", action, body)
            raise FetchError(action, "response has no 'data' member")
        return body["data"]

    def _parse(self, data: Any, parse: Callable[[Any], T], action: str) -> T:
        try:
            return parse(data)
        except PayloadError as exc:
            logger.error("Invalid payload while trying to %s: %s", action, exc)
            raise FetchError(action, str(exc)) from exc

    def _parse_list(self, data: Any, parse: Callable[[Any], T], action: str) -> list[T]:
        if not isinstance(data, list):
            raise FetchError(action, f"expected a list, got {type(data).__name__}")
        return [self._parse(item, parse, action) for item in data]

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------
    async def get_tasks(
        self,
        project: Optional[str] = None,
        section: Optional[str] = None,
        assignee: Optional[str] = None,
        completed_since: Optional[datetime] = None,
        modified_since: Optional[datetime] = None,
        opt_fields: Optional[list[str]] = None,
    ) -> list[Task]:
        """List tasks matching the given filters (one page, up to page_limit)."""
        action = "fetch tasks"
        params = {
            # Asana rejects "workspace" combined with a project/section filter.
            "workspace": None if (project or section) else self.workspace_gid,
            "project": project,
            "section": section,
            "assignee": assignee,
            "completed_since": completed_since.isoformat() if completed_since else None,
            "modified_since": modified_since.isoformat() if modified_since else None,
            "opt_fields": ",".join(opt_fields or TASK_FIELDS),
            "limit": self.page_limit,
        }
        data = await self._get("/tasks", params, action)
        return self._parse_list(data, Task.from_api, action)

    async def get_task(self, task_gid: str) -> Task:
        action = "fetch task"
        data = await self._get(
            f"/tasks/{task_gid}", {"opt_fields": ",".join(TASK_FIELDS)}, action
        )
        return self._parse(data, Task.from_api, action)

    async def get_task_stories(self, task_gid: str) -> list[ChangeEvent]:
        """Change history for a task, in the order Asana returns it."""
        action = "fetch task stories"
        data = await self._get(
            f"/tasks/{task_gid}/stories",
            {"opt_fields": ",".join(STORY_FIELDS), "limit": self.page_limit},
            action,
        )
        return self._parse_list(data, ChangeEvent.from_api, action)

    # -------------------------------------------------------------------------
    # Sections
    # -------------------------------------------------------------------------
    async def get_project_sections(self, project_gid: str) -> list[Section]:
        action = "fetch project sections"
        data = await self._get(
            f"/projects/{project_gid}/sections",
            {"opt_fields": ",".join(SECTION_FIELDS), "limit": self.page_limit},
            action,
        )
        return self._parse_list(data, Section.from_api, action)

    async def get_section_tasks(self, section_gid: str) -> list[Task]:
        action = "fetch section tasks"
        data = await self._get(
            f"/sections/{section_gid}/tasks",
            {"opt_fields": ",".join(SECTION_TASK_FIELDS), "limit": self.page_limit},
            action,
        )
        return self._parse_list(data, Task.from_api, action)

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------
    async def get_workspace_users(self) -> list[User]:
        action = "fetch workspace users"
        data = await self._get(
            f"/workspaces/{self.workspace_gid}/users",
            {"opt_fields": ",".join(USER_FIELDS)},
            action,
        )
        return self._parse_list(data, User.from_api, action)

    async def get_me(self) -> User:
        action = "fetch current user"
        data = await self._get("/users/me", {"opt_fields": ",".join(USER_FIELDS)}, action)
        return self._parse(data, User.from_api, action)

    async def search_users(self, query: str) -> list[User]:
        """Case-insensitive substring match on name or email.

        Asana has no efficient user search, so this filters the full
        workspace listing, fetched fresh on every call.
        """
        needle = query.lower()
        return [
            user
            for user in await self.get_workspace_users()
            if needle in user.name.lower() or (user.email and needle in user.email.lower())
        ]

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------
    async def get_workspace_projects(self) -> list[Project]:
        action = "fetch workspace projects"
        data = await self._get(
            "/projects",
            {
                "workspace": self.workspace_gid,
                "opt_fields": ",".join(PROJECT_FIELDS),
                "limit": self.page_limit,
            },
            action,
        )
        return self._parse_list(data, Project.from_api, action)

    async def find_project_by_name(self, project_name: str) -> Optional[Project]:
        """Exact, case-insensitive name match; None when nothing matches."""
        wanted = project_name.lower()
        for project in await self.get_workspace_projects():
            if project.name.lower() == wanted:
                return project
        return None

# =============================================================================
# core/models.py  —  Data Models (the records every tool works with)
# =============================================================================
#
# These dataclasses are the internal shape of everything fetched from Asana:
# tasks, users, projects, sections, memberships and stories (change events).
#
# THE PARSE BOUNDARY:
#   Asana answers with loosely-typed JSON.  Each record has a from_api()
#   constructor that narrows one payload dict into the dataclass, checking
#   required fields and parsing timestamps.  A malformed payload raises
#   PayloadError; the API client turns that into a FetchError.  Nothing past
#   core/asana_client.py ever sees a raw dict.
#
# DATES:
#   - due_on stays a "YYYY-MM-DD" string.  ISO dates sort lexically in
#     chronological order, so the tools compare them as strings.
#   - Timestamps (completed_at, modified_at, created_at, due_at) become
#     timezone-aware datetimes.
# =============================================================================

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Optional


DUE_DATE_CHANGED = "due_date_changed"


class PayloadError(ValueError):
    """A vendor payload could not be narrowed into a record."""


# -----------------------------------------------------------------------------
# Parsing helpers
# -----------------------------------------------------------------------------
def _require(payload: Any, key: str, kind: str) -> Any:
    if not isinstance(payload, dict):
        raise PayloadError(f"{kind} payload must be an object, got {type(payload).__name__}")
    value = payload.get(key)
    if value is None or value == "":
        raise PayloadError(f"{kind} payload is missing '{key}'")
    return value


def _optional_str(payload: dict, key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None or value == "":
        return None
    return str(value)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an Asana ISO-8601 timestamp into an aware datetime.

    Asana sends UTC timestamps with a trailing "Z"
    (e.g. "2024-03-13T09:12:44.123Z").  Naive values are treated as UTC.
    """
    if value is None or value == "":
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as exc:
        raise PayloadError(f"Invalid timestamp: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_date(value: Optional[str]) -> Optional[str]:
    """Validate a "YYYY-MM-DD" date and return it unchanged."""
    if value is None or value == "":
        return None
    try:
        date.fromisoformat(str(value))
    except ValueError as exc:
        raise PayloadError(f"Invalid date: {value!r}") from exc
    return str(value)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# -----------------------------------------------------------------------------
# User — a workspace member (task assignee, story author)
# -----------------------------------------------------------------------------
@dataclass
class User:
    """A workspace member."""

    gid: str
    name: str
    email: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Any) -> "User":
        gid = str(_require(payload, "gid", "User"))
        # Compact user references (e.g. deactivated users) may omit the name.
        return cls(
            gid=gid,
            name=_optional_str(payload, "name") or "Unknown user",
            email=_optional_str(payload, "email"),
        )


# -----------------------------------------------------------------------------
# Project / Section
# -----------------------------------------------------------------------------
@dataclass
class Project:
    """A project in the workspace."""

    gid: str
    name: str

    @classmethod
    def from_api(cls, payload: Any) -> "Project":
        return cls(
            gid=str(_require(payload, "gid", "Project")),
            name=_optional_str(payload, "name") or "",
        )


@dataclass
class Section:
    """A named subdivision of a project."""

    gid: str
    name: str
    project: Optional[Project] = None

    @classmethod
    def from_api(cls, payload: Any) -> "Section":
        project = payload.get("project") if isinstance(payload, dict) else None
        return cls(
            gid=str(_require(payload, "gid", "Section")),
            name=_optional_str(payload, "name") or "",
            project=Project.from_api(project) if project else None,
        )


# -----------------------------------------------------------------------------
# Membership — one (project, section) placement of a task
# -----------------------------------------------------------------------------
@dataclass
class Membership:
    project: Optional[Project] = None
    section: Optional[Section] = None

    @classmethod
    def from_api(cls, payload: Any) -> "Membership":
        if not isinstance(payload, dict):
            raise PayloadError("Membership payload must be an object")
        project = payload.get("project")
        section = payload.get("section")
        return cls(
            project=Project.from_api(project) if project else None,
            section=Section.from_api(section) if section else None,
        )


# -----------------------------------------------------------------------------
# Task — the unit of work every tool filters, groups and sorts
# -----------------------------------------------------------------------------
@dataclass
class Task:
    """A task snapshot as fetched from Asana.

    Only the FIRST membership is meaningful to the tools: it decides the
    project and section a task is reported under.
    """

    gid: str
    name: str
    completed: bool = False
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    due_on: Optional[str] = None                 # "YYYY-MM-DD"
    due_at: Optional[datetime] = None            # time-specific due date
    assignee: Optional[User] = None
    notes: Optional[str] = None
    memberships: list[Membership] = field(default_factory=list)

    @classmethod
    def from_api(cls, payload: Any) -> "Task":
        gid = str(_require(payload, "gid", "Task"))
        assignee = payload.get("assignee")
        memberships = payload.get("memberships") or []
        if not isinstance(memberships, list):
            raise PayloadError(f"Task {gid}: memberships must be a list")
        return cls(
            gid=gid,
            name=_optional_str(payload, "name") or "",
            completed=bool(payload.get("completed", False)),
            completed_at=parse_timestamp(payload.get("completed_at")),
            created_at=parse_timestamp(payload.get("created_at")),
            modified_at=parse_timestamp(payload.get("modified_at")),
            due_on=parse_date(payload.get("due_on")),
            due_at=parse_timestamp(payload.get("due_at")),
            assignee=User.from_api(assignee) if assignee else None,
            notes=_optional_str(payload, "notes"),
            memberships=[Membership.from_api(m) for m in memberships],
        )

    @property
    def assignee_name(self) -> str:
        return self.assignee.name if self.assignee else "Unassigned"

    @property
    def project_name(self) -> str:
        if self.memberships and self.memberships[0].project:
            return self.memberships[0].project.name
        return "No project"

    @property
    def section_name(self) -> str:
        if self.memberships and self.memberships[0].section:
            return self.memberships[0].section.name
        return "No section"


# -----------------------------------------------------------------------------
# ChangeEvent — an Asana "story" (comment or system event on a task)
# -----------------------------------------------------------------------------
@dataclass
class ChangeEvent:
    """One entry of a task's change history."""

    gid: str
    created_at: datetime
    created_by: Optional[User] = None
    resource_subtype: str = ""
    text: Optional[str] = None
    old_due_on: Optional[str] = None
    new_due_on: Optional[str] = None
    old_due_at: Optional[datetime] = None
    new_due_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, payload: Any) -> "ChangeEvent":
        gid = str(_require(payload, "gid", "Story"))
        created_by = payload.get("created_by")
        return cls(
            gid=gid,
            created_at=parse_timestamp(_require(payload, "created_at", "Story")),
            created_by=User.from_api(created_by) if created_by else None,
            resource_subtype=_optional_str(payload, "resource_subtype") or "",
            text=_optional_str(payload, "text"),
            old_due_on=parse_date(payload.get("old_due_on")),
            new_due_on=parse_date(payload.get("new_due_on")),
            old_due_at=parse_timestamp(payload.get("old_due_at")),
            new_due_at=parse_timestamp(payload.get("new_due_at")),
        )

    @property
    def author_name(self) -> str:
        return self.created_by.name if self.created_by else "Unknown user"

    def is_due_date_change(self) -> bool:
        """True if this story records a due-date change.

        Either Asana tagged it as one, or both the old and new due dates are
        present and differ.
        """
        if self.resource_subtype == DUE_DATE_CHANGED:
            return True
        if self.old_due_on and self.new_due_on and self.old_due_on != self.new_due_on:
            return True
        return bool(
            self.old_due_at and self.new_due_at and self.old_due_at != self.new_due_at
        )

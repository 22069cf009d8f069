# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Defines ALL MCP tools that the agent can call.  Each tool is a thin
#   async wrapper around a core/ query function: it logs the call, awaits
#   the query with the shared AsanaClient, logs the envelope and returns it.
#
# HOW IT WORKS (the flow):
#   1. The ADK agent decides it needs data (e.g., "what's overdue?")
#   2. It calls a tool by name via MCP (e.g., "get_overdue_tasks")
#   3. FastMCP routes the call to the decorated function below
#   4. The function awaits core/ logic, which talks to Asana through the
#      rate-limited client
#   5. The agent receives an envelope: {message, count, <collection>, ...}
#      or {error, count: 0, <collection>: []}
#
# TOOL NAMING CONVENTIONS:
#   - get_*    → Read-only retrieval
#   - search_* → Case-insensitive substring lookups
#   - list_*   → Full listings (projects)
#   All tools are read-only.  Nothing here writes to Asana.
#
# PARAMETER NAMES:
#   Parameters are snake_case (include_completed, exclude_completed,
#   search_query, project_name, task_gid).  Result envelope keys stay
#   camelCase (completedAt, tasksByDay, allSections).
#
# RUNNING THIS SERVER:
#   a) Standalone over stdio:  python -m tools.mcp_server
#   b) Over HTTP:              MCP_TRANSPORT=http PORT=3141 python -m tools.mcp_server
#   c) Spawned by the ADK agent over stdio (agent/pm_agent.py)
# =============================================================================

import json
import logging
import sys
from typing import Optional

from dotenv import load_dotenv
from fastmcp import FastMCP

# The tools layer depends on core/ and nothing else.
from core import daily_status, due_date_tracking, project_status, task_queries, weekly_planning
from core.asana_client import AsanaClient
from core.config import ConfigError, load_server_settings
from core.rate_limiter import RateLimiter

# =============================================================================
# Logging Setup
# =============================================================================
# We log to STDERR because the stdio transport uses STDOUT for MCP messages.
# Anything printed to stdout would corrupt the protocol stream.
#
# ANSI COLOR CODES:
#     - CYAN for incoming requests (tool name + parameters)
#     - GREEN for response JSON
#     - YELLOW for intermediate status messages
# =============================================================================

_CYAN = "\033[36m"     # Requests (tool calls with params)
_GREEN = "\033[32m"    # Responses (JSON output)
_YELLOW = "\033[33m"   # Status messages
_RESET = "\033[0m"     # Reset to default terminal color

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: dict) -> dict:
    """Log the tool response as compact JSON in GREEN, then return it."""
    logging.info(f"{_GREEN}  ← {tool_name} response: {json.dumps(result, separators=(',', ':'))}{_RESET}")
    return result


# =============================================================================
# Create the FastMCP server instance
# =============================================================================
mcp = FastMCP("asana-pm-assistant")

# One client (and therefore one rate-limit window) per server process.
# main() builds it from the environment; tests install their own.
_client: Optional[AsanaClient] = None


def configure(client: AsanaClient) -> None:
    """Install the AsanaClient every tool call will use."""
    global _client
    _client = client


def _asana() -> AsanaClient:
    if _client is None:
        raise RuntimeError("Asana client is not configured; call configure() first")
    return _client


# =============================================================================
# DAILY STATUS
# =============================================================================
@mcp.tool()
async def get_tasks_completed_today(assignee: Optional[str] = None) -> dict:
    """Get tasks that were marked complete today (since local midnight).

    Args:
        assignee: Optional user GID, email, or "me" to limit results to one
                  person.  Omit for the whole workspace.

    Returns:
        {message, count, tasks: [{name, gid, completedAt, assignee, project,
        section}], date}
    """
    _log_request("get_tasks_completed_today", assignee=assignee)
    result = await daily_status.get_tasks_completed_today(_asana(), assignee=assignee)
    return _log_response("get_tasks_completed_today", result)


@mcp.tool()
async def get_tasks_updated_today(
    assignee: Optional[str] = None,
    include_completed: bool = True,
) -> dict:
    """Get tasks with any modification today: edits, comments, status changes.

    Args:
        assignee: Optional user GID, email, or "me".
        include_completed: Set False to leave out completed tasks.
    """
    _log_request("get_tasks_updated_today", assignee=assignee, include_completed=include_completed)
    result = await daily_status.get_tasks_updated_today(
        _asana(), assignee=assignee, include_completed=include_completed
    )
    return _log_response("get_tasks_updated_today", result)


@mcp.tool()
async def get_tasks_due_today(
    assignee: Optional[str] = None,
    exclude_completed: bool = True,
) -> dict:
    """Get tasks whose due date is today.

    Args:
        assignee: Optional user GID, email, or "me".
        exclude_completed: Leave out tasks already completed (default True).
    """
    _log_request("get_tasks_due_today", assignee=assignee, exclude_completed=exclude_completed)
    result = await daily_status.get_tasks_due_today(
        _asana(), assignee=assignee, exclude_completed=exclude_completed
    )
    return _log_response("get_tasks_due_today", result)


# =============================================================================
# WEEKLY PLANNING & WORKLOAD
# =============================================================================
@mcp.tool()
async def get_weekly_planned_tasks(
    assignee: Optional[str] = None,
    exclude_completed: bool = True,
) -> dict:
    """Get tasks due this week (Monday to Sunday), grouped by due date.

    Args:
        assignee: Optional user GID, email, or "me".
        exclude_completed: Leave out tasks already completed (default True).

    Returns:
        {message, count, weekStart, weekEnd, tasksByDay: {"YYYY-MM-DD": [...]}}
    """
    _log_request("get_weekly_planned_tasks", assignee=assignee, exclude_completed=exclude_completed)
    result = await weekly_planning.get_weekly_planned_tasks(
        _asana(), assignee=assignee, exclude_completed=exclude_completed
    )
    return _log_response("get_weekly_planned_tasks", result)


@mcp.tool()
async def get_team_workload(include_completed: bool = False) -> dict:
    """Analyze how tasks are distributed across the team.

    WHEN TO CALL THIS: questions like "who is overloaded?" or "how is work
    split across the team?".  Unassigned tasks are counted under
    "Unassigned".  Results are sorted busiest first.

    Args:
        include_completed: Count completed tasks too (default False).

    Returns:
        {message, count, teamMembers, totalTasks, workload: [{user, userGid,
        totalTasks, completedTasks, overdueTasks, upcomingTasks,
        completionRate}]}
    """
    _log_request("get_team_workload", include_completed=include_completed)
    result = await weekly_planning.get_team_workload(_asana(), include_completed=include_completed)
    if result.get("workload"):
        top = result["workload"][0]
        _log_status(f"Busiest: {top['user']} with {top['totalTasks']} task(s)")
    return _log_response("get_team_workload", result)


@mcp.tool()
async def get_overdue_tasks_by_person() -> dict:
    """Get overdue tasks grouped by assignee, most overdue person first."""
    _log_request("get_overdue_tasks_by_person")
    result = await weekly_planning.get_overdue_tasks_by_person(_asana())
    return _log_response("get_overdue_tasks_by_person", result)


# =============================================================================
# PROJECT & SECTION STATUS
# =============================================================================
@mcp.tool()
async def get_project_status(project_name: str) -> dict:
    """Get overall and per-section completion for a project.

    WHEN TO CALL THIS: after you know the project's exact name.  If unsure,
    call list_all_projects first.  The match is case-insensitive.

    Args:
        project_name: The project's name, e.g. "Marketing".

    Returns:
        {message, count, projectName, projectGid, totalTasks, completedTasks,
        incompleteTasks, completionRate, sectionCount, sections: [...]}
        or {error, suggestions, count: 0, sections: []} when not found.
    """
    _log_request("get_project_status", project_name=project_name)
    result = await project_status.get_project_status(_asana(), project_name)
    return _log_response("get_project_status", result)


@mcp.tool()
async def get_section_with_most_work(project_name: str) -> dict:
    """Find the section of a project with the most incomplete tasks.

    Args:
        project_name: The project's name (case-insensitive exact match).

    Returns:
        {message, count, projectName, busiestSection, incompleteTasks,
        allSections: [{sectionName, sectionGid, totalTasks, incompleteTasks,
        completedTasks}]}
    """
    _log_request("get_section_with_most_work", project_name=project_name)
    result = await project_status.get_section_with_most_work(_asana(), project_name)
    return _log_response("get_section_with_most_work", result)


@mcp.tool()
async def list_all_projects() -> dict:
    """List every project in the workspace with its name and GID."""
    _log_request("list_all_projects")
    result = await project_status.list_all_projects(_asana())
    return _log_response("list_all_projects", result)


# =============================================================================
# DUE DATE TRACKING
# =============================================================================
# These tools read task stories (Asana's change log).  The postponement
# scans fetch stories for every candidate task one at a time, so they are
# the slowest tools here and the most likely to hit the rate limit.
# =============================================================================
@mcp.tool()
async def get_task_due_date_changes(task_gid: str) -> dict:
    """Get the full due-date change history of one task.

    Args:
        task_gid: The task's GID (from any task listing).

    Returns:
        {message, taskName, taskGid, currentDueDate, changeCount, count,
        changes: [{date, oldDueDate, newDueDate, changedBy}]}
    """
    _log_request("get_task_due_date_changes", task_gid=task_gid)
    result = await due_date_tracking.get_task_due_date_changes(_asana(), task_gid)
    return _log_response("get_task_due_date_changes", result)


@mcp.tool()
async def get_most_postponed_tasks(limit: int = 10) -> dict:
    """Rank incomplete tasks by how many times their due date changed.

    Frequently postponed tasks are a red flag worth surfacing.

    Args:
        limit: Maximum number of tasks to return (default 10).
    """
    _log_request("get_most_postponed_tasks", limit=limit)
    _log_status("Scanning task stories for due date changes...")
    result = await due_date_tracking.get_most_postponed_tasks(_asana(), limit=limit)
    return _log_response("get_most_postponed_tasks", result)


@mcp.tool()
async def get_recent_due_date_changes(days: int = 7) -> dict:
    """Get tasks whose due date changed in the last N days, newest first.

    Args:
        days: How many days back to look (default 7).

    Returns:
        {message, count, tasks: [{taskName, taskGid, assignee, project,
        oldDueDate, newDueDate, changedBy, changedAt, changeCount}]}
    """
    _log_request("get_recent_due_date_changes", days=days)
    _log_status(f"Scanning task stories from the last {days} day(s)...")
    result = await due_date_tracking.get_recent_due_date_changes(_asana(), days=days)
    return _log_response("get_recent_due_date_changes", result)


# =============================================================================
# TASK & USER QUERIES
# =============================================================================
@mcp.tool()
async def get_overdue_tasks(assignee: Optional[str] = None) -> dict:
    """Get incomplete tasks past their due date, oldest due date first.

    Args:
        assignee: Optional user GID, email, or "me".
    """
    _log_request("get_overdue_tasks", assignee=assignee)
    result = await task_queries.get_overdue_tasks(_asana(), assignee=assignee)
    return _log_response("get_overdue_tasks", result)


@mcp.tool()
async def get_unassigned_tasks(exclude_completed: bool = True) -> dict:
    """Get tasks that nobody owns."""
    _log_request("get_unassigned_tasks", exclude_completed=exclude_completed)
    result = await task_queries.get_unassigned_tasks(_asana(), exclude_completed=exclude_completed)
    return _log_response("get_unassigned_tasks", result)


@mcp.tool()
async def get_tasks_without_due_dates(
    exclude_completed: bool = True,
    assignee: Optional[str] = None,
) -> dict:
    """Get tasks that have no due date or due time set.

    Args:
        exclude_completed: Leave out completed tasks (default True).
        assignee: Optional user GID, email, or "me".
    """
    _log_request("get_tasks_without_due_dates", exclude_completed=exclude_completed, assignee=assignee)
    result = await task_queries.get_tasks_without_due_dates(
        _asana(), exclude_completed=exclude_completed, assignee=assignee
    )
    return _log_response("get_tasks_without_due_dates", result)


@mcp.tool()
async def search_tasks_by_name(search_query: str, exclude_completed: bool = False) -> dict:
    """Find tasks whose name contains the given text (case-insensitive).

    Args:
        search_query: Text to look for in task names.
        exclude_completed: Leave out completed tasks (default False).
    """
    _log_request("search_tasks_by_name", search_query=search_query, exclude_completed=exclude_completed)
    result = await task_queries.search_tasks_by_name(
        _asana(), search_query, exclude_completed=exclude_completed
    )
    return _log_response("search_tasks_by_name", result)


@mcp.tool()
async def get_workspace_users() -> dict:
    """List every user in the workspace with name, GID and email."""
    _log_request("get_workspace_users")
    result = await task_queries.get_workspace_users(_asana())
    return _log_response("get_workspace_users", result)


@mcp.tool()
async def get_me() -> dict:
    """Get the current user (the owner of the access token).

    WHEN TO CALL THIS: before answering "my tasks" or "assigned to me", to
    learn the current user's GID.
    """
    _log_request("get_me")
    result = await task_queries.get_me(_asana())
    return _log_response("get_me", result)


@mcp.tool()
async def search_users(query: str) -> dict:
    """Find users whose name or email contains the given text.

    WHEN TO CALL THIS: whenever the user mentions a person by name.  Use the
    returned GID with assignee-filtered tools; never guess GIDs.

    Args:
        query: Part of a name or email, e.g. "sarah".
    """
    _log_request("search_users", query=query)
    result = await task_queries.search_users(_asana(), query)
    return _log_response("search_users", result)


@mcp.tool()
async def get_tasks_assigned_to(assignee: str, exclude_completed: bool = True) -> dict:
    """Get tasks assigned to one person.

    Args:
        assignee: The user's GID (from search_users or get_me), email, or "me".
        exclude_completed: Leave out completed tasks (default True).
    """
    _log_request("get_tasks_assigned_to", assignee=assignee, exclude_completed=exclude_completed)
    result = await task_queries.get_tasks_assigned_to(
        _asana(), assignee, exclude_completed=exclude_completed
    )
    return _log_response("get_tasks_assigned_to", result)


# =============================================================================
# Server entry point
# =============================================================================
# Configuration errors are fatal: log them and exit before serving.
# =============================================================================
def main() -> None:
    load_dotenv()

    try:
        settings = load_server_settings()
    except ConfigError as exc:
        logging.error(f"Configuration error: {exc}")
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level)
    configure(AsanaClient(
        access_token=settings.asana_access_token,
        workspace_gid=settings.asana_workspace_gid,
        rate_limiter=RateLimiter(max_requests=settings.rate_limit_per_minute),
        timeout=settings.request_timeout,
    ))
    _log_status(f"Starting with {settings!r}")

    if settings.transport == "http":
        mcp.run(transport="http", host=settings.host, port=settings.port)
    else:
        mcp.run()


if __name__ == "__main__":
    main()

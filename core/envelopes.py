# =============================================================================
# core/envelopes.py  —  Result shapes shared by every query tool
# =============================================================================
#
# The agent relies on consistent shapes:
#   success → {"message": ..., "count": N, "<collection>": [...], ...}
#   failure → {"error": "Failed to ...: <reason>", "count": 0, "<collection>": []}
#
# Tools never raise past their boundary; they call failure() instead.
# =============================================================================

import logging
from typing import Any

from core.asana_client import FetchError
from core.models import Task

logger = logging.getLogger(__name__)


def failure(action: str, exc: BaseException, collection: str = "tasks", **extra: Any) -> dict:
    """Flatten an exception into the error envelope.

    A FetchError contributes only its vendor reason, so the message names
    the tool's action once.
    """
    reason = exc.reason if isinstance(exc, FetchError) else exc
    logger.error("Failed to %s: %s", action, reason)
    result = {"error": f"Failed to {action}: {reason}", "count": 0, collection: []}
    result.update(extra)
    return result


def task_placement(task: Task) -> dict[str, str]:
    """Assignee, project and section names for a task summary."""
    return {
        "assignee": task.assignee_name,
        "project": task.project_name,
        "section": task.section_name,
    }

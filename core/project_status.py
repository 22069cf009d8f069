# =============================================================================
# core/project_status.py  —  Project and section progress
# =============================================================================
#
# Projects are looked up by exact, case-insensitive name.  Section task
# lists are fetched one section at a time, in the order Asana returns the
# sections.
# =============================================================================

from dataclasses import dataclass

from core.asana_client import AsanaClient
from core.envelopes import failure
from core.models import Project, Section
from core.weekly_planning import completion_rate


@dataclass
class SectionStatus:
    section: Section
    total_tasks: int
    completed_tasks: int

    @property
    def incomplete_tasks(self) -> int:
        return self.total_tasks - self.completed_tasks

    @property
    def completion_rate(self) -> int:
        return completion_rate(self.completed_tasks, self.total_tasks)


def _not_found(project_name: str, collection: str = "sections") -> dict:
    return {
        "error": f'Project "{project_name}" not found.',
        "suggestions": "Try listing all projects first to find the exact name.",
        "count": 0,
        collection: [],
    }


async def _section_statuses(client: AsanaClient, project: Project) -> list[SectionStatus]:
    statuses = []
    for section in await client.get_project_sections(project.gid):
        tasks = await client.get_section_tasks(section.gid)
        statuses.append(SectionStatus(
            section=section,
            total_tasks=len(tasks),
            completed_tasks=sum(1 for t in tasks if t.completed),
        ))
    return sorted(statuses, key=lambda s: s.incomplete_tasks, reverse=True)


async def get_project_status(client: AsanaClient, project_name: str) -> dict:
    """Overall and per-section completion for one project."""
    try:
        project = await client.find_project_by_name(project_name)
        if project is None:
            return _not_found(project_name)
        statuses = await _section_statuses(client, project)
    except Exception as exc:
        return failure("analyze project status", exc, collection="sections")

    total = sum(s.total_tasks for s in statuses)
    completed = sum(s.completed_tasks for s in statuses)
    rate = completion_rate(completed, total)

    return {
        "message": f'Project "{project.name}" has {total} total tasks ({rate}% complete).',
        "count": len(statuses),
        "projectName": project.name,
        "projectGid": project.gid,
        "totalTasks": total,
        "completedTasks": completed,
        "incompleteTasks": total - completed,
        "completionRate": rate,
        "sectionCount": len(statuses),
        "sections": [
            {
                "name": s.section.name,
                "gid": s.section.gid,
                "totalTasks": s.total_tasks,
                "completedTasks": s.completed_tasks,
                "incompleteTasks": s.incomplete_tasks,
                "completionRate": s.completion_rate,
            }
            for s in statuses
        ],
    }


async def get_section_with_most_work(client: AsanaClient, project_name: str) -> dict:
    """The section with the most incomplete tasks in a project."""
    try:
        project = await client.find_project_by_name(project_name)
        if project is None:
            return _not_found(project_name, collection="allSections")
        statuses = await _section_statuses(client, project)
    except Exception as exc:
        return failure("analyze section workload", exc, collection="allSections")

    if not statuses:
        return {
            "message": f'Project "{project.name}" has no sections.',
            "count": 0,
            "projectName": project.name,
            "allSections": [],
        }

    busiest = statuses[0]
    return {
        "message": (
            f'Section "{busiest.section.name}" has the most work with '
            f"{busiest.incomplete_tasks} incomplete task(s)."
        ),
        "count": len(statuses),
        "projectName": project.name,
        "busiestSection": busiest.section.name,
        "incompleteTasks": busiest.incomplete_tasks,
        "allSections": [
            {
                "sectionName": s.section.name,
                "sectionGid": s.section.gid,
                "totalTasks": s.total_tasks,
                "incompleteTasks": s.incomplete_tasks,
                "completedTasks": s.completed_tasks,
            }
            for s in statuses
        ],
    }


async def list_all_projects(client: AsanaClient) -> dict:
    try:
        projects = await client.get_workspace_projects()
    except Exception as exc:
        return failure("list projects", exc, collection="projects")

    if not projects:
        return {"message": "No projects found in the workspace.", "count": 0, "projects": []}

    return {
        "message": f"Found {len(projects)} project(s) in the workspace.",
        "count": len(projects),
        "projects": [{"name": p.name, "gid": p.gid} for p in projects],
    }

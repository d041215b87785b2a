"""
Name Directory - display names and the task→project mapping.

Users, tasks and projects are owned by other stores; the engine only ever
needs these lookups. The directory bundles them so a session, the CLI or a
report can be handed one object instead of four callables.
"""

from pathlib import Path
from typing import Dict, Optional
import yaml

UNKNOWN_USER = "Unknown User"
UNKNOWN_TASK = "Unknown Task"
UNKNOWN_PROJECT = "Unknown Project"


class NameDirectory:
    """Mapping-backed resolvers; unknown ids resolve to a placeholder name"""

    def __init__(self, users: Optional[Dict[str, str]] = None,
                 tasks: Optional[Dict[str, str]] = None,
                 projects: Optional[Dict[str, str]] = None,
                 task_projects: Optional[Dict[str, str]] = None):
        self.users = dict(users or {})
        self.tasks = dict(tasks or {})
        self.projects = dict(projects or {})
        self.task_projects = dict(task_projects or {})

    @classmethod
    def from_yaml(cls, path: Path) -> "NameDirectory":
        """
        Load a directory file.

        Expected layout::

            users: {user-1: John Doe}
            projects: {project-1: Mobile App}
            tasks:
              task-1: {name: Design homepage, project: project-1}
        """
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        tasks, task_projects = {}, {}
        for task_id, task in (data.get("tasks") or {}).items():
            if isinstance(task, dict):
                tasks[task_id] = task.get("name", task_id)
                if task.get("project"):
                    task_projects[task_id] = task["project"]
            else:
                tasks[task_id] = str(task)

        return cls(
            users=data.get("users"),
            tasks=tasks,
            projects=data.get("projects"),
            task_projects=task_projects
        )

    def resolve_user_name(self, user_id: str) -> str:
        return self.users.get(user_id, UNKNOWN_USER)

    def resolve_task_name(self, task_id: str) -> str:
        return self.tasks.get(task_id, UNKNOWN_TASK)

    def resolve_project_name(self, project_id: str) -> str:
        return self.projects.get(project_id, UNKNOWN_PROJECT)

    def resolve_project(self, task_id: str) -> Optional[str]:
        """Project a task belongs to, or None if unknown"""
        return self.task_projects.get(task_id)

"""
Client entity cache.

In-memory mirror of the store: the ordered project list and the ordered task
list of the selected project. Tasks of other projects are never held at the
same time. Pure state transitions, no network access.
"""

from typing import Sequence, TypeVar

from taskboard.exceptions import NotFoundError
from taskboard.logging_config import get_logger
from taskboard.models import Project, Task

logger = get_logger(__name__)

T = TypeVar("T")


def reorder_local(items: Sequence[T], from_index: int, to_index: int) -> list[T]:
    """
    Return a copy of ``items`` with the element at ``from_index`` moved to
    ``to_index``. All other elements keep their relative order.

    Example: reorder_local([a, b, c], 2, 0) -> [c, a, b]

    Raises:
        IndexError: If either index is outside ``0 <= i < len(items)``.
    """
    length = len(items)
    for index in (from_index, to_index):
        if not 0 <= index < length:
            raise IndexError(f"index {index} out of range for {length} items")

    result = list(items)
    if from_index == to_index:
        return result
    moved = result.pop(from_index)
    result.insert(to_index, moved)
    return result


class EntityCache:
    """Ordered projects plus ordered tasks of the selected project."""

    def __init__(self):
        self.projects: list[Project] = []
        self.tasks: list[Task] = []
        self.selected_project_id: str | None = None
        # True while the task order shown is speculative (awaiting the store)
        self.pending: bool = False

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    def set_projects(self, projects: Sequence[Project]) -> None:
        self.projects = list(projects)

    def insert_project(self, project: Project) -> None:
        self.projects.append(project)

    def remove_project(self, project_id: str) -> None:
        """Drop a deleted project. Deleting the selected one clears the selection."""
        self.projects = [p for p in self.projects if p.id != project_id]
        if self.selected_project_id == project_id:
            self.selected_project_id = None
            self.tasks = []
            self.pending = False

    def get_project(self, project_id: str) -> Project:
        for project in self.projects:
            if project.id == project_id:
                return project
        raise NotFoundError("Project", project_id)

    def select_project(self, project_id: str | None) -> None:
        """Switch the active project. The task list is emptied until refetched."""
        if project_id == self.selected_project_id:
            return
        logger.debug(f"Selecting project {project_id}")
        self.selected_project_id = project_id
        self.tasks = []
        self.pending = False

    def is_selected(self, project_id: str | None) -> bool:
        return project_id is not None and project_id == self.selected_project_id

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    def set_tasks(self, tasks: Sequence[Task]) -> None:
        """Replace the task list with server-confirmed state."""
        self.tasks = list(tasks)
        self.pending = False

    def task_ids(self) -> list[str]:
        return [task.id for task in self.tasks]

    def index_of(self, task_id: str) -> int:
        for index, task in enumerate(self.tasks):
            if task.id == task_id:
                return index
        raise NotFoundError("Task", task_id)

    def get_task(self, task_id: str) -> Task:
        return self.tasks[self.index_of(task_id)]

    def contains_task(self, task_id: str) -> bool:
        return any(task.id == task_id for task in self.tasks)

    def append_task(self, task: Task) -> None:
        if self.contains_task(task.id):
            self.replace_task(task)
            return
        self.tasks.append(task)

    def replace_task(self, task: Task) -> None:
        self.tasks[self.index_of(task.id)] = task

    def remove_task(self, task_id: str) -> None:
        self.tasks = [task for task in self.tasks if task.id != task_id]

    def apply_reorder(self, from_index: int, to_index: int) -> None:
        """Speculatively move one task; the list is pending until confirmed."""
        self.tasks = reorder_local(self.tasks, from_index, to_index)
        self.pending = True

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def snapshot(self) -> list[Task]:
        """Copy of the current task sequence, for rollback."""
        return list(self.tasks)

    def restore(self, snapshot: Sequence[Task]) -> None:
        """Roll the task list back to a snapshot taken earlier."""
        self.tasks = list(snapshot)
        self.pending = False

"""
Board service: the project/task dashboard without a rendering surface.

Wires the remote store, the entity cache, the drag controller and the
reconciler together, and implements the plain CRUD flows. Every remote
failure is caught here, turned into a notification, and reported to the
caller as a ``None``/``False`` return so the front end stays interactive.
"""

from typing import Awaitable, TypeVar

from taskboard.client import RemoteStore
from taskboard.exceptions import (
    TaskboardException,
    CreateFailed,
    DeleteFailed,
    NotFoundError,
    UpdateFailed,
)
from taskboard.logging_config import get_logger
from taskboard.models import Priority, Project, Task
from taskboard.schemas import TaskCreate, TaskUpdate
from taskboard.services.cache import EntityCache
from taskboard.services.drag import DragSessionController, DropTarget
from taskboard.services.notifications import Notifier
from taskboard.services.reconciler import Reconciler, ReconcileResult

logger = get_logger(__name__)

T = TypeVar("T")


class BoardService:
    """Front-end facing operations over one signed-in session."""

    def __init__(
        self,
        store: RemoteStore,
        cache: EntityCache | None = None,
        notifier: Notifier | None = None,
    ):
        self.store = store
        self.cache = cache or EntityCache()
        self.notifier = notifier or Notifier()
        self.reconciler = Reconciler(store, self.cache, self.notifier, session=store.session)
        self.drag = DragSessionController(is_locked=self.reconciler.is_busy)

    async def _call(self, operation: Awaitable[T]) -> T | None:
        """Await a store call; notify and return None if it fails."""
        try:
            return await operation
        except TaskboardException as e:
            self.notifier.failure(e)
            return None

    def _list_busy(self, project_id: str | None, error: TaskboardException) -> bool:
        """
        True (and notify) while a reorder or move on this list is outstanding.

        Editing the list then would be lost, or resurrected, by the rollback.
        """
        if project_id is None or not self.reconciler.is_busy(project_id):
            return False
        logger.info(f"Project {project_id} busy: {error.message}")
        self.notifier.failure(error)
        return True

    def _cached_project_of(self, task_id: str) -> str | None:
        if not self.cache.contains_task(task_id):
            return None
        return self.cache.get_task(task_id).project_id

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    async def login(self, username: str, password: str) -> bool:
        return await self._call(self.store.login(username, password)) is not None

    async def register(self, username: str, password: str) -> bool:
        return await self._call(self.store.register(username, password)) is not None

    def logout(self) -> None:
        self.store.session.end()
        self.cache.select_project(None)
        self.cache.set_projects([])

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    async def load_projects(self) -> list[Project] | None:
        """Fetch all projects; select the first one if nothing is selected."""
        projects = await self._call(self.store.list_projects())
        if projects is None:
            return None

        self.cache.set_projects(projects)
        logger.debug(f"Loaded {len(projects)} projects")

        selected = self.cache.selected_project_id
        if selected is not None and not any(p.id == selected for p in projects):
            self.cache.select_project(None)
            selected = None
        if selected is None and projects:
            await self.select_project(projects[0].id)
        return projects

    async def select_project(self, project_id: str) -> list[Task] | None:
        self.cache.select_project(project_id)
        return await self.refresh_tasks()

    async def refresh_tasks(self) -> list[Task] | None:
        """Fetch the selected project's tasks into the cache."""
        project_id = self.cache.selected_project_id
        if project_id is None:
            return None

        tasks = await self._call(self.store.list_tasks(project_id))
        if tasks is None:
            return None
        # The user may have switched projects while the fetch was running
        if not self.cache.is_selected(project_id):
            logger.debug(f"Discarding stale task list for project {project_id}")
            return None

        self.cache.set_tasks(tasks)
        return tasks

    async def create_project(self, name: str) -> Project | None:
        """Create a project and make it the selected one."""
        project = await self._call(self.store.create_project(name))
        if project is None:
            return None
        self.cache.insert_project(project)
        await self.select_project(project.id)
        return project

    async def delete_project(self, project_id: str) -> bool:
        try:
            await self.store.delete_project(project_id)
        except TaskboardException as e:
            self.notifier.failure(e)
            return False
        self.cache.remove_project(project_id)
        return True

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    async def create_task(
        self,
        title: str,
        description: str | None = None,
        priority: Priority = Priority.MEDIUM,
        project_id: str | None = None,
    ) -> Task | None:
        """Create a task in ``project_id`` (default: the selected project)."""
        project_id = project_id or self.cache.selected_project_id
        if project_id is None:
            self.notifier.failure(CreateFailed("Select a project before adding tasks"))
            return None
        if self._list_busy(project_id, CreateFailed("Wait for the task order to be saved")):
            return None

        task_in = TaskCreate(
            title=title,
            description=description,
            priority=priority,
            project_id=project_id,
        )
        task = await self._call(self.store.create_task(task_in))
        if task is not None and self.cache.is_selected(task.project_id):
            self.cache.append_task(task)
        return task

    async def update_task(self, task_id: str, **fields) -> Task | None:
        """Edit task fields (title, description, priority, status, ...)."""
        if self._list_busy(self._cached_project_of(task_id), UpdateFailed("Wait for the task order to be saved")):
            return None
        task = await self._call(self.store.update_task(task_id, TaskUpdate(**fields)))
        if task is not None and self.cache.contains_task(task.id):
            self.cache.replace_task(task)
        return task

    async def delete_task(self, task_id: str) -> bool:
        if self._list_busy(self._cached_project_of(task_id), DeleteFailed("Wait for the task order to be saved")):
            return False
        try:
            await self.store.delete_task(task_id)
        except TaskboardException as e:
            self.notifier.failure(e)
            return False
        self.cache.remove_task(task_id)
        return True

    # -------------------------------------------------------------------------
    # Drag and drop
    # -------------------------------------------------------------------------

    def start_drag(self, task_id: str) -> bool:
        """Begin dragging a task of the selected project's list."""
        project_id = self.cache.selected_project_id
        if project_id is None:
            return False
        try:
            index = self.cache.index_of(task_id)
        except NotFoundError:
            logger.warning(f"Cannot drag task {task_id}: not in the selected list")
            return False
        return self.drag.on_gesture_start(
            task_id,
            index,
            project_id,
            list_length=len(self.cache.tasks),
        )

    async def drop(self, target: DropTarget | None) -> ReconcileResult | None:
        """Release the dragged task over ``target`` (None cancels)."""
        intent = self.drag.on_gesture_end(target)
        if intent is None:
            return None
        return await self.reconciler.dispatch(intent)

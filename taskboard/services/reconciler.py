"""
Reconciler between optimistic local state and the remote store.

Two protocols:

- Reorder (same project) is optimistic: the cache changes immediately, the
  full id order is sent to the store, and the cache is then replaced by the
  store's authoritative list - or restored to the pre-gesture snapshot if the
  request fails.
- Move (across projects) is confirm-first: nothing changes locally until the
  store returns the re-parented task.

Only one request may be outstanding per project list. Callers check
``is_busy`` before starting a new gesture on that list.
"""

from dataclasses import dataclass, field
from enum import Enum

from taskboard.client import RemoteStore
from taskboard.exceptions import (
    TaskboardException,
    AuthRejected,
    InvalidTarget,
    NotFoundError,
    ReorderFailed,
)
from taskboard.logging_config import get_logger
from taskboard.models import Task
from taskboard.services.cache import EntityCache
from taskboard.services.drag import (
    CommitReorderIntent,
    Intent,
    MoveIntent,
    ReorderIntent,
)
from taskboard.services.notifications import Notifier
from taskboard.session import SessionContext

logger = get_logger(__name__)


class ReconcileStatus(str, Enum):
    CONFIRMED = "confirmed"  # Store accepted, cache holds server truth
    ROLLED_BACK = "rolled_back"  # Store rejected, optimistic change undone
    FAILED = "failed"  # Store rejected a confirm-first change
    NOOP = "noop"  # Nothing to do, no request sent
    BUSY = "busy"  # A request for the same list is still outstanding


@dataclass
class ReconcileResult:
    """Outcome of applying one intent."""
    status: ReconcileStatus
    intent: Intent
    error: TaskboardException | None = None
    tasks: list[Task] = field(default_factory=list)  # What the store returned


class Reconciler:
    """
    Applies intents from the drag controller to the cache and the store.

    Args:
        session: Session whose token the store requests carry. Defaults to
            the store's own session; no intent is applied without a token.
    """

    def __init__(
        self,
        store: RemoteStore,
        cache: EntityCache,
        notifier: Notifier,
        session: SessionContext | None = None,
    ):
        self.store = store
        self.cache = cache
        self.notifier = notifier
        self.session = session or store.session
        self._in_flight: set[str] = set()

    def is_busy(self, project_id: str) -> bool:
        """True while a reorder/move touching this project's list is unresolved."""
        return project_id in self._in_flight

    def _unauthenticated(self, intent: Intent) -> ReconcileResult | None:
        """Refuse an intent up front when there is no session to send it with."""
        if self.session.is_authenticated:
            return None
        error = AuthRejected("Sign in to rearrange tasks")
        logger.warning(f"Intent on task {intent.task_id} refused: no session")
        self.notifier.failure(error)
        return ReconcileResult(ReconcileStatus.FAILED, intent, error=error)

    async def dispatch(self, intent: Intent) -> ReconcileResult | None:
        """
        Route an intent to its protocol.

        ReorderIntents are live previews only; they return None and do not
        touch the cache.
        """
        if isinstance(intent, CommitReorderIntent):
            return await self.commit_reorder(intent)
        if isinstance(intent, MoveIntent):
            return await self.move_to_project(intent)
        if isinstance(intent, ReorderIntent):
            return None
        raise TypeError(f"Unknown intent: {intent!r}")

    async def commit_reorder(self, intent: CommitReorderIntent) -> ReconcileResult:
        """Optimistically reorder, then confirm with the store or roll back."""
        project_id = intent.project_id

        if self.is_busy(project_id):
            logger.warning(f"Reorder on project {project_id} rejected: request already in flight")
            return ReconcileResult(ReconcileStatus.BUSY, intent)

        refused = self._unauthenticated(intent)
        if refused is not None:
            return refused

        if not self.cache.is_selected(project_id):
            logger.warning(f"Reorder on project {project_id} ignored: project not selected")
            return ReconcileResult(ReconcileStatus.NOOP, intent)

        # The view's index may be stale; the task id is authoritative
        from_index = intent.from_index
        tasks = self.cache.tasks
        if not 0 <= from_index < len(tasks) or tasks[from_index].id != intent.task_id:
            try:
                from_index = self.cache.index_of(intent.task_id)
            except NotFoundError as e:
                error = ReorderFailed(e.message)
                self.notifier.failure(error)
                return ReconcileResult(ReconcileStatus.FAILED, intent, error=error)

        if not 0 <= intent.final_index < len(tasks):
            error = ReorderFailed(f"Drop position {intent.final_index} is out of range")
            self.notifier.failure(error)
            return ReconcileResult(ReconcileStatus.FAILED, intent, error=error)

        if from_index == intent.final_index:
            logger.debug(f"Reorder of task {intent.task_id} left it in place")
            return ReconcileResult(ReconcileStatus.NOOP, intent)

        snapshot = self.cache.snapshot()
        self.cache.apply_reorder(from_index, intent.final_index)
        task_ids = self.cache.task_ids()
        logger.info(
            f"Reordering project {project_id}: task {intent.task_id} "
            f"{from_index} -> {intent.final_index}"
        )

        self._in_flight.add(project_id)
        try:
            confirmed = await self.store.reorder_tasks(project_id, task_ids)
        except TaskboardException as e:
            # Only roll back the list this snapshot was taken from
            if self.cache.is_selected(project_id):
                self.cache.restore(snapshot)
            logger.warning(f"Reorder of project {project_id} rolled back: {e.message}")
            self.notifier.failure(e)
            return ReconcileResult(ReconcileStatus.ROLLED_BACK, intent, error=e)
        finally:
            self._in_flight.discard(project_id)

        if self.cache.is_selected(project_id):
            self.cache.set_tasks(confirmed)
        return ReconcileResult(ReconcileStatus.CONFIRMED, intent, tasks=confirmed)

    async def move_to_project(self, intent: MoveIntent) -> ReconcileResult:
        """Re-parent a task once the store confirms the move."""
        source, destination = intent.from_project_id, intent.to_project_id

        if source == destination:
            error = InvalidTarget(intent.task_id, source)
            logger.info(error.message)
            return ReconcileResult(ReconcileStatus.NOOP, intent, error=error)

        if self.is_busy(source) or self.is_busy(destination):
            logger.warning(f"Move of task {intent.task_id} rejected: request already in flight")
            return ReconcileResult(ReconcileStatus.BUSY, intent)

        refused = self._unauthenticated(intent)
        if refused is not None:
            return refused

        logger.info(f"Moving task {intent.task_id}: {source} -> {destination}")
        self._in_flight.update((source, destination))
        try:
            moved = await self.store.move_task(intent.task_id, destination)
        except TaskboardException as e:
            logger.warning(f"Move of task {intent.task_id} failed: {e.message}")
            self.notifier.failure(e)
            return ReconcileResult(ReconcileStatus.FAILED, intent, error=e)
        finally:
            self._in_flight.difference_update((source, destination))

        if self.cache.is_selected(source):
            self.cache.remove_task(intent.task_id)
        if self.cache.is_selected(destination):
            self.cache.append_task(moved)
        return ReconcileResult(ReconcileStatus.CONFIRMED, intent, tasks=[moved])

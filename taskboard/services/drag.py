"""
Drag session controller.

Turns a continuous pointer gesture over a task list into discrete intents:

    Idle --start--> Dragging --move--> Dragging (ReorderIntent while hovering)
    Dragging --drop on project--> Idle (MoveIntent or CommitReorderIntent)
    Dragging --drop elsewhere--> Idle (nothing, no mutation)

The controller only reads indices handed to it by the view and returns
intents. It never touches the entity cache; the reconciler is the only
writer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence, TypeVar

from taskboard.logging_config import get_logger
from taskboard.services.cache import reorder_local

logger = get_logger(__name__)

T = TypeVar("T")


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class Point:
    """Pointer position in view coordinates."""
    x: float
    y: float


@dataclass(frozen=True)
class RowSlot:
    """Bounding box of the list row currently under the pointer."""
    index: int
    top: float
    height: float

    @property
    def middle(self) -> float:
        return self.top + self.height / 2


@dataclass(frozen=True)
class DropTarget:
    """A project the task was released over (its own list counts too)."""
    project_id: str


# =============================================================================
# Intents
# =============================================================================

@dataclass(frozen=True)
class ReorderIntent:
    """Live preview step: the dragged row moved from one slot to another."""
    task_id: str
    from_index: int
    to_index: int


@dataclass(frozen=True)
class CommitReorderIntent:
    """Drop inside the source project: persist the new position."""
    task_id: str
    project_id: str
    from_index: int  # Index at gesture start
    final_index: int


@dataclass(frozen=True)
class MoveIntent:
    """Drop on another project: re-parent the task."""
    task_id: str
    from_project_id: str
    to_project_id: str


Intent = ReorderIntent | CommitReorderIntent | MoveIntent


class DragSessionController:
    """
    State machine for one drag gesture at a time.

    Args:
        is_locked: Returns True while a commit for the given project's list
            is still in flight. Gestures on a locked list are refused.
    """

    def __init__(self, is_locked: Callable[[str], bool] | None = None):
        self._is_locked = is_locked or (lambda project_id: False)
        self._reset()

    def _reset(self) -> None:
        self.state = DragState.IDLE
        self.dragged_task_id: str | None = None
        self.dragged_from_index: int | None = None
        self.dragged_from_project_id: str | None = None
        self.current_index: int | None = None
        self.list_length: int | None = None
        self.pointer: Point | None = None

    @property
    def is_dragging(self) -> bool:
        return self.state is DragState.DRAGGING

    @property
    def feedback_offset(self) -> Point | None:
        """Where to draw the floating drag image, None when idle."""
        return self.pointer if self.is_dragging else None

    def on_gesture_start(
        self,
        task_id: str,
        index: int,
        project_id: str,
        list_length: int | None = None,
        pointer: Point | None = None,
    ) -> bool:
        """
        Begin dragging ``task_id`` from ``index`` of ``project_id``'s list.

        Returns False (and stays idle) when a gesture is already running or
        the list is locked by an outstanding commit.
        """
        if self.is_dragging:
            logger.debug(f"Ignoring gesture start on {task_id}: already dragging {self.dragged_task_id}")
            return False
        if self._is_locked(project_id):
            logger.info(f"Drag refused on project {project_id}: previous change not settled")
            return False
        if list_length is not None and not 0 <= index < list_length:
            raise IndexError(f"index {index} out of range for {list_length} items")

        self.state = DragState.DRAGGING
        self.dragged_task_id = task_id
        self.dragged_from_index = index
        self.dragged_from_project_id = project_id
        self.current_index = index
        self.list_length = list_length
        self.pointer = pointer
        logger.debug(f"Drag started: task={task_id} index={index} project={project_id}")
        return True

    def on_gesture_move(self, pointer: Point, slot: RowSlot | None = None) -> ReorderIntent | None:
        """
        Track the pointer; emit a ReorderIntent when it crosses into another row.

        A row only swaps once the pointer passes its vertical midpoint in the
        direction of travel, so hovering on a boundary does not flicker.
        """
        if not self.is_dragging:
            return None
        self.pointer = pointer

        if slot is None or slot.index == self.current_index:
            return None
        if self.list_length is not None and not 0 <= slot.index < self.list_length:
            return None

        # Dragging downwards: wait until past the middle of the row below
        if self.current_index < slot.index and pointer.y < slot.middle:
            return None
        # Dragging upwards: wait until past the middle of the row above
        if self.current_index > slot.index and pointer.y > slot.middle:
            return None

        intent = ReorderIntent(
            task_id=self.dragged_task_id,
            from_index=self.current_index,
            to_index=slot.index,
        )
        self.current_index = slot.index
        return intent

    def on_gesture_end(self, target: DropTarget | None = None) -> CommitReorderIntent | MoveIntent | None:
        """
        Finish the gesture.

        No target means the task was dropped outside every valid target: the
        gesture is cancelled and nothing is emitted.
        """
        if not self.is_dragging:
            return None

        intent: CommitReorderIntent | MoveIntent | None
        if target is None:
            logger.debug(f"Drag cancelled: task={self.dragged_task_id}")
            intent = None
        elif target.project_id != self.dragged_from_project_id:
            intent = MoveIntent(
                task_id=self.dragged_task_id,
                from_project_id=self.dragged_from_project_id,
                to_project_id=target.project_id,
            )
        else:
            intent = CommitReorderIntent(
                task_id=self.dragged_task_id,
                project_id=self.dragged_from_project_id,
                from_index=self.dragged_from_index,
                final_index=self.current_index,
            )

        self._reset()
        return intent

    def cancel(self) -> None:
        self.on_gesture_end(None)

    def preview(self, items: Sequence[T]) -> list[T]:
        """The list as it should be drawn mid-gesture."""
        if not self.is_dragging or self.current_index == self.dragged_from_index:
            return list(items)
        return reorder_local(items, self.dragged_from_index, self.current_index)

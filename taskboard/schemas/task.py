from datetime import date

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from taskboard.models.task import Priority, Subtask, TaskStatus


class _CamelModel(BaseModel):
    """Request bodies travel camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskCreate(_CamelModel):
    """Schema for creating a new task."""
    title: str
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    due_date: date | None = None
    project_id: str


class TaskUpdate(_CamelModel):
    """Schema for editing a task. Only the fields that are set are sent."""
    title: str | None = None
    description: str | None = None
    priority: Priority | None = None
    status: TaskStatus | None = None
    due_date: date | None = None
    subtasks: list[Subtask] | None = None


class TaskMove(_CamelModel):
    """Body of PUT /tasks/{id}/move."""
    new_project_id: str


class TaskReorder(_CamelModel):
    """Body of PUT /tasks/reorder/{projectId}: the full new id order."""
    task_ids: list[str]

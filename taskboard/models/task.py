from datetime import date, datetime
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TaskStatus(str, Enum):
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class Subtask(BaseModel):
    id: str = Field(
        validation_alias=AliasChoices("id", "_id"),
        serialization_alias="id",
    )
    title: str
    completed: bool = False

    model_config = ConfigDict(populate_by_name=True)


class Task(BaseModel):
    """
    Task model as returned by the remote store.

    Key fields:
    - project_id: Mutable - a move re-parents the task
    - order: Server-assigned rank inside the project, normalized on every
      mutating call
    """

    id: str = Field(
        validation_alias=AliasChoices("id", "_id"),
        serialization_alias="id",
    )
    title: str
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    due_date: date | None = Field(
        default=None,
        validation_alias=AliasChoices("dueDate", "due_date"),
        serialization_alias="dueDate",
    )
    subtasks: list[Subtask] = Field(default_factory=list)

    project_id: str = Field(
        validation_alias=AliasChoices("projectId", "project_id", "project"),
        serialization_alias="projectId",
    )
    owner_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ownerId", "owner_id", "user"),
        serialization_alias="ownerId",
    )
    order: int | float | None = None  # Dense or sparse rank

    created_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("createdAt", "created_at"),
        serialization_alias="createdAt",
    )
    updated_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("updatedAt", "updated_at"),
        serialization_alias="updatedAt",
    )

    model_config = ConfigDict(populate_by_name=True)

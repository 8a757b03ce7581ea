from taskboard.models.project import Project
from taskboard.models.task import Task, Priority, TaskStatus, Subtask

__all__ = ["Project", "Task", "Priority", "TaskStatus", "Subtask"]

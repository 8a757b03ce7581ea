from taskboard.schemas.auth import Credentials, TokenResponse
from taskboard.schemas.project import ProjectCreate
from taskboard.schemas.task import TaskCreate, TaskUpdate, TaskMove, TaskReorder

__all__ = [
    "Credentials",
    "TokenResponse",
    "ProjectCreate",
    "TaskCreate",
    "TaskUpdate",
    "TaskMove",
    "TaskReorder",
]

"""
HTTP client for the remote task/project store.

Every method maps one endpoint of the store's REST contract and returns the
parsed models. Failures are raised as the Taskboard exception matching the
operation (FetchFailed, CreateFailed, ...); a 401 raises AuthRejected and
invalidates the session.
"""

from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from taskboard.config import Settings, get_settings
from taskboard.exceptions import (
    TaskboardException,
    AuthRejected,
    CreateFailed,
    DeleteFailed,
    FetchFailed,
    MoveFailed,
    ReorderFailed,
    UpdateFailed,
    from_http_error,
)
from taskboard.logging_config import get_logger
from taskboard.models import Project, Task
from taskboard.schemas import (
    Credentials,
    ProjectCreate,
    TaskCreate,
    TaskMove,
    TaskReorder,
    TaskUpdate,
    TokenResponse,
)
from taskboard.session import SessionContext

logger = get_logger(__name__)

_project_list = TypeAdapter(list[Project])
_task_list = TypeAdapter(list[Task])


class RemoteStore:
    """
    Async client for the remote store.

    Usage:
        async with RemoteStore(session) as store:
            projects = await store.list_projects()
    """

    def __init__(
        self,
        session: SessionContext,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = settings or get_settings()
        self.session = session
        self._http = httpx.AsyncClient(
            base_url=settings.api_url,
            headers={"Content-Type": "application/json"},
            timeout=httpx.Timeout(settings.request_timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "RemoteStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # -------------------------------------------------------------------------
    # Request plumbing
    # -------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        url: str,
        error_cls: type[TaskboardException],
        default_message: str,
        json: Any = None,
        authenticated: bool = True,
    ) -> Any:
        """Send one request and return the decoded JSON body (None if empty)."""
        headers = self.session.headers() if authenticated else {}
        logger.debug(f"{method} {url}")
        try:
            response = await self._http.request(method, url, json=json, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            error = from_http_error(e, error_cls, default_message)
            if isinstance(error, AuthRejected) and authenticated:
                self.session.invalidate()
            logger.warning(f"{method} {url} failed: {error.message}")
            raise error from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise error_cls(f"{default_message}: malformed response") from e

    @staticmethod
    def _parse(adapter_or_model, payload: Any, error_cls: type[TaskboardException], default_message: str):
        try:
            if isinstance(adapter_or_model, TypeAdapter):
                return adapter_or_model.validate_python(payload)
            return adapter_or_model.model_validate(payload)
        except PydanticValidationError as e:
            logger.error(f"Unexpected payload from store: {e}")
            raise error_cls(f"{default_message}: unexpected response") from e

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    async def login(self, username: str, password: str) -> str:
        """POST /auth/login. Starts the session and returns the token."""
        return await self._authenticate("/auth/login", username, password)

    async def register(self, username: str, password: str) -> str:
        """POST /auth/register. Starts the session and returns the token."""
        return await self._authenticate("/auth/register", username, password)

    async def _authenticate(self, url: str, username: str, password: str) -> str:
        body = Credentials(username=username, password=password).model_dump()
        payload = await self._request(
            "POST", url, AuthRejected, "Invalid credentials",
            json=body, authenticated=False,
        )
        token = self._parse(TokenResponse, payload, AuthRejected, "Invalid credentials").token
        self.session.start(token, username)
        return token

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    async def list_projects(self) -> list[Project]:
        """GET /projects"""
        payload = await self._request("GET", "/projects", FetchFailed, "Failed to fetch projects")
        return self._parse(_project_list, payload, FetchFailed, "Failed to fetch projects")

    async def create_project(self, name: str) -> Project:
        """POST /projects"""
        body = ProjectCreate(name=name).model_dump()
        payload = await self._request("POST", "/projects", CreateFailed, "Failed to create project", json=body)
        project = self._parse(Project, payload, CreateFailed, "Failed to create project")
        logger.info(f"Created project: id={project.id} name='{project.name}'")
        return project

    async def delete_project(self, project_id: str) -> None:
        """DELETE /projects/{id} - the store cascades to the project's tasks."""
        if not project_id:
            raise DeleteFailed("Invalid project ID")
        await self._request("DELETE", f"/projects/{project_id}", DeleteFailed, "Failed to delete project")
        logger.info(f"Deleted project {project_id}")

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    async def list_tasks(self, project_id: str) -> list[Task]:
        """GET /tasks/project/{projectId}"""
        payload = await self._request(
            "GET", f"/tasks/project/{project_id}", FetchFailed, "Failed to fetch tasks",
        )
        return self._parse(_task_list, payload, FetchFailed, "Failed to fetch tasks")

    async def create_task(self, task_in: TaskCreate) -> Task:
        """POST /tasks"""
        body = task_in.model_dump(mode="json", by_alias=True, exclude_none=True)
        payload = await self._request("POST", "/tasks", CreateFailed, "Failed to create task", json=body)
        task = self._parse(Task, payload, CreateFailed, "Failed to create task")
        logger.info(f"Created task: id={task.id} title='{task.title}' project={task.project_id}")
        return task

    async def update_task(self, task_id: str, task_in: TaskUpdate) -> Task:
        """PUT /tasks/{id} with only the fields that were set."""
        body = task_in.model_dump(mode="json", by_alias=True, exclude_unset=True)
        payload = await self._request("PUT", f"/tasks/{task_id}", UpdateFailed, "Failed to update task", json=body)
        return self._parse(Task, payload, UpdateFailed, "Failed to update task")

    async def delete_task(self, task_id: str) -> None:
        """DELETE /tasks/{id}"""
        await self._request("DELETE", f"/tasks/{task_id}", DeleteFailed, "Failed to delete task")
        logger.info(f"Deleted task {task_id}")

    async def move_task(self, task_id: str, new_project_id: str) -> Task:
        """PUT /tasks/{id}/move - returns the re-parented task."""
        body = TaskMove(new_project_id=new_project_id).model_dump(by_alias=True)
        payload = await self._request(
            "PUT", f"/tasks/{task_id}/move", MoveFailed, "Failed to move task", json=body,
        )
        return self._parse(Task, payload, MoveFailed, "Failed to move task")

    async def reorder_tasks(self, project_id: str, task_ids: list[str]) -> list[Task]:
        """PUT /tasks/reorder/{projectId} - returns the authoritative order."""
        body = TaskReorder(task_ids=task_ids).model_dump(by_alias=True)
        payload = await self._request(
            "PUT", f"/tasks/reorder/{project_id}", ReorderFailed, "Failed to reorder tasks", json=body,
        )
        return self._parse(_task_list, payload, ReorderFailed, "Failed to reorder tasks")

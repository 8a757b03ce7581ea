"""
In-memory FastAPI implementation of the remote store's REST contract.

Mounted behind httpx.ASGITransport so the client is exercised end to end
without a network. ``FakeStore.fail`` injects one-shot server errors.
"""

import secrets
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from taskboard.models import Project, Task
from taskboard.schemas import (
    Credentials,
    ProjectCreate,
    TaskCreate,
    TaskMove,
    TaskReorder,
    TaskUpdate,
)


class InjectedFailure(Exception):
    def __init__(self, operation: str):
        self.operation = operation


class FakeStore:
    """Server-side state shared between the fake app and the tests."""

    def __init__(self):
        self.passwords: dict[str, str] = {}
        self.tokens: dict[str, str] = {}  # token -> username
        self.projects: dict[str, Project] = {}
        self.tasks: dict[str, Task] = {}
        self.fail: set[str] = set()
        self.calls: list[str] = []

    def add_user(self, username: str, password: str = "secret") -> str:
        self.passwords[username] = password
        token = secrets.token_hex(8)
        self.tokens[token] = username
        return token

    def add_project(self, name: str, owner: str) -> Project:
        project = Project(id=uuid.uuid4().hex, name=name, owner_id=owner)
        self.projects[project.id] = project
        return project

    def add_task(self, title: str, project_id: str, owner: str, **fields) -> Task:
        now = datetime.now(timezone.utc)
        task = Task(
            id=uuid.uuid4().hex,
            title=title,
            project_id=project_id,
            owner_id=owner,
            order=len(self.project_tasks(project_id)),
            created_at=now,
            updated_at=now,
            **fields,
        )
        self.tasks[task.id] = task
        return task

    def project_tasks(self, project_id: str) -> list[Task]:
        tasks = [t for t in self.tasks.values() if t.project_id == project_id]
        return sorted(tasks, key=lambda t: t.order if t.order is not None else 0)

    def renumber(self, project_id: str) -> None:
        for index, task in enumerate(self.project_tasks(project_id)):
            self.tasks[task.id] = task.model_copy(update={"order": index})

    def maybe_fail(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail:
            self.fail.discard(operation)
            raise InjectedFailure(operation)


def create_app(store: FakeStore) -> FastAPI:
    """Build the fake store application around ``store``."""
    bearer = HTTPBearer(auto_error=False)

    async def current_user(
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    ) -> str:
        if credentials is None or credentials.credentials not in store.tokens:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token is not valid",
                headers={"WWW-Authenticate": "Bearer"},
            )
        return store.tokens[credentials.credentials]

    def owned_project(project_id: str, user: str) -> Project:
        project = store.projects.get(project_id)
        if project is None or project.owner_id != user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
        return project

    def owned_task(task_id: str, user: str) -> Task:
        task = store.tasks.get(task_id)
        if task is None or task.owner_id != user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
        return task

    # -------------------------------------------------------------------------
    auth = APIRouter()

    @auth.post("/register")
    async def register(body: Credentials):
        store.maybe_fail("register")
        if body.username in store.passwords:
            return JSONResponse(status_code=400, content={"msg": "User already exists"})
        store.passwords[body.username] = body.password
        token = secrets.token_hex(8)
        store.tokens[token] = body.username
        return {"token": token}

    @auth.post("/login")
    async def login(body: Credentials):
        store.maybe_fail("login")
        if store.passwords.get(body.username) != body.password:
            return JSONResponse(status_code=400, content={"msg": "Invalid credentials"})
        token = secrets.token_hex(8)
        store.tokens[token] = body.username
        return {"token": token}

    # -------------------------------------------------------------------------
    projects = APIRouter()

    @projects.get("", response_model=list[Project])
    async def list_projects(user: str = Depends(current_user)):
        store.maybe_fail("list_projects")
        return [p for p in store.projects.values() if p.owner_id == user]

    @projects.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
    async def create_project(body: ProjectCreate, user: str = Depends(current_user)):
        store.maybe_fail("create_project")
        return store.add_project(body.name, user)

    @projects.delete("/{project_id}")
    async def delete_project(project_id: str, user: str = Depends(current_user)):
        store.maybe_fail("delete_project")
        owned_project(project_id, user)
        del store.projects[project_id]
        for task in store.project_tasks(project_id):
            del store.tasks[task.id]
        return {"msg": "Project removed"}

    # -------------------------------------------------------------------------
    tasks = APIRouter()

    @tasks.get("/project/{project_id}", response_model=list[Task])
    async def list_tasks(project_id: str, user: str = Depends(current_user)):
        store.maybe_fail("list_tasks")
        owned_project(project_id, user)
        return store.project_tasks(project_id)

    @tasks.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
    async def create_task(body: TaskCreate, user: str = Depends(current_user)):
        store.maybe_fail("create_task")
        owned_project(body.project_id, user)
        return store.add_task(
            body.title,
            body.project_id,
            user,
            description=body.description,
            priority=body.priority,
            status=body.status,
            due_date=body.due_date,
        )

    @tasks.put("/reorder/{project_id}", response_model=list[Task])
    async def reorder_tasks(project_id: str, body: TaskReorder, user: str = Depends(current_user)):
        store.maybe_fail("reorder")
        owned_project(project_id, user)
        current = {t.id for t in store.project_tasks(project_id)}
        if set(body.task_ids) != current or len(body.task_ids) != len(current):
            raise HTTPException(status_code=400, detail="Task ids do not match the project")
        for index, task_id in enumerate(body.task_ids):
            task = store.tasks[task_id]
            store.tasks[task_id] = task.model_copy(
                update={"order": index, "updated_at": datetime.now(timezone.utc)}
            )
        return store.project_tasks(project_id)

    @tasks.put("/{task_id}/move", response_model=Task)
    async def move_task(task_id: str, body: TaskMove, user: str = Depends(current_user)):
        store.maybe_fail("move")
        task = owned_task(task_id, user)
        owned_project(body.new_project_id, user)
        source = task.project_id
        store.tasks[task_id] = task.model_copy(update={
            "project_id": body.new_project_id,
            "order": len(store.project_tasks(body.new_project_id)),
            "updated_at": datetime.now(timezone.utc),
        })
        store.renumber(source)
        return store.tasks[task_id]

    @tasks.put("/{task_id}", response_model=Task)
    async def update_task(task_id: str, body: TaskUpdate, user: str = Depends(current_user)):
        store.maybe_fail("update_task")
        task = owned_task(task_id, user)
        data = task.model_dump()
        data.update(body.model_dump(exclude_unset=True))
        data["updated_at"] = datetime.now(timezone.utc)
        store.tasks[task_id] = Task.model_validate(data)
        return store.tasks[task_id]

    @tasks.delete("/{task_id}")
    async def delete_task(task_id: str, user: str = Depends(current_user)):
        store.maybe_fail("delete_task")
        task = owned_task(task_id, user)
        del store.tasks[task_id]
        store.renumber(task.project_id)
        return {"msg": "Task removed"}

    # -------------------------------------------------------------------------
    app = FastAPI(title="Fake task store")

    @app.exception_handler(InjectedFailure)
    async def injected_failure_handler(request: Request, exc: InjectedFailure) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "internal_error",
                "message": f"Injected failure in {exc.operation}",
                "details": None,
            },
        )

    app.include_router(auth, prefix="/auth", tags=["Auth"])
    app.include_router(projects, prefix="/projects", tags=["Projects"])
    app.include_router(tasks, prefix="/tasks", tags=["Tasks"])
    return app

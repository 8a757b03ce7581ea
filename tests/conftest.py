"""
Pytest configuration and fixtures for Taskboard tests.
"""

import httpx
import pytest
import pytest_asyncio

from taskboard.client import RemoteStore
from taskboard.config import Settings
from taskboard.services.board import BoardService
from taskboard.session import SessionContext
from tests.fake_store import FakeStore, create_app


TEST_API_URL = "http://test"
USERNAME = "alice"


@pytest.fixture
def settings():
    return Settings(api_url=TEST_API_URL, auth_header="Authorization")


@pytest.fixture
def fake_store():
    """Server-side state of the in-memory store."""
    return FakeStore()


@pytest.fixture
def session(fake_store):
    """A session already signed in as alice."""
    session = SessionContext(auth_header="Authorization")
    session.start(fake_store.add_user(USERNAME), USERNAME)
    return session


@pytest_asyncio.fixture(scope="function")
async def store(fake_store, session, settings):
    """Remote store client talking to the fake app through ASGI."""
    transport = httpx.ASGITransport(app=create_app(fake_store))
    async with RemoteStore(session, settings=settings, transport=transport) as remote:
        yield remote


@pytest.fixture
def board(store):
    return BoardService(store)


@pytest.fixture
def seeded(fake_store):
    """
    Project P with tasks T1, T2, T3 (in that order) and an empty project Q.
    """
    p = fake_store.add_project("P", USERNAME)
    q = fake_store.add_project("Q", USERNAME)
    t1 = fake_store.add_task("T1", p.id, USERNAME)
    t2 = fake_store.add_task("T2", p.id, USERNAME)
    t3 = fake_store.add_task("T3", p.id, USERNAME)
    return {"P": p, "Q": q, "T1": t1, "T2": t2, "T3": t3}

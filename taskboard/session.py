"""
Session context for authenticated requests.

Holds the token obtained from /auth/login or /auth/register. The session is
created once and handed to the remote store client; its lifetime follows
login/logout instead of living in ambient global storage.
"""

from typing import Callable

from taskboard.config import get_settings
from taskboard.logging_config import get_logger

logger = get_logger(__name__)


class SessionContext:
    """Token holder shared by the remote store client and the reconciler."""

    def __init__(self, auth_header: str | None = None):
        self.auth_header = auth_header or get_settings().auth_header
        self.token: str | None = None
        self.username: str | None = None
        self._rejection_callbacks: list[Callable[[], None]] = []

    def __repr__(self):
        return f"SessionContext(username={self.username}, authenticated={self.is_authenticated})"

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def start(self, token: str, username: str | None = None) -> None:
        """Begin a session after a successful login/register."""
        self.token = token
        self.username = username
        logger.info(f"Session started for {username or 'anonymous user'}")

    def end(self) -> None:
        """Logout: forget the token."""
        if self.token is not None:
            logger.info(f"Session ended for {self.username or 'anonymous user'}")
        self.token = None
        self.username = None

    def on_rejected(self, callback: Callable[[], None]) -> None:
        """
        Register a callback fired when the store rejects the token.

        This is where a front end hooks its redirect to the login flow.
        """
        self._rejection_callbacks.append(callback)

    def invalidate(self) -> None:
        """The store answered 401: drop the session and notify listeners."""
        logger.warning("Session token rejected by the store")
        self.end()
        for callback in self._rejection_callbacks:
            callback()

    def headers(self) -> dict[str, str]:
        """Headers to attach to an authenticated request."""
        if self.token is None:
            return {}
        if self.auth_header.lower() == "authorization":
            return {"Authorization": f"Bearer {self.token}"}
        return {self.auth_header: self.token}

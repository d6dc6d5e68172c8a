"""Loaders for resource lists shown next to the chat.

Each loader tracks its items, a loading flag and an error string, so views can
show a spinner or an error banner instead of silently rendering nothing.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from ragchat.api.gateway import ApiGateway
from ragchat.api.results import Failure, NotFound, Ok
from ragchat.models.schemas import Project, Session, User
from ragchat.state.store import IdentityStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResourceLoader(Generic[T]):
    """Fetch a list through the gateway and hold the outcome.

    Attributes:
        items: Last successfully loaded items.
        loading: True while a load is in flight.
        error: User-facing error message of the last load, if it failed.
        failure: The failure behind ``error``.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[Ok[list[T]] | Failure]],
        error_message: str,
    ) -> None:
        self._fetch = fetch
        self._error_message = error_message
        self.items: list[T] = []
        self.loading = False
        self.error: str | None = None
        self.failure: Failure | None = None

    async def load(self) -> list[T]:
        self.loading = True
        self.error = None
        self.failure = None
        try:
            result = await self._fetch()
            if isinstance(result, Ok):
                self.items = list(result.value or [])
            else:
                self.failure = result
                self.error = self._error_message
                logger.warning(f"{self._error_message}: {result}")
        finally:
            self.loading = False
        return self.items


def users_loader(gateway: ApiGateway) -> ResourceLoader[User]:
    return ResourceLoader(gateway.list_users, "Failed to fetch users")


def sessions_loader(gateway: ApiGateway, store: IdentityStore) -> ResourceLoader[Session]:
    """Loader for the sessions of whichever user is selected at load time."""

    async def fetch() -> Ok[list[Session]] | Failure:
        if not store.username:
            return NotFound(detail="No user selected")
        return await gateway.list_sessions(store.username)

    return ResourceLoader(fetch, "Failed to fetch sessions")


def projects_loader(gateway: ApiGateway) -> ResourceLoader[Project]:
    return ResourceLoader(gateway.list_projects, "Failed to fetch projects")


async def select_user(
    gateway: ApiGateway, store: IdentityStore, username: str | None
) -> User | None:
    """Make ``username`` the current user and load its admin flag.

    Selecting a user clears the active session. ``admin`` stays False until
    the profile confirms otherwise, and is left alone if another user was
    selected while the profile was loading.

    Returns:
        The user's profile, or None if no user was given or it failed to load.
    """
    store.username = username
    store.session_id = None
    store.admin = False
    if not username:
        return None

    result = await gateway.get_user(username)
    if not isinstance(result, Ok) or result.value is None:
        logger.warning(f"Could not load profile for {username}: {result}")
        return None
    if store.username == username:
        store.admin = result.value.is_admin
    return result.value

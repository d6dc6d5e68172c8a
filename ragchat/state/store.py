"""Shared identity and session state.

Holds the active session id, the current username and the admin flag. One
instance is created at startup and handed to every collaborator that needs it.
"""

import logging
from collections.abc import Callable
from typing import Any, Literal

logger = logging.getLogger(__name__)

Field = Literal["session_id", "username", "admin"]
Listener = Callable[[Any], None]


class IdentityStore:
    """Observable store for ``session_id``, ``username`` and ``admin``.

    Writes are not validated and the last writer wins. Listeners registered
    with ``subscribe`` run synchronously, and only when a value changes.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {"session_id": None, "username": None, "admin": False}
        self._listeners: dict[str, list[Listener]] = {name: [] for name in self._values}

    @property
    def session_id(self) -> str | None:
        return self._values["session_id"]

    @session_id.setter
    def session_id(self, value: str | None) -> None:
        self._set("session_id", value)

    @property
    def username(self) -> str | None:
        return self._values["username"]

    @username.setter
    def username(self, value: str | None) -> None:
        self._set("username", value)

    @property
    def admin(self) -> bool:
        return self._values["admin"]

    @admin.setter
    def admin(self, value: bool) -> None:
        self._set("admin", value)

    def snapshot(self) -> tuple[str | None, str | None, bool]:
        """Return the current (session_id, username, admin) triple."""
        return self.session_id, self.username, self.admin

    def subscribe(self, field: Field, listener: Listener) -> Callable[[], None]:
        """Register a change listener for one field.

        Args:
            field: Name of the watched field.
            listener: Called with the new value after each change.

        Returns:
            A callable that removes the listener.

        Raises:
            KeyError: If ``field`` is not a store field.
        """
        listeners = self._listeners[field]
        listeners.append(listener)

        def unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def _set(self, field: str, value: Any) -> None:
        if self._values[field] == value:
            return
        self._values[field] = value
        logger.debug(f"{field} changed to {value!r}")
        for listener in list(self._listeners[field]):
            listener(value)

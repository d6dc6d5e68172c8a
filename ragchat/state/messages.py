"""Locally displayed message list."""

from collections.abc import Callable, Iterable

from ragchat.models.schemas import ChatHistory

MessagesListener = Callable[[tuple[ChatHistory, ...]], None]


class MessageList:
    """Ordered chat turns shown by the view.

    Replaced wholesale on every successful session fetch. ``append`` is only
    used for turns sent from this client.
    """

    def __init__(self) -> None:
        self._items: tuple[ChatHistory, ...] = ()
        self._listeners: list[MessagesListener] = []

    @property
    def items(self) -> tuple[ChatHistory, ...]:
        return self._items

    def __len__(self) -> int:
        return len(self._items)

    def set(self, items: Iterable[ChatHistory]) -> None:
        self._items = tuple(items)
        self._notify()

    def append(self, item: ChatHistory) -> None:
        self._items = (*self._items, item)
        self._notify()

    def clear(self) -> None:
        self.set(())

    def subscribe(self, listener: MessagesListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._items)

"""Session synchronization controller.

Keeps the displayed message list consistent with the session selected in the
identity store:

    IDLE -> FETCHING          session_id becomes non-empty
    FETCHING -> POPULATED     fetch returned the session
    FETCHING -> EMPTY         fetch failed, or session_id was cleared
    POPULATED/EMPTY -> FETCHING   any later session_id change

Each trigger takes a new generation number. A fetch result is applied only if
no newer trigger happened meanwhile and the store still points at the session
that was fetched, so responses arriving out of order never overwrite a newer
selection.

A change written from synchronous code, with no event loop running, is
recorded and its fetch starts on the next ``wait_idle()``.
"""

import asyncio
import logging
from enum import Enum

from ragchat.api.gateway import ApiGateway
from ragchat.api.results import Failure, NotFound, Ok
from ragchat.models.schemas import ChatHistory, Query, Session, WorkflowResponse
from ragchat.state.messages import MessageList
from ragchat.state.store import IdentityStore

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    """Controller states."""

    IDLE = "idle"
    FETCHING = "fetching"
    POPULATED = "populated"
    EMPTY = "empty"


class SessionSyncController:
    """Mirror the history of the active session into a MessageList.

    Attributes:
        store: Shared identity store; its session_id drives the controller.
        gateway: API gateway used to fetch sessions and post chat turns.
        messages: View state the presentation layer renders.
        state: Current SyncState.
        error: Failure of the last fetch or send, None after a success.
    """

    def __init__(
        self,
        store: IdentityStore,
        gateway: ApiGateway,
        messages: MessageList | None = None,
        project_name: str = "default",
        workflow_name: str = "default",
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.messages = messages if messages is not None else MessageList()
        self.project_name = project_name
        self.workflow_name = workflow_name
        self.state = SyncState.IDLE
        self.error: Failure | None = None
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()
        self._deferred: tuple[int, str] | None = None
        self._unsubscribe = store.subscribe("session_id", self._on_session_changed)
        if store.session_id:
            self._trigger(store.session_id)

    def _on_session_changed(self, session_id: str | None) -> None:
        self._trigger(session_id)

    def _trigger(self, session_id: str | None) -> asyncio.Task | None:
        self._generation += 1
        generation = self._generation
        self._deferred = None

        if not session_id:
            self.messages.clear()
            self.error = None
            self.state = SyncState.EMPTY
            return None

        self.state = SyncState.FETCHING
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running event loop, deferring fetch of session {session_id}")
            self._deferred = (generation, session_id)
            return None
        return self._start(loop, generation, session_id)

    def _start(
        self, loop: asyncio.AbstractEventLoop, generation: int, session_id: str
    ) -> asyncio.Task:
        task = loop.create_task(self._sync(generation, session_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _is_current(self, generation: int, session_id: str | None) -> bool:
        return generation == self._generation and self.store.session_id == session_id

    async def _sync(self, generation: int, session_id: str) -> None:
        username = self.store.username
        logger.info(f"Getting session: {session_id}")
        if not username:
            logger.warning(f"No user selected, cannot fetch session {session_id}")
            result: Ok[Session] | Failure = NotFound(detail="No user selected")
        else:
            result = await self.gateway.get_session(username, session_id)

        if not self._is_current(generation, session_id):
            logger.debug(f"Discarding stale response for session {session_id}")
            return

        if isinstance(result, Ok) and isinstance(result.value, Session):
            history = result.value.history
            self.messages.set(history)
            self.error = None
            self.state = SyncState.POPULATED
            logger.info(f"Loaded {len(history)} message(s) for session {session_id}")
        else:
            self.messages.clear()
            if isinstance(result, Ok):
                result = NotFound(detail="Empty response")
            self.error = result
            self.state = SyncState.EMPTY

    async def refresh(self) -> None:
        """Re-fetch the current session and wait for it to settle."""
        task = self._trigger(self.store.session_id)
        if task is not None:
            await task

    async def wait_idle(self) -> None:
        """Start any deferred fetch, then wait until no fetch is in flight."""
        if self._deferred is not None:
            generation, session_id = self._deferred
            self._deferred = None
            self._start(asyncio.get_running_loop(), generation, session_id)
        while self._tasks:
            await asyncio.gather(*self._tasks)

    async def send(self, question: str) -> WorkflowResponse | None:
        """Post a chat turn and append the answer.

        The user turn is appended right away. The bot turn is appended only if
        the active session did not change while waiting for the answer.

        Args:
            question: The user's message.

        Returns:
            The workflow response, or None if the call failed or went stale.

        Raises:
            ValueError: If the question is empty.
        """
        session_id = self.store.session_id
        query = Query(question=question, session_name=session_id)

        self.messages.append(ChatHistory(role="user", content=query.question))
        result = await self.gateway.infer_workflow(self.project_name, self.workflow_name, query)

        if self.store.session_id != session_id:
            logger.debug(f"Discarding stale answer for session {session_id}")
            return None

        if not isinstance(result, Ok):
            self.error = result
            return None

        answer: WorkflowResponse = result.value
        self.messages.append(
            ChatHistory(role="bot", content=answer.answer, sources=answer.sources)
        )
        self.error = None
        return answer

    async def new_chat(self, name: str) -> Session | None:
        """Create a session for the current user and select it.

        Args:
            name: Name of the new session.

        Returns:
            The created session, or None if it could not be created.
        """
        username = self.store.username
        if not username:
            self.error = NotFound(detail="No user selected")
            return None

        session = Session(name=name, username=username)
        result = await self.gateway.create_session(username, session)
        if not isinstance(result, Ok):
            self.error = result
            return None
        if result.value is None or not result.value.uid:
            logger.error(f"Session {name} created without an id")
            self.error = NotFound(detail="Empty response")
            return None

        self.error = None
        self.store.session_id = result.value.uid
        return result.value

    def close(self) -> None:
        """Stop following the store and cancel in-flight fetches."""
        self._unsubscribe()
        for task in list(self._tasks):
            task.cancel()

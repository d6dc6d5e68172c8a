"""NiceGUI chat page bound to the session sync controller."""

import logging
import uuid

from nicegui import ui

from ragchat.api.config import get_gateway_config
from ragchat.api.gateway import ApiGateway
from ragchat.api.results import describe
from ragchat.models.schemas import ChatHistory
from ragchat.state.loaders import select_user, sessions_loader
from ragchat.state.messages import MessageList
from ragchat.state.store import IdentityStore
from ragchat.state.sync import SessionSyncController, SyncState

logger = logging.getLogger(__name__)

CUSTOM_CSS = """
<style>
    body { background: #f5f5f5; }
    .header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); }
    .message-user {
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        color: white;
        border-radius: 18px 18px 4px 18px;
    }
    .message-bot {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }
</style>
"""


def render_message(msg: ChatHistory) -> None:
    is_user = msg.role == "user"
    align = "justify-end" if is_user else "justify-start"
    bubble = "message-user" if is_user else "message-bot"

    with ui.row().classes(f"w-full {align}"):
        with ui.column().classes("max-w-[70%] gap-1"):
            with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                if msg.html:
                    ui.html(msg.html, sanitize=False).classes("text-sm")
                elif is_user:
                    ui.label(msg.content).classes("text-sm whitespace-pre-wrap")
                else:
                    ui.markdown(msg.content).classes("text-sm")
            if msg.sources:
                ui.label(f"{len(msg.sources)} source(s)").classes("text-[10px] text-gray-400")


@ui.page("/")
async def chat_page() -> None:
    """Main chat page. Each browser tab gets its own store and controller."""
    ui.add_head_html(CUSTOM_CSS)

    config = get_gateway_config()
    store = IdentityStore()
    gateway = ApiGateway(config)
    messages = MessageList()
    controller = SessionSyncController(
        store,
        gateway,
        messages,
        project_name=config.project_name,
        workflow_name=config.workflow_name,
    )
    sessions = sessions_loader(gateway, store)

    async def cleanup() -> None:
        logger.debug("Client disconnected, closing gateway")
        controller.close()
        await gateway.aclose()

    ui.context.client.on_disconnect(cleanup)

    messages_container: ui.column
    session_select: ui.select
    user_input: ui.input
    admin_badge: ui.badge
    input_field: ui.input

    def refresh_messages(*_: object) -> None:
        messages_container.clear()
        with messages_container:
            if not messages.items:
                loading = controller.state == SyncState.FETCHING
                text = "Loading..." if loading else "Start a conversation"
                ui.label(text).classes("w-full text-center text-gray-400 py-16")
            for msg in messages.items:
                render_message(msg)

    async def reload_sessions() -> None:
        await sessions.load()
        if sessions.error:
            ui.notify(sessions.error, type="warning")
        options = {s.uid: s.name for s in sessions.items if s.uid}
        value = store.session_id if store.session_id in options else None
        session_select.set_options(options, value=value)

    async def on_username() -> None:
        username = (user_input.value or "").strip() or None
        if username == store.username:
            return
        await select_user(gateway, store, username)
        admin_badge.set_visibility(store.admin)
        await reload_sessions()

    async def on_session(e) -> None:
        store.session_id = e.value
        refresh_messages()
        await controller.wait_idle()
        if controller.error is not None:
            ui.notify(describe(controller.error), type="negative")

    async def new_chat() -> None:
        session = await controller.new_chat(f"chat-{uuid.uuid4().hex[:8]}")
        if session is None:
            ui.notify(describe(controller.error), type="negative")
            return
        await reload_sessions()
        session_select.set_value(session.uid)

    async def send_message() -> None:
        text = (input_field.value or "").strip()
        if not text:
            return
        input_field.value = ""
        await controller.send(text)
        if controller.error is not None:
            ui.notify(describe(controller.error), type="negative")

    messages.subscribe(refresh_messages)

    with ui.column().classes("w-full max-w-3xl mx-auto bg-white rounded-xl shadow"):
        with ui.row().classes("w-full header px-5 py-4 items-center gap-3"):
            ui.label("RAG Chat").classes("text-lg font-semibold text-white")
            user_input = (
                ui.input("User")
                .props("dense dark")
                .classes("w-32")
                .on("keydown.enter", on_username)
                .on("blur", on_username)
            )
            admin_badge = ui.badge("admin", color="amber")
            admin_badge.set_visibility(False)
            session_select = ui.select({}, label="Session", on_change=on_session).props(
                "dense dark"
            ).classes("w-48")
            ui.button(icon="add", on_click=new_chat).props("flat round color=white")

        with ui.scroll_area().classes("w-full h-[60vh] bg-gray-50"):
            messages_container = ui.column().classes("w-full gap-4 p-5")
            refresh_messages()

        with ui.row().classes("w-full p-4 gap-3 items-center"):
            input_field = (
                ui.input(placeholder="Type a message...")
                .classes("flex-grow")
                .on("keydown.enter", send_message)
            )
            ui.button(icon="send", on_click=send_message).props("round unelevated")


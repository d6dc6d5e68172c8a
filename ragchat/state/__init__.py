"""Client-side state shared between the gateway and the view.

Contains no rendering. The view reads the message list and writes the
session id; everything else happens here.
"""

from ragchat.state.loaders import (
    ResourceLoader,
    projects_loader,
    select_user,
    sessions_loader,
    users_loader,
)
from ragchat.state.messages import MessageList
from ragchat.state.store import IdentityStore
from ragchat.state.sync import SessionSyncController, SyncState

__all__ = [
    "IdentityStore",
    "MessageList",
    "ResourceLoader",
    "SessionSyncController",
    "SyncState",
    "projects_loader",
    "select_user",
    "sessions_loader",
    "users_loader",
]

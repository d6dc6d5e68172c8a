"""Pydantic models for controller API resources.

Provides validation of server payloads and serialization of request bodies.
"""

from ragchat.models.schemas import (
    ChatHistory,
    DataSource,
    IngestRequest,
    Project,
    Query,
    Session,
    User,
    WorkflowResponse,
)

__all__ = [
    "ChatHistory",
    "DataSource",
    "IngestRequest",
    "Project",
    "Query",
    "Session",
    "User",
    "WorkflowResponse",
]

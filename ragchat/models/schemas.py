"""Pydantic models for the controller API resources.

Provides validation of server payloads and serialization of request bodies.

Models:
    - ChatHistory: One turn in a conversation
    - Session: A conversation thread owned by a user
    - User: Registered user profile
    - Project: Top-level grouping of data sources and workflows
    - DataSource: Document collection attached to a project
    - Query: Workflow request payload
    - WorkflowResponse: Answer returned by a workflow
    - IngestRequest: Document ingestion payload
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Resource(BaseModel):
    """Base for server resources; unknown fields are kept as-is."""

    model_config = ConfigDict(extra="allow")


class ChatHistory(BaseModel):
    """A single turn in a conversation.

    Attributes:
        role: Speaker of the turn, "user" or "bot".
        content: The message text.
        sources: References supporting a bot answer.
        html: Pre-rendered markup for the turn, if the server supplies it.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    role: Literal["user", "bot"] = Field(..., description="Message role: 'user' or 'bot'")
    content: str = Field(..., description="The message content")
    sources: list[dict[str, Any]] | None = None
    html: str | None = None


class Session(Resource):
    """A conversation thread.

    Attributes:
        uid: Server-assigned identifier (the session id).
        name: Session name, used as the update key.
        username: Owner of the session.
        description: Free-form description.
        history: Turns in conversation order.
    """

    uid: str | None = None
    name: str
    username: str | None = None
    description: str | None = None
    history: list[ChatHistory] = Field(default_factory=list)


class User(Resource):
    """A registered user. Extra profile fields are preserved."""

    name: str
    email: str | None = None
    full_name: str | None = None
    is_admin: bool = False


class Project(Resource):
    name: str
    uid: str | None = None
    description: str | None = None
    owner_name: str | None = None
    version: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)


class DataSource(Resource):
    name: str
    uid: str | None = None
    project_id: str | None = None
    data_source_type: str | None = None
    description: str | None = None
    version: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)


class Query(BaseModel):
    """Request payload for workflow evaluation and inference.

    Attributes:
        question: The user's question.
        session_name: Session the turn belongs to.
        data_source: Optional data source to restrict retrieval to.
    """

    question: str = Field(..., min_length=1)
    session_name: str | None = None
    data_source: str | None = None

    @field_validator("question", mode="before")
    @classmethod
    def strip_question(cls, v: str) -> str:
        """Strip whitespace from question before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class WorkflowResponse(Resource):
    answer: str = ""
    sources: list[dict[str, Any]] | None = None
    returned_state: dict[str, Any] | None = None


class IngestRequest(BaseModel):
    """Payload for ingesting a document into a data source.

    Attributes:
        loader: Loader class name used server-side to read the document.
        path: Location of the document.
        metadata: Extra metadata stored with the document.
        version: Data source version to ingest into.
        from_file: Whether ``path`` points to a file listing several documents.
    """

    loader: str
    path: str
    metadata: dict[str, Any] | None = None
    version: str | None = None
    from_file: bool = False

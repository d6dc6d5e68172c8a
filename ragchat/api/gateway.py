"""Async REST gateway for the controller API.

Every operation performs exactly one HTTP request and settles to a
discriminated result (see ``ragchat.api.results``). Nothing raises to the
caller: HTTP errors, transport failures and malformed bodies are logged and
returned as failures.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from ragchat.api.config import GatewayConfig, get_gateway_config
from ragchat.api.results import Failure, NotFound, Ok, ServerError, TransportError
from ragchat.models.schemas import (
    DataSource,
    IngestRequest,
    Project,
    Query,
    Session,
    User,
    WorkflowResponse,
)

logger = logging.getLogger(__name__)

_adapters: dict[Any, TypeAdapter] = {}


def _adapter(model: Any) -> TypeAdapter:
    if model not in _adapters:
        _adapters[model] = TypeAdapter(model)
    return _adapters[model]


def _error_detail(response: httpx.Response) -> str:
    """Extract the server-reported error message from a response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or "Unknown error"
    if isinstance(body, dict):
        detail = body.get("error") or body.get("detail")
        if detail:
            return str(detail)
    return "Unknown error"


def _q(segment: Any) -> str:
    """Percent-encode one path segment, including any slash."""
    return quote(str(segment), safe="")


def _params(**filters: Any) -> dict[str, Any]:
    return {key: value for key, value in filters.items() if value is not None}


class ApiGateway:
    """Client for the users, sessions, projects, data sources and workflows API.

    Usable as an async context manager. Pass ``transport`` to route requests
    somewhere other than the network (tests use ASGI and mock transports).
    """

    def __init__(
        self,
        config: GatewayConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or get_gateway_config()
        self._client = httpx.AsyncClient(
            base_url=self._config.api_url,
            headers={"Content-Type": "application/json"},
            timeout=self._config.timeout,
            transport=transport,
        )

    @property
    def config(self) -> GatewayConfig:
        return self._config

    async def __aenter__(self) -> "ApiGateway":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        result_type: Any = Any,
        body: BaseModel | None = None,
        params: dict[str, Any] | None = None,
    ) -> Ok[Any] | Failure:
        """Send one request and normalize the outcome.

        Args:
            method: HTTP method.
            path: Route relative to the API prefix.
            result_type: Type the response payload is validated against.
            body: Optional request body.
            params: Optional query parameters.

        Returns:
            Ok with the parsed payload, or the matching failure.
        """
        payload = body.model_dump(mode="json", exclude_none=True) if body is not None else None
        try:
            response = await self._client.request(method, path, json=payload, params=params)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Request failed: {method} {path}: {e!r}")
            return TransportError(detail=str(e) or e.__class__.__name__)

        if response.status_code == 404:
            detail = _error_detail(response)
            logger.warning(f"Not found: {method} {path}: {detail}")
            return NotFound(detail=detail)
        if not response.is_success:
            detail = _error_detail(response)
            logger.error(f"Error: {method} {path} -> {response.status_code}: {detail}")
            return ServerError(status_code=response.status_code, detail=detail)

        if not response.content:
            return Ok(None)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Malformed response body: {method} {path}: {e}")
            return TransportError(detail=f"Malformed response body: {e}")

        # Controller API envelope: {"success": bool, "data": ..., "error": ...}
        if isinstance(data, dict) and "success" in data and "data" in data:
            if not data["success"]:
                detail = str(data.get("error") or "Unknown error")
                logger.error(f"Error: {method} {path} -> {response.status_code}: {detail}")
                return ServerError(status_code=response.status_code, detail=detail)
            data = data["data"]

        try:
            value = _adapter(result_type).validate_python(data)
        except ValidationError as e:
            logger.error(f"Unexpected response shape: {method} {path}: {e}")
            return TransportError(detail=f"Unexpected response shape: {e.error_count()} error(s)")

        logger.debug(f"{method} {path} -> {response.status_code}")
        return Ok(value)

    # Users

    async def list_users(self) -> Ok[list[User]] | Failure:
        return await self._request("GET", "/users", list[User])

    async def get_user(self, name: str) -> Ok[User] | Failure:
        return await self._request("GET", f"/users/{_q(name)}", User)

    async def create_user(self, user: User) -> Ok[User] | Failure:
        return await self._request("POST", "/users", User, body=user)

    async def update_user(self, user: User) -> Ok[User] | Failure:
        return await self._request("PUT", f"/users/{_q(user.name)}", User, body=user)

    async def delete_user(self, name: str) -> Ok[Any] | Failure:
        return await self._request("DELETE", f"/users/{_q(name)}")

    # Sessions

    async def list_sessions(self, username: str) -> Ok[list[Session]] | Failure:
        return await self._request("GET", f"/users/{_q(username)}/sessions", list[Session])

    async def get_session(self, username: str, session_id: str) -> Ok[Session] | Failure:
        path = f"/users/{_q(username)}/sessions/{_q(session_id)}"
        return await self._request("GET", path, Session)

    async def create_session(self, username: str, session: Session) -> Ok[Session] | Failure:
        return await self._request("POST", f"/users/{_q(username)}/sessions", Session, body=session)

    async def update_session(self, username: str, session: Session) -> Ok[Session] | Failure:
        return await self._request(
            "PUT", f"/users/{_q(username)}/sessions/{_q(session.name)}", Session, body=session
        )

    async def delete_session(self, username: str, session: Session) -> Ok[Any] | Failure:
        return await self._request("DELETE", f"/users/{_q(username)}/sessions/{_q(session.uid)}")

    # Projects

    async def list_projects(
        self,
        name: str | None = None,
        owner_name: str | None = None,
        mode: str | None = None,
        labels: list[str] | None = None,
    ) -> Ok[list[Project]] | Failure:
        params = _params(name=name, owner_name=owner_name, mode=mode, labels=labels)
        return await self._request("GET", "/projects", list[Project], params=params)

    async def get_project(self, name: str) -> Ok[Project] | Failure:
        return await self._request("GET", f"/projects/{_q(name)}", Project)

    async def create_project(self, project: Project) -> Ok[Project] | Failure:
        return await self._request("POST", "/projects", Project, body=project)

    async def update_project(self, project: Project) -> Ok[Project] | Failure:
        return await self._request("PUT", f"/projects/{_q(project.name)}", Project, body=project)

    async def delete_project(self, name: str) -> Ok[Any] | Failure:
        return await self._request("DELETE", f"/projects/{_q(name)}")

    # Data sources

    async def list_data_sources(
        self,
        project: str,
        name: str | None = None,
        version: str | None = None,
        data_source_type: str | None = None,
        labels: list[str] | None = None,
        mode: str | None = None,
    ) -> Ok[list[DataSource]] | Failure:
        params = _params(
            name=name,
            version=version,
            data_source_type=data_source_type,
            labels=labels,
            mode=mode,
        )
        return await self._request(
            "GET", f"/projects/{_q(project)}/data_sources", list[DataSource], params=params
        )

    async def get_data_source(self, project: str, uid: str) -> Ok[DataSource] | Failure:
        path = f"/projects/{_q(project)}/data_sources/{_q(uid)}"
        return await self._request("GET", path, DataSource)

    async def create_data_source(
        self, project: str, data_source: DataSource
    ) -> Ok[DataSource] | Failure:
        return await self._request(
            "POST", f"/projects/{_q(project)}/data_sources", DataSource, body=data_source
        )

    async def update_data_source(
        self, project: str, data_source: DataSource
    ) -> Ok[DataSource] | Failure:
        return await self._request(
            "PUT",
            f"/projects/{_q(project)}/data_sources/{_q(data_source.name)}",
            DataSource,
            body=data_source,
        )

    async def delete_data_source(self, project: str, uid: str) -> Ok[Any] | Failure:
        return await self._request("DELETE", f"/projects/{_q(project)}/data_sources/{_q(uid)}")

    async def ingest_document(
        self, project: str, uid: str, request: IngestRequest
    ) -> Ok[Any] | Failure:
        return await self._request(
            "POST", f"/projects/{_q(project)}/data_sources/{_q(uid)}/ingest", body=request
        )

    # Workflows

    async def run_workflow(
        self, project: str, workflow: str, query: Query
    ) -> Ok[WorkflowResponse] | Failure:
        """Evaluate a workflow for a query."""
        path = f"/projects/{_q(project)}/workflows/{_q(workflow)}"
        return await self._request("POST", path, WorkflowResponse, body=query)

    async def infer_workflow(
        self, project: str, workflow: str, query: Query
    ) -> Ok[WorkflowResponse] | Failure:
        """Run a workflow in inference mode, as used for chat turns."""
        path = f"/projects/{_q(project)}/workflows/{_q(workflow)}/infer"
        return await self._request("POST", path, WorkflowResponse, body=query)

"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - backend: In-memory FastAPI stand-in for the controller API
    - gateway_config: Gateway configuration pointing at the stand-in
    - gateway: ApiGateway wired to the stand-in through ASGITransport
    - mock_session_id: Consistent session ID for tests
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
from fastapi import Body, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from httpx import ASGITransport

from ragchat.api.config import GatewayConfig
from ragchat.api.gateway import ApiGateway


def ok(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data, "error": None}


def create_fake_backend() -> FastAPI:
    """Build a controller API stand-in backed by plain dicts.

    Responses use the {"success", "data", "error"} envelope. Missing resources
    raise 404 with a FastAPI ``detail``. The project named "broken" answers
    500 with an ``error`` message. Every request is recorded in
    ``app.state.requests`` as (method, path, query items, content type).
    """
    app = FastAPI()
    users: dict[str, dict] = {}
    sessions: dict[str, dict] = {}
    projects: dict[str, dict] = {}
    data_sources: dict[tuple[str, str], dict] = {}
    app.state.users = users
    app.state.sessions = sessions
    app.state.projects = projects
    app.state.data_sources = data_sources
    app.state.requests = []

    @app.middleware("http")
    async def record_request(request: Request, call_next):
        app.state.requests.append(
            (
                request.method,
                request.url.path,
                list(request.query_params.multi_items()),
                request.headers.get("content-type"),
            )
        )
        return await call_next(request)

    # Users

    @app.get("/api/users")
    async def list_users():
        return ok(list(users.values()))

    @app.get("/api/users/{name}")
    async def get_user(name: str):
        if name not in users:
            raise HTTPException(status_code=404, detail=f"User {name} not found")
        return ok(users[name])

    @app.post("/api/users")
    async def create_user(user: dict = Body(...)):
        if user["name"] in users:
            raise HTTPException(status_code=409, detail=f"User {user['name']} already exists")
        users[user["name"]] = user
        return ok(user)

    @app.put("/api/users/{name}")
    async def update_user(name: str, user: dict = Body(...)):
        if name not in users:
            raise HTTPException(status_code=404, detail=f"User {name} not found")
        users[name] = {**users[name], **user}
        return ok(users[name])

    @app.delete("/api/users/{name}")
    async def delete_user(name: str):
        if users.pop(name, None) is None:
            raise HTTPException(status_code=404, detail=f"User {name} not found")
        return Response(status_code=204)

    # Sessions

    @app.get("/api/users/{username}/sessions")
    async def list_sessions(username: str):
        return ok([s for s in sessions.values() if s["username"] == username])

    @app.get("/api/users/{username}/sessions/{uid}")
    async def get_session(username: str, uid: str):
        session = sessions.get(uid)
        if session is None or session["username"] != username:
            raise HTTPException(status_code=404, detail=f"Session {uid} not found")
        return ok(session)

    @app.post("/api/users/{username}/sessions")
    async def create_session(username: str, session: dict = Body(...)):
        uid = session.get("uid") or f"s{len(sessions) + 1}"
        sessions[uid] = {"history": [], **session, "uid": uid, "username": username}
        return ok(sessions[uid])

    @app.put("/api/users/{username}/sessions/{name}")
    async def update_session(username: str, name: str, session: dict = Body(...)):
        for uid, stored in sessions.items():
            if stored["username"] == username and stored["name"] == name:
                sessions[uid] = {**stored, **session, "uid": uid, "username": username}
                return ok(sessions[uid])
        raise HTTPException(status_code=404, detail=f"Session {name} not found")

    @app.delete("/api/users/{username}/sessions/{uid}")
    async def delete_session(username: str, uid: str):
        if sessions.pop(uid, None) is None:
            raise HTTPException(status_code=404, detail=f"Session {uid} not found")
        return ok(None)

    # Projects

    @app.get("/api/projects")
    async def list_projects(name: str | None = None):
        return ok([p for p in projects.values() if name is None or p["name"] == name])

    @app.get("/api/projects/{name}")
    async def get_project(name: str):
        if name == "broken":
            return JSONResponse(
                status_code=500,
                content={"success": False, "data": None, "error": "database unavailable"},
            )
        if name not in projects:
            raise HTTPException(status_code=404, detail=f"Project {name} not found")
        return ok(projects[name])

    @app.post("/api/projects")
    async def create_project(project: dict = Body(...)):
        projects[project["name"]] = {"uid": f"p{len(projects) + 1}", **project}
        return ok(projects[project["name"]])

    @app.put("/api/projects/{name}")
    async def update_project(name: str, project: dict = Body(...)):
        if name not in projects:
            raise HTTPException(status_code=404, detail=f"Project {name} not found")
        projects[name] = {**projects[name], **project}
        return ok(projects[name])

    @app.delete("/api/projects/{name}")
    async def delete_project(name: str):
        if projects.pop(name, None) is None:
            raise HTTPException(status_code=404, detail=f"Project {name} not found")
        return ok(None)

    # Data sources

    @app.get("/api/projects/{project}/data_sources")
    async def list_data_sources(project: str):
        return ok([ds for (p, _), ds in data_sources.items() if p == project])

    @app.get("/api/projects/{project}/data_sources/{uid}")
    async def get_data_source(project: str, uid: str):
        if (project, uid) not in data_sources:
            raise HTTPException(status_code=404, detail=f"Data source {uid} not found")
        return ok(data_sources[(project, uid)])

    @app.post("/api/projects/{project}/data_sources")
    async def create_data_source(project: str, data_source: dict = Body(...)):
        uid = f"ds{len(data_sources) + 1}"
        data_sources[(project, uid)] = {**data_source, "uid": uid, "project_id": project}
        return ok(data_sources[(project, uid)])

    @app.put("/api/projects/{project}/data_sources/{name}")
    async def update_data_source(project: str, name: str, data_source: dict = Body(...)):
        for key, stored in data_sources.items():
            if key[0] == project and stored["name"] == name:
                data_sources[key] = {**stored, **data_source}
                return ok(data_sources[key])
        raise HTTPException(status_code=404, detail=f"Data source {name} not found")

    @app.delete("/api/projects/{project}/data_sources/{uid}")
    async def delete_data_source(project: str, uid: str):
        if data_sources.pop((project, uid), None) is None:
            raise HTTPException(status_code=404, detail=f"Data source {uid} not found")
        return ok(None)

    @app.post("/api/projects/{project}/data_sources/{uid}/ingest")
    async def ingest_document(project: str, uid: str, request: dict = Body(...)):
        if (project, uid) not in data_sources:
            raise HTTPException(status_code=404, detail=f"Data source {uid} not found")
        return ok({"status": "ingested", "path": request["path"], "loader": request["loader"]})

    # Workflows

    @app.post("/api/projects/{project}/workflows/{workflow}")
    async def run_workflow(project: str, workflow: str, query: dict = Body(...)):
        return ok({"answer": f"{workflow}: {query['question']}", "returned_state": {}})

    @app.post("/api/projects/{project}/workflows/{workflow}/infer")
    async def infer_workflow(project: str, workflow: str, query: dict = Body(...)):
        session = sessions.get(query.get("session_name") or "")
        answer = f"Answer to {query['question']}"
        if session is not None:
            session["history"].append({"role": "user", "content": query["question"]})
            session["history"].append({"role": "bot", "content": answer})
        return ok({"answer": answer, "sources": [{"source": "handbook.pdf", "page": 3}]})

    return app


@pytest.fixture
def backend() -> FastAPI:
    """Return a fresh controller API stand-in."""
    return create_fake_backend()


@pytest.fixture
def gateway_config() -> GatewayConfig:
    """Return configuration pointing at the ASGI test host."""
    return GatewayConfig(
        base_url="http://test",
        timeout=5.0,
        project_name="demo",
        workflow_name="chat",
    )


@pytest.fixture
async def gateway(backend: FastAPI, gateway_config: GatewayConfig) -> AsyncGenerator[ApiGateway]:
    """Create a gateway talking to the stand-in backend.

    Yields:
        ApiGateway routed through ASGITransport.
    """
    async with ApiGateway(gateway_config, transport=ASGITransport(app=backend)) as gw:
        yield gw


@pytest.fixture
def mock_session_id() -> str:
    """Generate consistent session ID for testing.

    Returns:
        Predictable session ID for test assertions.
    """
    return "test-session-12345"

"""ragchat - chat client for a retrieval/workflow controller API.

Selects or resumes a conversation session, renders its history, and sends
chat turns through a REST gateway.

Components:
    - api: Async REST gateway, results and configuration
    - state: Identity store, message list, session sync controller, loaders
    - models: Request/response schemas
    - ui: Web interface for chat interactions
"""

__version__ = "0.1.0"

"""REST gateway for the controller API.

Translates logical operations on users, sessions, projects, data sources and
workflows into HTTP calls, and every outcome into a discriminated result.
"""

from ragchat.api.config import GatewayConfig, get_gateway_config
from ragchat.api.gateway import ApiGateway
from ragchat.api.results import Failure, NotFound, Ok, ServerError, TransportError

__all__ = [
    "ApiGateway",
    "Failure",
    "GatewayConfig",
    "NotFound",
    "Ok",
    "ServerError",
    "TransportError",
    "get_gateway_config",
]

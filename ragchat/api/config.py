"""Gateway configuration with environment variable loading.

Pydantic-based configuration for the controller API client.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file
load_dotenv()


class GatewayConfig(BaseModel):
    """Configuration for the API gateway.

    Attributes:
        base_url: Server origin, without the API prefix.
        api_prefix: Path all resource routes live under.
        timeout: Per-request timeout in seconds.
        project_name: Project whose workflow answers chat turns.
        workflow_name: Workflow used for chat inference.
    """

    model_config = ConfigDict(validate_default=True)

    base_url: str = Field(
        default_factory=lambda: os.getenv("API_BASE_URL", "http://localhost:8000"),
        description="Controller API origin",
    )
    api_prefix: str = Field(default="/api", description="Base path of the REST API")
    timeout: float = Field(
        default_factory=lambda: float(os.getenv("API_TIMEOUT", "30")),
        gt=0.0,
        le=600.0,
        description="Request timeout in seconds",
    )
    project_name: str = Field(
        default_factory=lambda: os.getenv("CHAT_PROJECT", "default"),
        description="Project used for chat workflows",
    )
    workflow_name: str = Field(
        default_factory=lambda: os.getenv("CHAT_WORKFLOW", "default"),
        description="Workflow used for chat inference",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) origin and drop any trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("API_BASE_URL must start with http:// or https://")
        return v.rstrip("/")

    @property
    def api_url(self) -> str:
        """Full base URL for resource routes."""
        return f"{self.base_url}{self.api_prefix}"


def get_gateway_config() -> GatewayConfig:
    """Create gateway configuration from environment.

    Returns:
        Configured GatewayConfig instance.

    Raises:
        ValueError: If API_BASE_URL is not an http(s) URL.
    """
    return GatewayConfig()

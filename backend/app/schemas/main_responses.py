"""
Response models for the unversioned probe endpoints.
"""

from pydantic import ConfigDict, Field

from ._strict_base import StrictModel


class HealthResponse(StrictModel):
    """Liveness payload for ``GET /health``."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    status: str = Field(description="Always OK while the process serves requests")
    timestamp: str = Field(description="UTC ISO8601Z timestamp of the health response")
    version: str = Field(description="API version")
    environment: str = Field(description="development, test or production")

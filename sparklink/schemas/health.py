"""
Health check endpoint schemas.

The health endpoints are PUBLIC (no authentication required).
"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """
    Response model for GET /health endpoint.

    Used by load balancers, monitoring systems, and deployment checks.
    """

    status: str = Field(
        default="ok",
        description="Health status of the API (always 'ok' if responding)",
        examples=["ok"]
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "ok"
            }
        }
    }


class DatabaseHealthResponse(BaseModel):
    """
    Response model for GET /health/db.

    Returned only when a trivial query through the service role client
    succeeds; failures respond 503.
    """

    status: str = Field(default="ok", examples=["ok"])
    database: str = Field(default="reachable", examples=["reachable"])


class RootResponse(BaseModel):
    message: str = Field(..., examples=["SparkLink API is running"])
    version: str = Field(..., examples=["1.0.0"])
    health: str = Field("/health", description="Path of the health endpoint")

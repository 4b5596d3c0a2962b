"""Error response body shared by every failing endpoint."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class ServiceInfo(BaseModel):
    """Which deployment of the service produced the error."""

    name: str = Field(..., examples=["Payvault"])
    version: str = Field(..., examples=["0.1.0"])
    environment: str = Field(..., examples=["development", "staging", "production"])


class ErrorResponse(BaseModel):
    """Standard error body.

    ``details`` carries the sanitized error context, for example the
    ``applied_goal_ids`` of a failed allocation. ``debug_info`` is only
    filled in outside production.
    """

    error_code: str = Field(
        ...,
        description="Machine-readable error code",
        examples=["VALIDATION_ERROR", "NOT_FOUND", "PERSISTENCE_ERROR"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Tax percentage must be between 0 and 100", "No tax vault found"],
    )
    details: dict[str, Any] | None = Field(default=None)
    correlation_id: str | None = Field(default=None)
    request_id: str | None = Field(
        default=None, examples=["req-550e8400-e29b-41d4-a716-446655440000"]
    )
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    severity: str | None = Field(default=None, examples=["LOW", "HIGH"])
    service_info: ServiceInfo | None = Field(default=None)
    debug_info: dict[str, Any] | None = Field(default=None)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error_code": "NOT_FOUND",
                    "message": "No tax vault found",
                    "details": {"user_id": 42},
                    "correlation_id": "550e8400-e29b-41d4-a716-446655440000",
                    "request_id": "req-660e8400-e29b-41d4-a716-446655440000",
                    "timestamp": "2026-01-14T12:00:00+00:00",
                    "severity": "LOW",
                    "service_info": {
                        "name": "Payvault",
                        "version": "0.1.0",
                        "environment": "production",
                    },
                },
                {
                    "error_code": "PERSISTENCE_ERROR",
                    "message": "Failed to apply allocation to goal 7",
                    "details": {"failed_goal_id": 7, "applied_goal_ids": [3, 5]},
                    "timestamp": "2026-01-14T12:00:01+00:00",
                    "severity": "HIGH",
                },
            ]
        }
    }

"""
BugLab Backend — Shared Response Schemas
=========================================

What:  Error body, plain message body and health check body.
"""

from typing import Optional

from pydantic import BaseModel, Field

# Largest value an INTEGER primary key column holds; ids outside 1..MAX_ID
# are rejected at the HTTP boundary
MAX_ID = 2_147_483_647


class ErrorResponse(BaseModel):
    """
    Error body returned by every exception handler.

    Example:
        {"error": "Scientist with ID '7' was not found"}
        {"error": "A database error occurred. Please try again later.",
         "details": "(sqlite3.OperationalError) database is locked"}

    `details` is omitted in production.
    """
    error: str = Field(description="Human-readable error description")
    details: Optional[str] = Field(default=None, description="Extra detail (non-production only)")


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")

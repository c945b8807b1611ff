"""Core schemas for API responses."""

from pr_assistant.core.schemas.responses import ApiResponse, ErrorResponse, HealthResponse

__all__ = ["ApiResponse", "ErrorResponse", "HealthResponse"]

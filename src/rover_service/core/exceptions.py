"""Custom exceptions."""
from __future__ import annotations

from aiohttp import web


class RoverServiceError(Exception):
    """Base service error."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidRequestError(RoverServiceError):
    """Request is missing a required field or carries an invalid value."""

    status_code = 400
    message = "Invalid request"


class NotFoundError(RoverServiceError):
    """Resource not found."""

    status_code = 404
    message = "Resource not found"


class CheckpointNotFoundError(NotFoundError):
    """No checkpoint recorded for the rover."""

    message = "No operation state recorded for this rover"


class ConflictError(RoverServiceError):
    """Operation is not allowed in the current configuration."""

    status_code = 409
    message = "Conflict"


class UpstreamDependencyError(RoverServiceError):
    """A backing store or service could not complete the call."""

    status_code = 503
    message = "Upstream dependency failed"


class RepositoryError(UpstreamDependencyError):
    """Raised when relational store operations fail."""

    message = "Database operation failed"


class StateStoreError(UpstreamDependencyError):
    """Raised when cache operations fail."""

    message = "State store operation failed"


class AnalysisTransportError(UpstreamDependencyError):
    """The analysis service could not be reached."""

    message = "Image analysis service unreachable"


class ExternalServiceError(RoverServiceError):
    """An external service answered with a failure status."""

    status_code = 502
    message = "External service error"


class AnalysisRejectedError(ExternalServiceError):
    """The analysis service answered with a non-2xx status."""

    message = "Image analysis service rejected the request"

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"Status: {status}, Body: {body}")
        self.status = status
        self.body = body


class SerializationError(RoverServiceError):
    """A payload could not be encoded or decoded."""

    status_code = 422
    message = "Serialization failed"


class AnalysisResponseError(SerializationError):
    """The analysis service returned a body that does not parse."""

    status_code = 502
    message = "Malformed image analysis response"


class CheckpointDecodeError(SerializationError):
    """A stored checkpoint could not be parsed."""

    status_code = 500
    message = "Stored operation state is malformed"


def handle_service_error(request: web.Request, error: RoverServiceError) -> web.Response:
    """Render a service error as a JSON response."""
    return web.json_response(
        {"error": error.message},
        status=error.status_code,
    )

"""API error types rendered into the ``{success: false, error}`` envelope."""

from __future__ import annotations


class ApiError(Exception):
    """Base class for errors that map to a client-visible HTTP status."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(ApiError):
    """Missing or malformed request fields."""

    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class UpstreamServiceError(ApiError):
    """An external service failed and no fallback exists (speech, PDF)."""

    status_code = 500


class TopicNotFoundError(NotFoundError):
    def __init__(self, topic_id: str) -> None:
        super().__init__("Topic not found")
        self.topic_id = topic_id

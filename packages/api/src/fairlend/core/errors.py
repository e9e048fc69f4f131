"""Typed failures raised by the decision and appeal services.

Each error carries a stable ``kind`` (reported to clients next to the RFC 7807
body) and the HTTP status the API layer maps it to. PersistenceError lives in
the db package and is mapped separately in ``fairlend.main``.
"""

from fastapi import status


class WorkflowError(Exception):
    """Base class for failures surfaced to callers as structured errors."""

    kind: str = "WorkflowError"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class ConfigurationError(WorkflowError):
    """A required credential, endpoint or model setting is missing."""

    kind = "ConfigurationError"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class UpstreamError(WorkflowError):
    """The AI completion endpoint returned an error."""

    kind = "UpstreamGenericFailure"
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, detail: str, upstream_status: int | None = None) -> None:
        self.upstream_status = upstream_status
        super().__init__(detail)


class UpstreamRateLimited(UpstreamError):
    kind = "UpstreamRateLimited"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS


class UpstreamPaymentRequired(UpstreamError):
    kind = "UpstreamPaymentRequired"
    status_code = status.HTTP_402_PAYMENT_REQUIRED


class UpstreamGenericFailure(UpstreamError):
    pass


class PreconditionViolation(WorkflowError):
    """The requested transition is not allowed from the current state."""

    kind = "PreconditionViolation"
    status_code = status.HTTP_409_CONFLICT


class ValidationError(WorkflowError):
    """Input failed validation before any external call was made."""

    kind = "ValidationError"
    status_code = 422


class NotFoundError(WorkflowError):
    kind = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND

"""Service error taxonomy shared by every admin operation.

Each error carries a machine-readable ``code`` and the HTTP status the API
layer answers with.  Services raise these; the ``service_boundary``
decorator turns them into ``ServiceResult`` failures so nothing escapes the
service boundary as a raw exception.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


class ServiceError(Exception):
    """Base class for failures reported by the service layer."""

    code = "service_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(ServiceError):
    """No credential was supplied or it does not resolve to an identity."""

    code = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "No authorization header"


class Forbidden(ServiceError):
    """The identity resolved but lacks the admin role."""

    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Admin access required"


class InvalidRequest(ServiceError):
    """Required request fields are missing or malformed."""

    code = "invalid_request"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class UpstreamFailure(ServiceError):
    """The order store, identity provider or change feed is unreachable."""

    code = "upstream_failure"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Optional[Response]:
    """DRF exception handler rendering every error as ``{"error": "..."}``.

    Framework-level failures (malformed JSON, throttling, unsupported
    methods) share the body shape of the service errors.
    """
    if isinstance(exc, ServiceError):
        return Response({"error": exc.message}, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    detail = response.data.get("detail") if isinstance(response.data, dict) else None
    message = str(detail) if detail is not None else "Invalid request"
    logger.info(
        "api.framework_error",
        status_code=response.status_code,
        error=message,
    )
    response.data = {"error": message}
    return response

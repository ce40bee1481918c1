import re
import time
import uuid
from contextvars import ContextVar
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

# Caller-supplied ids end up in every log line; keep them short and printable.
_ACCEPTABLE_ID = re.compile(r"[A-Za-z0-9._:\-]{1,128}")

logger = structlog.get_logger()


def resolve_correlation_id(header_value: str | None) -> str:
    if header_value and _ACCEPTABLE_ID.fullmatch(header_value):
        return header_value
    return str(uuid.uuid4())


class CorrelationIdMiddleware:
    """Tags every request with a correlation ID and logs its lifecycle.

    Uses the X-Request-ID header when it is a plausible id, otherwise a new
    UUID4. The ID is bound to structlog contextvars (so every log line of
    the request carries it, including the admin id bound later by the
    authorization gate) and echoed back in the X-Request-ID response header.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = resolve_correlation_id(request.META.get("HTTP_X_REQUEST_ID"))
        correlation_id_var.set(cid)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        log = logger.bind(method=request.method, path=request.path)
        log.info("request_started")
        started = time.monotonic()

        try:
            response = self.get_response(request)
        except Exception:
            log.exception(
                "request_failed",
                duration_ms=round((time.monotonic() - started) * 1000, 2),
            )
            raise

        log.info(
            "request_finished",
            status_code=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )

        response["X-Request-ID"] = cid
        return response

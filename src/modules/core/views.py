import time
from typing import Any, Dict, Optional

import structlog
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.authorization import (
    AdminGate,
    AdminPrincipal,
    extract_bearer_credential,
)
from modules.core.exceptions import ServiceError
from modules.core.results import service_boundary

logger = structlog.get_logger()


def health_check(request: HttpRequest) -> JsonResponse:
    from modules.orders.feed import change_feed

    services: Dict[str, Dict[str, Any]] = {}
    overall_healthy = True

    # Check database (order store)
    try:
        start = time.monotonic()
        conn = connections["default"]
        conn.ensure_connection()
        with conn.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        services["database"] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }
    except Exception:
        services["database"] = {"status": "down"}
        overall_healthy = False
        logger.error("health_check_db_failure")

    # Check cache (Redis)
    try:
        start = time.monotonic()
        cache.set("_health_check", "ok", 10)
        result = cache.get("_health_check")
        if result != "ok":
            raise ConnectionError("Cache read failed")
        services["cache"] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }
    except Exception:
        services["cache"] = {"status": "down"}
        overall_healthy = False
        logger.error("health_check_cache_failure")

    # The change feed degrading is not fatal: the console falls back to
    # manual refresh, so it is reported without failing the check.
    services["order_feed"] = change_feed.health()

    status_code = 200 if overall_healthy else 503

    logger.info(
        "health_check_completed", status="healthy" if overall_healthy else "unhealthy"
    )

    return JsonResponse(
        {
            "status": "healthy" if overall_healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=status_code,
    )


class AdminAPIView(APIView):
    """Base class for admin console endpoints.

    DRF authentication is disabled here on purpose: the bearer credential is
    handed to the service layer, where ``AdminGate`` authorizes it before
    any order data is read or written.
    """

    authentication_classes: list = []
    permission_classes = [AllowAny]

    @staticmethod
    def get_credential(request: Request) -> Optional[str]:
        return extract_bearer_credential(request.headers.get("Authorization"))

    @staticmethod
    def error_response(error: ServiceError) -> Response:
        return Response({"error": error.message}, status=error.status_code)


class AdminSessionView(AdminAPIView):
    """Reports whether the caller's session belongs to an admin.

    * No token      -> 401
    * Bad token     -> 401
    * Non-admin JWT -> 403
    * Admin JWT     -> 200
    """

    throttle_scope = "admin_read"

    def get(self, request: Request) -> Response:
        result = self._authorize(self.get_credential(request))
        if not result.ok:
            return self.error_response(result.error)
        principal: AdminPrincipal = result.value
        return Response(
            {
                "userId": principal.user_id,
                "isAdmin": principal.is_admin,
                "email": principal.email,
            }
        )

    @service_boundary("admin_session")
    def _authorize(self, credential: Optional[str]) -> AdminPrincipal:
        return AdminGate().authorize(credential)

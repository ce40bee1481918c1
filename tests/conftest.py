from __future__ import annotations

import time
import uuid
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

import jwt
import pytest
from django.conf import settings
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.customers.models import CustomerProfile
from modules.orders.models import Order


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_token() -> Callable[..., str]:
    """Build a signed access token the way the identity provider does."""

    def _make(
        sub: Optional[str] = None,
        user_role: Optional[str] = None,
        app_role: Optional[str] = None,
        expires_in: int = 3600,
        secret: Optional[str] = None,
        **extra: Any,
    ) -> str:
        now = int(time.time())
        claims: Dict[str, Any] = {
            "sub": sub or str(uuid.uuid4()),
            "aud": settings.AUTH_JWT_AUDIENCE,
            "iat": now,
            "exp": now + expires_in,
            "email": "staff@ironxpress.test",
            "user_metadata": {"role": user_role} if user_role else {},
            "app_metadata": {"role": app_role} if app_role else {},
        }
        claims.update(extra)
        return jwt.encode(
            claims, secret or settings.AUTH_JWT_SECRET, algorithm="HS256"
        )

    return _make


@pytest.fixture()
def admin_token(make_token) -> str:
    return make_token(sub="7b0e2c9e-2a43-4f6f-8f55-6d1d0f2b8a11", app_role="admin")


@pytest.fixture()
def customer_token(make_token) -> str:
    return make_token(user_role="customer")


@pytest.fixture()
def admin_client(api_client, admin_token):
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {admin_token}")
    return api_client


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------


@pytest.fixture()
def customer() -> CustomerProfile:
    return CustomerProfile.objects.create(
        full_name="Ananya Rao",
        email="ananya@example.com",
        phone="+91 98450 11111",
    )


@pytest.fixture()
def make_order(customer) -> Callable[..., Order]:
    def _make(**fields: Any) -> Order:
        data: Dict[str, Any] = {
            "user_id": customer.id,
            "total_amount": Decimal("500.00"),
            "order_status": "confirmed",
            "status": "",
            "items": [{"name": "Shirt ironing", "quantity": 4, "price": "25.00"}],
        }
        data.update(fields)
        return Order.objects.create(**data)

    return _make

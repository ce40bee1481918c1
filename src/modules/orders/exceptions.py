"""Order domain exceptions.

Raised by the Service Layer when order rules are violated.  They extend
``ServiceError`` so the service boundary reports them with the right code
and HTTP status.
"""

from __future__ import annotations

from rest_framework import status

from modules.core.exceptions import ServiceError


class OrderNotFound(ServiceError):
    """The requested order does not exist."""

    code = "order_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Order not found"


class IllegalTransition(ServiceError):
    """The requested status change is not allowed from the order's stage."""

    code = "illegal_transition"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Illegal status transition"

"""Typed success/error results returned by service operations."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

import structlog
from django.db import DatabaseError

from modules.core.exceptions import ServiceError, UpstreamFailure

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """Outcome of a service call: either ``value`` or ``error`` is set."""

    value: Optional[T] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> ServiceResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: ServiceError) -> ServiceResult[T]:
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value, re-raising the error for callers that prefer exceptions."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def service_boundary(operation: str) -> Callable[[Callable[..., T]], Callable[..., ServiceResult[T]]]:
    """Wrap a service method so it always returns a ``ServiceResult``.

    - ``ServiceError`` subclasses become failures as-is.
    - Database errors are logged and become ``UpstreamFailure`` with a
      fixed message.
    - Anything else is logged with its traceback and reported as
      ``UpstreamFailure`` without leaking internals to the caller.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., ServiceResult[T]]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> ServiceResult[T]:
            try:
                return ServiceResult.success(func(*args, **kwargs))
            except ServiceError as exc:
                logger.info(f"{operation}.rejected", code=exc.code, error=exc.message)
                return ServiceResult.failure(exc)
            except DatabaseError as exc:
                logger.error(f"{operation}.store_unavailable", error=str(exc))
                return ServiceResult.failure(UpstreamFailure("Order store unavailable"))
            except Exception:
                logger.exception(f"{operation}.unexpected_error")
                return ServiceResult.failure(UpstreamFailure())

        return wrapper

    return decorator

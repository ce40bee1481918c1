"""Admin authorization gate for bearer-token sessions.

The identity provider issues signed JWT access tokens whose claims carry
two metadata blocks: ``user_metadata`` (editable by the user) and
``app_metadata`` (assigned server-side).  A caller is an admin when
**either** block has ``role == "admin"``.  ``app_metadata`` would be the
safer source on its own, but console accounts have historically been
promoted through either block, so both are honoured without precedence.

Security decisions
------------------
* **Fail Closed**: any decode / validation error is ``Unauthenticated``.
* ``algorithms`` is fixed by configuration, never read from the token.
* Audience (and issuer, when configured) are always validated.
* JWKS keys, when used, are fetched with a bounded timeout and cached.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

import jwt as pyjwt
import structlog
from django.conf import settings
from jwt import PyJWKClient
from jwt.exceptions import PyJWKClientConnectionError, PyJWTError

from modules.core.exceptions import Forbidden, Unauthenticated, UpstreamFailure

logger = structlog.get_logger(__name__)

ADMIN_ROLE = "admin"

T = TypeVar("T")

# JWKS clients keep their own key cache; share one per endpoint.
_jwks_clients: Dict[str, PyJWKClient] = {}


@dataclass(frozen=True)
class AdminPrincipal:
    """Identity resolved from a credential, plus its admin determination."""

    user_id: str
    is_admin: bool
    email: str = ""


class TokenIdentityResolver:
    """Verifies a bearer credential and returns its claims."""

    def __init__(
        self,
        secret: str = "",
        algorithm: str = "",
        audience: str = "",
        issuer: str = "",
        jwks_url: str = "",
        timeout: int = 5,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm or ("RS256" if jwks_url else "HS256")
        self._audience = audience
        self._issuer = issuer
        self._jwks_url = jwks_url
        self._timeout = timeout

    @classmethod
    def from_settings(cls) -> TokenIdentityResolver:
        return cls(
            secret=settings.AUTH_JWT_SECRET,
            algorithm=settings.AUTH_JWT_ALGORITHM,
            audience=settings.AUTH_JWT_AUDIENCE,
            issuer=settings.AUTH_JWT_ISSUER,
            jwks_url=settings.AUTH_JWKS_URL,
            timeout=settings.AUTH_TIMEOUT_SECONDS,
        )

    def resolve(self, credential: str) -> Dict[str, Any]:
        """Return verified claims for *credential*.

        Raises:
            Unauthenticated: the token is invalid, expired or has no subject.
            UpstreamFailure: the signing keys could not be fetched.
        """
        key = self._signing_key(credential)
        options = {"require": ["sub", "exp"], "verify_aud": bool(self._audience)}
        try:
            claims = pyjwt.decode(
                credential,
                key,
                algorithms=[self._algorithm],
                audience=self._audience or None,
                issuer=self._issuer or None,
                options=options,
            )
        except PyJWTError as exc:
            logger.warning("admin_gate.token_rejected", error=str(exc))
            raise Unauthenticated("Invalid token") from exc

        if not claims.get("sub"):
            raise Unauthenticated("Invalid token")
        return claims

    def _signing_key(self, credential: str) -> Any:
        if self._jwks_url:
            client = _jwks_clients.get(self._jwks_url)
            if client is None:
                client = PyJWKClient(
                    self._jwks_url,
                    cache_jwk_set=True,
                    lifespan=300,
                    timeout=self._timeout,
                )
                _jwks_clients[self._jwks_url] = client
            try:
                return client.get_signing_key_from_jwt(credential).key
            except PyJWKClientConnectionError as exc:
                logger.error("admin_gate.jwks_unreachable", error=str(exc))
                raise UpstreamFailure("Identity provider unreachable") from exc
            except PyJWTError as exc:
                logger.warning("admin_gate.token_rejected", error=str(exc))
                raise Unauthenticated("Invalid token") from exc
        if not self._secret:
            logger.error("admin_gate.not_configured")
            raise Unauthenticated("Invalid token")
        return self._secret


class AdminGate:
    """Decides whether a credential holder may use the admin console.

    Pure read-only check: it never mutates state and is invoked before
    every listing or mutating operation.
    """

    def __init__(self, resolver: Optional[TokenIdentityResolver] = None) -> None:
        self._resolver = resolver or TokenIdentityResolver.from_settings()

    def identify(self, credential: Optional[str]) -> AdminPrincipal:
        """Resolve *credential* to a principal (admin or not).

        Raises:
            Unauthenticated: missing or unresolvable credential.
        """
        if not credential:
            raise Unauthenticated("No authorization header")
        claims = self._resolver.resolve(credential)
        return AdminPrincipal(
            user_id=str(claims["sub"]),
            is_admin=self.has_admin_role(claims),
            email=str(claims.get("email") or ""),
        )

    def authorize(self, credential: Optional[str]) -> AdminPrincipal:
        """Return the admin principal for *credential*.

        Raises:
            Unauthenticated: missing or unresolvable credential.
            Forbidden: the identity is not an admin.
        """
        principal = self.identify(credential)
        if not principal.is_admin:
            logger.warning("admin_gate.forbidden", user_id=principal.user_id)
            raise Forbidden("Admin access required")
        return principal

    @staticmethod
    def has_admin_role(claims: Dict[str, Any]) -> bool:
        user_metadata = claims.get("user_metadata") or {}
        app_metadata = claims.get("app_metadata") or {}
        if not isinstance(user_metadata, dict):
            user_metadata = {}
        if not isinstance(app_metadata, dict):
            app_metadata = {}
        return (
            user_metadata.get("role") == ADMIN_ROLE
            or app_metadata.get("role") == ADMIN_ROLE
        )


def extract_bearer_credential(header: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not header:
        return None
    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def admin_required(method: Callable[..., T]) -> Callable[..., T]:
    """Authorize the ``credential`` argument before running a service method.

    The decorated method receives the resolved ``AdminPrincipal`` in place
    of the raw credential.  The owning object must expose ``_gate``.
    """

    @functools.wraps(method)
    def wrapper(self: Any, credential: Optional[str], *args: Any, **kwargs: Any) -> T:
        principal = self._gate.authorize(credential)
        structlog.contextvars.bind_contextvars(admin_id=principal.user_id)
        return method(self, principal, *args, **kwargs)

    return wrapper

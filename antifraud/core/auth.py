"""
Auth0 JWT token verification and authentication utilities.

This module verifies bearer tokens against the tenant's JWKS endpoint,
extracts the caller's roles, and provides FastAPI dependencies for
authentication and role checks.
"""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

import httpx
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from antifraud.core.config import get_settings
from antifraud.core.errors import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

# =============================================================================
# Role Constants
# =============================================================================

MERCHANT = "MERCHANT"  # Submits transactions for evaluation
SUPPORT = "SUPPORT"  # Reviews verdicts, gives feedback, maintains registries
ADMINISTRATOR = "ADMINISTRATOR"  # Manages users in Auth0; no engine access

ROLES = (MERCHANT, SUPPORT, ADMINISTRATOR)

INVALID_OR_EXPIRED_TOKEN_MSG = "Invalid or expired token"

_async_http: httpx.AsyncClient | None = None

# Authorization header is optional so the local bypass works without one
_optional_security = HTTPBearer(auto_error=False)


class AuthenticatedUser(BaseModel):
    """Authenticated user information."""

    user_id: str
    email: str | None = None
    name: str | None = None
    roles: list[str] = []

    def has_role(self, role: str) -> bool:
        """Check if user has a specific role."""
        return role in self.roles

    @property
    def is_merchant(self) -> bool:
        return self.has_role(MERCHANT)

    @property
    def is_support(self) -> bool:
        return self.has_role(SUPPORT)


def get_async_http_client() -> httpx.AsyncClient:
    global _async_http
    if _async_http is None or _async_http.is_closed:
        _async_http = httpx.AsyncClient(timeout=httpx.Timeout(10.0))
    return _async_http


async def close_async_http_client() -> None:
    global _async_http
    if _async_http is not None:
        try:
            if not _async_http.is_closed:
                await _async_http.aclose()
        finally:
            _async_http = None


class JWKSCache:
    """JWKS document cached for ``ttl_seconds``.

    When a refresh fails the previous document is served stale; only a
    failure with nothing cached rejects the request.
    """

    def __init__(self, ttl_seconds: int | None = None):
        self._cache: dict[str, Any] | None = None
        self._cache_time: datetime | None = None
        self._ttl_seconds = ttl_seconds
        self._lock = asyncio.Lock()

    @property
    def ttl_seconds(self) -> int:
        if self._ttl_seconds is not None:
            return self._ttl_seconds
        return get_settings().auth0.jwks_cache_ttl

    def _is_cache_valid(self, now: datetime) -> bool:
        return (
            self._cache is not None
            and self._cache_time is not None
            and (now - self._cache_time).total_seconds() < self.ttl_seconds
        )

    async def get_jwks(self) -> dict[str, Any]:
        jwks_url = get_settings().auth0.jwks_url
        now = datetime.now(UTC)

        async with self._lock:
            if self._is_cache_valid(now):
                logger.debug("Using cached JWKS")
                return self._cache

            try:
                logger.info(f"Fetching JWKS from {jwks_url}")
                response = await get_async_http_client().get(jwks_url)
                response.raise_for_status()
                self._cache = response.json()
                self._cache_time = now
                return self._cache
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"Failed to fetch JWKS: {e}")
                if self._cache is not None:
                    logger.warning("Using stale JWKS cache as fallback")
                    return self._cache
                raise UnauthorizedError(
                    "Unable to verify token: authentication service unavailable"
                ) from e

    def clear(self) -> None:
        self._cache = None
        self._cache_time = None


_jwks_cache = JWKSCache()


async def get_jwks_async() -> dict[str, Any]:
    return await _jwks_cache.get_jwks()


def _find_rsa_key(jwks: dict[str, Any], token: str) -> dict[str, Any]:
    """Extract the signing key matching the token's key ID."""
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError as e:
        logger.warning(f"Invalid JWT header: {e}")
        raise UnauthorizedError(INVALID_OR_EXPIRED_TOKEN_MSG) from None

    for key in jwks.get("keys", []):
        if key.get("kid") == unverified_header.get("kid"):
            return {
                "kty": key["kty"],
                "kid": key["kid"],
                "use": key.get("use", "sig"),
                "n": key["n"],
                "e": key["e"],
            }

    logger.error(f"Unable to find matching key for kid: {unverified_header.get('kid')}")
    raise UnauthorizedError(INVALID_OR_EXPIRED_TOKEN_MSG)


def _verify_token_with_key(token: str, rsa_key: dict[str, Any]) -> dict[str, Any]:
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            rsa_key,
            algorithms=settings.auth0.algorithms_list,
            audience=settings.auth0.audience,
            issuer=settings.auth0.issuer_url,
        )
        logger.debug(f"Token verified successfully for subject: {payload.get('sub')}")
        return payload

    except jwt.ExpiredSignatureError:
        logger.warning("Token has expired")
        raise UnauthorizedError(INVALID_OR_EXPIRED_TOKEN_MSG) from None

    except jwt.JWTClaimsError as e:
        logger.warning(f"Invalid token claims: {e}")
        raise UnauthorizedError(INVALID_OR_EXPIRED_TOKEN_MSG) from None

    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        raise UnauthorizedError(INVALID_OR_EXPIRED_TOKEN_MSG) from None


async def verify_token_async(token: str) -> dict[str, Any]:
    return _verify_token_with_key(token, _find_rsa_key(await get_jwks_async(), token))


def get_user_roles(payload: dict[str, Any]) -> list[str]:
    roles = payload.get(get_settings().auth0.roles_claim, [])

    if not isinstance(roles, list):
        logger.warning(f"Roles claim is not a list: {type(roles)}")
        return []

    return [role for role in roles if role in ROLES]


def _create_bypass_user() -> AuthenticatedUser:
    """
    Create a user for local development when JWT validation is bypassed.

    The user holds every role so all endpoints can be exercised locally.
    Only reachable with SECURITY_SKIP_JWT_VALIDATION=True and APP_ENV=local.
    """
    return AuthenticatedUser(
        user_id="local-dev-user",
        email="local-dev@example.com",
        name="Local Development User",
        roles=list(ROLES),
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_optional_security),
) -> AuthenticatedUser:
    """Extract and verify the bearer token, returning the caller."""
    settings = get_settings()

    # Config validation rejects the bypass outside the local environment
    if settings.security.skip_jwt_validation is True:
        logger.info("JWT validation bypassed - returning local development user")
        return _create_bypass_user()

    if credentials is None:
        logger.warning("Missing Authorization header")
        raise UnauthorizedError("Missing authorization header")

    payload = await verify_token_async(credentials.credentials)

    sub = payload.get("sub")
    if not sub:
        logger.error("JWT payload missing 'sub' claim")
        raise UnauthorizedError("Invalid token - missing user identifier")

    return AuthenticatedUser(
        user_id=sub,
        email=payload.get("email"),
        name=payload.get("name"),
        roles=get_user_roles(payload),
    )


def require_roles(*allowed_roles: str):
    """Dependency factory that enforces one of the allowed roles.

    Role checks are exact: no role implies another.

    Usage:
        @router.get("/antifraud/history")
        async def history(user: AuthenticatedUser = Depends(require_roles("SUPPORT"))):
            ...
    """

    def role_checker(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if not any(user.has_role(role) for role in allowed_roles):
            logger.warning(
                "Access denied - user %s lacks required roles: %s. User roles: %s",
                user.user_id,
                allowed_roles,
                user.roles,
            )
            if get_settings().security.sanitize_errors:
                raise ForbiddenError("Insufficient permissions")
            raise ForbiddenError(
                "Insufficient permissions",
                details={"required_roles": list(allowed_roles), "user_roles": user.roles},
            )

        logger.debug("Role check passed: user has one of %s roles", allowed_roles)
        return user

    return role_checker


def require_role(required_role: str):
    return require_roles(required_role)


def clear_jwks_cache() -> None:
    _jwks_cache.clear()
    logger.info("JWKS cache cleared")

"""
JWT authentication for Keycloak OIDC.

Validates Bearer tokens against Keycloak's JWKS endpoint, resolves the
principal (the token ``sub``) and its role, and provides FastAPI dependencies
for route-level auth. Customers act on their own applications, appeals and
notifications; employees and admins review appeals and run batches.

Set AUTH_DISABLED=true to bypass validation (tests / local dev without Keycloak).
"""

import logging
import time
from typing import Annotated

import httpx
import jwt
from fairlend_db.enums import UserRole
from fastapi import Depends, HTTPException, Request, status

from ..core.config import settings
from ..schemas.auth import TokenPayload, UserContext

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# JWKS cache
# ---------------------------------------------------------------------------

_jwks_data: dict | None = None
_jwks_fetched_at: float = 0


def _fetch_jwks() -> dict:
    url = (
        f"{settings.KEYCLOAK_URL}/realms/{settings.KEYCLOAK_REALM}"
        "/protocol/openid-connect/certs"
    )
    response = httpx.get(url, timeout=5)
    response.raise_for_status()
    return response.json()


def _get_jwks(force_refresh: bool = False) -> dict:
    """Return cached JWKS, refreshing if stale or forced."""
    global _jwks_data, _jwks_fetched_at  # noqa: PLW0603

    now = time.time()
    if _jwks_data is None or force_refresh or (now - _jwks_fetched_at) > settings.JWKS_CACHE_TTL:
        _jwks_data = _fetch_jwks()
        _jwks_fetched_at = now

    return _jwks_data


def _find_key(jwks: dict, kid: str | None) -> jwt.PyJWK | None:
    for key in jwt.PyJWKSet.from_dict(jwks).keys:
        if key.key_id == kid:
            return key
    return None


def _get_signing_key(token: str) -> jwt.PyJWK:
    """Find the signing key for the token, refetching once on key rotation."""
    try:
        kid = jwt.get_unverified_header(token).get("kid")
        key = _find_key(_get_jwks(), kid) or _find_key(_get_jwks(force_refresh=True), kid)
    except httpx.HTTPError as exc:
        logger.error("Failed to fetch JWKS from Keycloak: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service unavailable",
        ) from exc

    if key is None:
        raise jwt.InvalidTokenError(f"No matching key found for kid={kid}")
    return key


# ---------------------------------------------------------------------------
# Token validation
# ---------------------------------------------------------------------------

def _extract_token(request: Request) -> str | None:
    auth = request.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth[7:]
    return None


def _decode_token(token: str) -> TokenPayload:
    signing_key = _get_signing_key(token)
    issuer = f"{settings.KEYCLOAK_URL}/realms/{settings.KEYCLOAK_REALM}"

    payload = jwt.decode(
        token,
        signing_key.key,
        algorithms=["RS256"],
        issuer=issuer,
        options={"verify_aud": False},
    )
    return TokenPayload(**payload)


def _resolve_role(token_payload: TokenPayload) -> UserRole:
    """Pick the highest-privilege FairLend role from realm_access.roles."""
    roles = set(token_payload.realm_access.get("roles", []))

    # Keycloak built-ins (offline_access, uma_authorization, ...) are ignored
    for role in (UserRole.ADMIN, UserRole.EMPLOYEE, UserRole.CUSTOMER):
        if role.value in roles:
            return role

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="No recognized role assigned",
    )


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------

_DISABLED_USER = UserContext(
    user_id="dev-user",
    role=UserRole.ADMIN,
    email="dev@fairlend.local",
    name="Dev User",
)


async def get_current_user(request: Request) -> UserContext:
    """FastAPI dependency: validate JWT and return UserContext.

    When AUTH_DISABLED=true, returns a dev admin user without token validation.
    """
    if settings.AUTH_DISABLED:
        return _DISABLED_USER

    token = _extract_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = _decode_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    except jwt.InvalidTokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    return UserContext(
        user_id=payload.sub,
        role=_resolve_role(payload),
        email=payload.email,
        name=payload.name or payload.preferred_username,
    )


CurrentUser = Annotated[UserContext, Depends(get_current_user)]


def require_roles(*allowed_roles: UserRole):
    """Dependency factory: restrict a route to specific roles.

    Usage:
        @router.get("/pending", dependencies=[Depends(require_roles(UserRole.EMPLOYEE))])
    """

    async def _check(user: CurrentUser) -> UserContext:
        if user.role not in allowed_roles:
            logger.warning(
                "RBAC denied: user=%s role=%s attempted route requiring %s",
                user.user_id,
                user.role.value,
                [r.value for r in allowed_roles],
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return _check

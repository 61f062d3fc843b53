# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Verifies Supabase access tokens sent as "Authorization: Bearer <jwt>".
#
# Supports both:
# - ES256 (Supabase asymmetric signing keys) via the project's JWKS
# - HS256 (legacy Supabase JWT secret)
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/products")
#   async def list_products(user: AuthUser = Depends(get_current_user)):
#       ...
# =============================================================================

import logging
import time
from typing import Any, Optional
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthUser

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor
security = HTTPBearer(auto_error=False)

# JWKS cache: keys plus the time they were fetched
_jwks_cache: dict[str, Any] = {"keys": [], "fetched_at": 0.0}
JWKS_CACHE_TTL = 3600  # 1 hour

# Algorithms Supabase signs access tokens with
ALLOWED_ALGORITHMS = frozenset({"HS256", "ES256", "RS256"})


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _fetch_jwks() -> list[dict[str, Any]]:
    """
    Get the project's public signing keys, cached for an hour.

    A failed refresh keeps serving the previous keys.
    """
    now = time.time()
    if _jwks_cache["keys"] and now - _jwks_cache["fetched_at"] < JWKS_CACHE_TTL:
        return _jwks_cache["keys"]

    url = f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"
    try:
        response = httpx.get(url, timeout=10)
        response.raise_for_status()
        _jwks_cache["keys"] = response.json().get("keys", [])
        _jwks_cache["fetched_at"] = now
        logger.debug(f"Fetched {len(_jwks_cache['keys'])} signing keys from {url}")
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Failed to fetch JWKS: {e}")

    return _jwks_cache["keys"]


def _resolve_key(token: str) -> tuple[Any, str]:
    """
    Pick the verification key and algorithm from the token header.

    Raises:
        JWTError: If the header is unreadable, the algorithm isn't allowed or no key matches
    """
    header = jwt.get_unverified_header(token)
    alg = header.get("alg", "HS256")
    if alg not in ALLOWED_ALGORITHMS:
        raise JWTError(f"Unsupported signing algorithm: {alg}")

    if alg == "HS256":
        if not settings.SUPABASE_JWT_SECRET:
            raise JWTError("HS256 tokens need SUPABASE_JWT_SECRET")
        return settings.SUPABASE_JWT_SECRET, alg

    kid = header.get("kid")
    for key in _fetch_jwks():
        if key.get("kid") == kid:
            return key, alg

    raise JWTError(f"No signing key found for kid={kid}")


def decode_access_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and extract the user.

    Raises:
        HTTPException: 401 if the token is expired, invalid or has no user ID
    """
    try:
        key, algorithm = _resolve_key(token)
        payload = jwt.decode(token, key, algorithms=[algorithm], audience="authenticated")
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {e}")

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        logger.warning(f"Invalid user ID in token: {payload.get('sub')}")
        raise _unauthorized("Invalid token: malformed user ID")

    return AuthUser(id=user_id, email=payload.get("email"))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthUser:
    """
    Require an authenticated user.

    Returns:
        AuthUser: The authenticated user

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    user = decode_access_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id}")
    return user

"""OIDC JWT authentication.

Provides:
- verify_token(): Validates an RS256 JWT against the issuer's JWKS
- get_current_user(): FastAPI dependency resolving the local user and role
"""

from __future__ import annotations

import os
import threading
import time
from dataclasses import dataclass
from typing import Any

import jwt
import requests
from fastapi import Depends, HTTPException, Request

from rentaly.domain.errors import AuthenticationError
from rentaly.domain.statuses import UserRole

# JWKS cache with TTL
_jwks_cache: dict[str, Any] | None = None
_jwks_cache_time: float = 0
_jwks_cache_lock = threading.Lock()
_JWKS_CACHE_TTL = 600  # 10 minutes


@dataclass
class CurrentUser:
    """Authenticated user context."""

    id: str
    external_subject: str
    email: str | None
    name: str | None
    role: str = UserRole.USER.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


def _get_settings() -> dict[str, str | list[str] | None]:
    """Load OIDC settings from environment."""
    authorized_parties_raw = os.environ.get("OIDC_AUTHORIZED_PARTIES", "")
    authorized_parties: list[str] | None = None
    if authorized_parties_raw:
        authorized_parties = [p.strip() for p in authorized_parties_raw.split(",") if p.strip()]

    return {
        "issuer": os.environ.get("OIDC_ISSUER"),
        "audience": os.environ.get("OIDC_AUDIENCE"),
        "jwks_url": os.environ.get("OIDC_JWKS_URL"),
        "authorized_parties": authorized_parties,
    }


def _fetch_jwks(jwks_url: str) -> dict[str, Any]:
    resp = requests.get(jwks_url, timeout=10)
    resp.raise_for_status()
    return resp.json()


def _get_jwks(jwks_url: str, force_refresh: bool = False) -> dict[str, Any]:
    """Return the issuer's key set, refetched at most every 10 minutes."""
    global _jwks_cache, _jwks_cache_time

    with _jwks_cache_lock:
        now = time.time()
        if not force_refresh and _jwks_cache is not None and (now - _jwks_cache_time) < _JWKS_CACHE_TTL:
            return _jwks_cache

        try:
            _jwks_cache = _fetch_jwks(jwks_url)
        except requests.RequestException:
            raise HTTPException(status_code=503, detail="Auth temporarily unavailable")
        _jwks_cache_time = now
        return _jwks_cache


def _find_key(jwks: dict[str, Any], kid: str) -> dict[str, Any] | None:
    return next((key for key in jwks.get("keys", []) if key.get("kid") == kid), None)


def _decode(token: str, key_data: dict[str, Any], issuer: str, audience: str) -> dict[str, Any]:
    try:
        public_key = jwt.algorithms.RSAAlgorithm.from_jwk(key_data)
    except (ValueError, TypeError, KeyError, jwt.InvalidKeyError):
        raise AuthenticationError("Invalid token")

    return jwt.decode(
        token,
        public_key,
        algorithms=["RS256"],
        issuer=issuer,
        audience=audience,
        options={"require": ["exp", "iss", "aud", "sub"]},
    )


def verify_token(token: str) -> str:
    """Verify a bearer JWT and return its subject.

    A key id missing from the cached JWKS, or a signature that fails with
    the cached key, triggers one forced JWKS refetch (key rotation).

    Raises:
        AuthenticationError: The token is invalid or expired, or OIDC is
            not configured.
        HTTPException: 503 if the JWKS endpoint is unreachable.
    """
    settings = _get_settings()

    issuer = settings.get("issuer")
    audience = settings.get("audience")
    jwks_url = settings.get("jwks_url")

    if not issuer or not audience or not jwks_url:
        raise AuthenticationError("OIDC not configured")

    try:
        unverified_header = jwt.get_unverified_header(token)
    except jwt.exceptions.DecodeError:
        raise AuthenticationError("Invalid token")

    kid = unverified_header.get("kid")
    if not kid:
        raise AuthenticationError("Invalid token")

    key_data = _find_key(_get_jwks(jwks_url), kid)
    if key_data is None:
        key_data = _find_key(_get_jwks(jwks_url, force_refresh=True), kid)
    if key_data is None:
        raise AuthenticationError("Invalid token")

    try:
        payload = _decode(token, key_data, issuer, audience)
    except jwt.InvalidSignatureError:
        key_data = _find_key(_get_jwks(jwks_url, force_refresh=True), kid)
        if key_data is None:
            raise AuthenticationError("Invalid token")
        try:
            payload = _decode(token, key_data, issuer, audience)
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token")
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")

    authorized_parties = settings.get("authorized_parties")
    if authorized_parties and "azp" in payload:
        if payload["azp"] not in authorized_parties:
            raise AuthenticationError("Invalid token")

    sub = payload.get("sub")
    if not sub:
        raise AuthenticationError("Invalid token")

    return sub


def _extract_bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise AuthenticationError("Missing authorization header")

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Invalid authorization header")

    return parts[1]


def _get_user_from_db(external_subject: str) -> CurrentUser | None:
    """Resolve the local account linked to an OIDC subject."""
    from rentaly.infra.db import txn
    from rentaly.infra.repositories.users_repository import get_user_by_subject

    with txn() as cur:
        row = get_user_by_subject(cur, external_subject)
    if row is None:
        return None
    return CurrentUser(
        id=row["id"],
        external_subject=row["external_subject"],
        email=row["email"],
        name=row["name"],
        role=row["role"],
    )


def get_current_user(request: Request) -> CurrentUser:
    """FastAPI dependency: the authenticated caller.

    Raises:
        AuthenticationError: Missing or invalid token.
        HTTPException: 403 if no local account is linked to its subject.
    """
    token = _extract_bearer_token(request)
    sub = verify_token(token)

    user = _get_user_from_db(sub)
    if user is None:
        raise HTTPException(status_code=403, detail="User not found")

    return user


CurrentUserDep = Depends(get_current_user)

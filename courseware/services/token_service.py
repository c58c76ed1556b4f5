"""Verification of access tokens issued by the hosted auth provider.

The provider signs HS256 with a shared secret and sets aud=authenticated.
This service never issues tokens to real users; mint_access_token exists
so tests and the demo script can produce tokens the verifier accepts.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt

from courseware.core.config import SETTINGS

ALGORITHM = "HS256"
AUDIENCE = "authenticated"
ACCESS_TOKEN_TTL_MIN = 60


def mint_access_token(
    *,
    sub: str,
    ttl_min: int = ACCESS_TOKEN_TTL_MIN,
    secret: str | None = None,
    audience: str = AUDIENCE,
) -> str:
    """Sign a token shaped like the provider's (sub, aud, exp, iat, role)."""
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "aud": audience,
        "exp": now + timedelta(minutes=ttl_min),
        "iat": now,
        "role": "authenticated",
    }
    return jwt.encode(payload, secret or SETTINGS.auth_jwt_secret, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm to HS256 so a token cannot pick its own.

    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        SETTINGS.auth_jwt_secret,
        algorithms=[ALGORITHM],
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat"]},
    )

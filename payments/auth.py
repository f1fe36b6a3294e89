"""
Bearer authorization for the payment facilitator.

A raw token is sent as-is. A name/secret pair signs a short-lived JWT for
every call, so a long-running process never holds an expired token.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

import jwt

from config.config import FacilitatorCredential, NameSecretPair, RawBearerToken

TOKEN_TTL = timedelta(hours=1)
HMAC_ALGORITHM = "HS256"
EC_ALGORITHM = "ES256"


def _algorithm_for(secret: str) -> str:
    return EC_ALGORITHM if "-----BEGIN" in secret else HMAC_ALGORITHM


def sign_token(credential: NameSecretPair, now: datetime | None = None) -> str:
    """Sign a JWT for ``credential`` that expires one hour after ``now``."""
    issued_at = now or datetime.now(timezone.utc)
    claims = {
        "sub": credential.name,
        "iss": "cdp",
        "iat": issued_at,
        "nbf": issued_at,
        "exp": issued_at + TOKEN_TTL,
    }
    return jwt.encode(
        claims,
        credential.secret,
        algorithm=_algorithm_for(credential.secret),
        headers={"kid": credential.name, "nonce": secrets.token_hex(16)},
    )


def auth_headers(credential: FacilitatorCredential | None) -> dict[str, str]:
    """Build the Authorization header for one facilitator call."""
    if credential is None:
        return {}
    if isinstance(credential, RawBearerToken):
        return {"Authorization": f"Bearer {credential.token}"}
    return {"Authorization": f"Bearer {sign_token(credential)}"}

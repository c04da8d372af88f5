"""Bearer token helpers for caller identities."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import jwt

from cti_registry.core.settings import settings


def create_access_token(identity: str, extra_claims: dict[str, str] | None = None) -> str:
    """Create a JWT whose subject is the caller identity (e.g. a wallet address)."""
    to_encode: dict[str, object] = {"sub": identity}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_identity(token: str) -> str | None:
    """Return the identity carried by ``token`` or None when it has no subject.

    Raises:
        jose.JWTError: If the token is malformed, expired or badly signed.
    """
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        return None
    return subject

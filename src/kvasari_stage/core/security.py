"""Bearer token utilities built on JWT."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from kvasari_stage.core.settings import Settings, settings


def create_access_token(
    subject: str,
    extra_claims: dict[str, str] | None = None,
    config: Settings = settings,
) -> str:
    """Create a signed access token whose ``sub`` claim is the user identifier.

    Args:
        subject: Identifier of the user the token authenticates.
        extra_claims: Additional claims merged into the payload.
        config: Settings providing the secret, algorithm and lifetime.

    Returns:
        The encoded JWT.
    """
    to_encode: dict[str, object] = {"sub": subject}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=config.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        config.secret_key,
        algorithm=config.jwt_algorithm,
    )
    return encoded_jwt


def decode_subject(token: str, config: Settings = settings) -> str | None:
    """Return the ``sub`` claim of a valid token, or ``None`` when it is invalid."""
    try:
        payload = jwt.decode(token, config.secret_key, algorithms=[config.jwt_algorithm])
    except JWTError:
        return None
    subject = payload.get("sub")
    return subject if isinstance(subject, str) else None

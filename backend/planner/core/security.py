import hashlib
import json
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt

from planner.core.config import get_settings

CONFIRMATION_TOKEN_TYPE = "confirmation"


def action_digest(action: Dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of an action payload."""
    canonical = json.dumps(action, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def create_confirmation_token(
    session_id: str, action: Dict[str, Any], nonce: str | None = None
) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.confirmation_token_expire_minutes
    )
    to_encode: Dict[str, Any] = {
        "sub": session_id,
        "type": CONFIRMATION_TOKEN_TYPE,
        "act": action_digest(action),
        "jti": nonce or secrets.token_urlsafe(12),
        "exp": expire,
    }
    return jwt.encode(
        to_encode,
        settings.confirmation_secret_key,
        algorithm=settings.confirmation_algorithm,
    )


def decode_confirmation_token(token: str) -> Dict[str, Any]:
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.confirmation_secret_key,
            algorithms=[settings.confirmation_algorithm],
        )
    except JWTError as exc:
        raise ValueError("Invalid token") from exc
    if claims.get("type") != CONFIRMATION_TOKEN_TYPE:
        raise ValueError("Invalid token type")
    return claims

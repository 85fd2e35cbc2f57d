"""Confirmation gate for AI-proposed actions.

An action is only applied when the user's utterance reads as an affirmative
confirmation and the request carries the token issued with the proposal.
Tokens are signed by ``planner.core.security`` and carry a digest of the
action they were issued for, so a token cannot authorize a different action.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from planner.core.errors import (
    ConfirmationRequiredError,
    MissingTokenError,
    TokenMismatchError,
)
from planner.core.security import action_digest, decode_confirmation_token

logger = logging.getLogger(__name__)

# Includes the Spanish variants the assistant suggests ("confirmo", "dale", ...)
CONFIRMATION_WORDS = ("confirmo", "confirm", "sí", "si", "ok", "okay", "yes", "dale", "aplica")

# Whole words only: "si" must not match "this", nor "ok" match "token"
_CONFIRMATION_RE = re.compile(
    r"(?<!\w)(?:" + "|".join(re.escape(word) for word in CONFIRMATION_WORDS) + r")(?!\w)"
)


def is_affirmative(text: Any) -> bool:
    if not isinstance(text, str):
        return False
    lowered = text.strip().lower()
    if not lowered:
        return False
    return _CONFIRMATION_RE.search(lowered) is not None


def verify_token_binding(token: str, action: dict[str, Any], session_id: str) -> None:
    try:
        claims = decode_confirmation_token(token)
    except ValueError as exc:
        raise TokenMismatchError("Confirmation token is invalid or expired.") from exc
    if claims.get("sub") != session_id:
        raise TokenMismatchError("Confirmation token was issued for another session.")
    if claims.get("act") != action_digest(action):
        raise TokenMismatchError()


def check_confirmation(
    token: str | None,
    action: dict[str, Any],
    utterance: Any,
    session_id: str,
) -> None:
    """Raise unless the utterance confirms and the token binds ``action``."""
    if not is_affirmative(utterance):
        logger.warning("Apply rejected: confirmation phrase not recognized")
        raise ConfirmationRequiredError()
    if not token or not token.strip():
        logger.warning("Apply rejected: missing confirmation token")
        raise MissingTokenError()
    verify_token_binding(token, action, session_id)

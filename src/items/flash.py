"""
Flash messages for the items app.

A redirect outcome leaves its flash message, field errors and echoed input
in a cookie; the next page reads them once and clears the cookie.
"""

import base64
import json
import logging
from typing import Any, Dict, Optional

from fastapi import Request, Response
from pydantic import BaseModel, Field, ValidationError

from src.store.outcomes import Flash, Outcome

logger = logging.getLogger(__name__)

# Browsers drop cookies over 4 KB (name, value and attributes together)
MAX_COOKIE_VALUE = 3800
OLD_VALUE_LIMIT = 255


class FlashState(BaseModel):
    """What a redirect hands over to the next page."""
    flash: Optional[Flash] = None
    errors: Dict[str, list] = Field(default_factory=dict)
    old: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_outcome(cls, outcome: Outcome) -> "FlashState":
        return cls(flash=outcome.flash, errors=outcome.errors, old=outcome.old_input)

    def is_empty(self) -> bool:
        return self.flash is None and not self.errors and not self.old


def encode(state: FlashState) -> str:
    raw = json.dumps(state.dict(), default=str).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode(value: str) -> FlashState:
    try:
        padded = value + "=" * (-len(value) % 4)
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        return FlashState(**json.loads(raw))
    except (ValueError, TypeError, ValidationError) as e:
        logger.warning(f"Discarding unreadable flash cookie: {str(e)}")
        return FlashState()


def pull(request: Request, cookie_name: str) -> FlashState:
    """Read the flash state left by the previous redirect (empty if none)."""
    value = request.cookies.get(cookie_name)
    if not value:
        return FlashState()
    return decode(value)


def shrink(state: FlashState) -> str:
    """
    Encode state so it fits in one cookie.

    Echoed input is cut down first, then dropped; the flash message and field
    errors are always kept.
    """
    value = encode(state)
    if len(value) <= MAX_COOKIE_VALUE:
        return value

    old = {
        k: v[:OLD_VALUE_LIMIT] if isinstance(v, str) else v
        for k, v in state.old.items()
    }
    value = encode(state.copy(update={"old": old}))
    if len(value) <= MAX_COOKIE_VALUE:
        return value

    logger.warning("Flash cookie too large, dropping echoed input", extra={"size": len(value)})
    value = encode(state.copy(update={"old": {}}))
    if len(value) <= MAX_COOKIE_VALUE or state.flash is None:
        return value

    message = state.flash.message[:OLD_VALUE_LIMIT]
    return encode(state.copy(update={"old": {}, "flash": state.flash.copy(update={"message": message})}))


def put(response: Response, cookie_name: str, state: FlashState) -> None:
    if state.is_empty():
        return
    response.set_cookie(cookie_name, shrink(state), httponly=True, samesite="lax")


def clear(request: Request, response: Response, cookie_name: str) -> None:
    if cookie_name in request.cookies:
        response.delete_cookie(cookie_name)

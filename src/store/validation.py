"""
Input Validation

Field rules are declared as Pydantic models; failures are translated into
per-field, human-readable messages (a ValidationResult).
"""

from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar
from pydantic import BaseModel, Field, ValidationError

# field name -> messages; empty means the input was accepted
ValidationResult = Dict[str, List[str]]

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

M = TypeVar("M", bound=BaseModel)


# ========== Input Models ==========

class ItemInput(BaseModel):
    """Fields accepted for an item."""
    name: str = Field(..., description="Item name", min_length=1, max_length=255)
    description: str = Field(..., description="Item description", min_length=1)

    class Config:
        str_strip_whitespace = True


class UserInput(BaseModel):
    """Fields accepted for a user record."""
    name: str = Field(..., description="Display name", min_length=1, max_length=255)
    email: str = Field(..., description="Email address", min_length=1, max_length=255, pattern=EMAIL_PATTERN)

    class Config:
        str_strip_whitespace = True


class RegistrationInput(UserInput):
    """Fields accepted by the register endpoint."""
    password: str = Field(..., description="Password", min_length=8)


class LoginInput(BaseModel):
    """Fields accepted by the login endpoint."""
    email: str = Field(..., min_length=1, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)

    class Config:
        str_strip_whitespace = True


# ========== Error Translation ==========

def _message(field: str, error: Dict[str, Any], raw: Any) -> str:
    label = field.replace("_", " ")
    kind = error["type"]
    ctx = error.get("ctx") or {}

    if kind == "missing" or raw is None or (isinstance(raw, str) and not raw.strip()):
        return f"The {label} field is required."
    if kind == "string_type":
        return f"The {label} must be a string."
    if kind == "string_too_long":
        return f"The {label} may not be greater than {ctx.get('max_length')} characters."
    if kind == "string_too_short":
        return f"The {label} must be at least {ctx.get('min_length')} characters."
    if kind == "string_pattern_mismatch" and field == "email":
        return f"The {label} must be a valid email address."
    return f"The {label} is invalid."


def errors_from(exc: ValidationError, data: Dict[str, Any]) -> ValidationResult:
    """Translate a pydantic ValidationError into a ValidationResult."""
    result: ValidationResult = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "__root__"
        message = _message(field, error, data.get(field))
        messages = result.setdefault(field, [])
        if message not in messages:
            messages.append(message)
    return result


def validate(model: Type[M], data: Dict[str, Any]) -> Tuple[Optional[M], ValidationResult]:
    """
    Validate raw input against a model.

    Returns:
        (parsed model, {}) when accepted, (None, errors) otherwise
    """
    try:
        return model(**data), {}
    except ValidationError as exc:
        return None, errors_from(exc, data)

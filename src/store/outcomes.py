"""
Operation Outcomes

Every controller operation produces exactly one Outcome, which the app layer
renders (HTML page / redirect with flash for items, JSON for users).
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from src.store.results import FaultKind


class OutcomeKind(str, Enum):
    """Outcome variant."""
    SUCCESS = "SUCCESS"
    REDIRECT = "REDIRECT"
    WARNING = "WARNING"
    FAILURE = "FAILURE"


class FlashLevel(str, Enum):
    """Flash message level."""
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Flash(BaseModel):
    """Short-lived status message shown once after a redirect."""
    level: FlashLevel
    message: str


class Outcome(BaseModel):
    """Result descriptor of one controller operation."""
    kind: OutcomeKind
    payload: Any = None
    target: Optional[str] = Field(None, description="Redirect target")
    flash: Optional[Flash] = None
    fault: Optional[FaultKind] = None
    errors: Dict[str, List[str]] = Field(default_factory=dict, description="Field-level validation errors")
    old_input: Dict[str, Any] = Field(default_factory=dict, description="Submitted input echoed back to the form")

    @classmethod
    def success(cls, payload: Any = None) -> "Outcome":
        return cls(kind=OutcomeKind.SUCCESS, payload=payload)

    @classmethod
    def redirect(
        cls,
        target: str,
        level: FlashLevel,
        message: Optional[str] = None,
        payload: Any = None,
        fault: Optional[FaultKind] = None,
        errors: Optional[Dict[str, List[str]]] = None,
        old_input: Optional[Dict[str, Any]] = None,
    ) -> "Outcome":
        return cls(
            kind=OutcomeKind.REDIRECT,
            target=target,
            flash=Flash(level=level, message=message) if message else None,
            payload=payload,
            fault=fault,
            errors=errors or {},
            old_input=old_input or {},
        )

    @classmethod
    def warning(cls, target: str, message: str) -> "Outcome":
        return cls(
            kind=OutcomeKind.WARNING,
            target=target,
            flash=Flash(level=FlashLevel.WARNING, message=message),
            fault=FaultKind.AMBIGUOUS_WRITE,
        )

    @classmethod
    def failure(cls, fault: FaultKind, message: str) -> "Outcome":
        return cls(
            kind=OutcomeKind.FAILURE,
            fault=fault,
            flash=Flash(level=FlashLevel.ERROR, message=message),
        )

    @property
    def message(self) -> Optional[str]:
        return self.flash.message if self.flash else None

    @property
    def is_error(self) -> bool:
        return self.kind == OutcomeKind.FAILURE or (
            self.flash is not None and self.flash.level == FlashLevel.ERROR
        )

"""
Remote Store Result Types

Values returned by the store and auth clients instead of raised exceptions.
A client call yields either its payload, a NotFound marker, or a StoreFault.
"""

from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


Record = Dict[str, Any]


class FaultKind(str, Enum):
    """Fault taxonomy shared by the clients and the controllers."""
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    REMOTE_UNAVAILABLE = "REMOTE_UNAVAILABLE"
    REMOTE_REJECTED = "REMOTE_REJECTED"
    AMBIGUOUS_WRITE = "AMBIGUOUS_WRITE"
    CONFLICT = "CONFLICT"


class StoreFault(BaseModel):
    """A failed remote call."""
    kind: FaultKind
    message: str
    details: Optional[str] = None
    code: Optional[str] = Field(None, description="Error code reported by the store, if any")
    status_code: Optional[int] = Field(None, description="HTTP status returned by the store, if any")

    def describe(self) -> str:
        """Human-readable message including the rejection detail when present."""
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class NotFound(BaseModel):
    """The requested id does not exist in the collection."""
    collection: str
    record_id: str


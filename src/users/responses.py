"""
JSON rendering of controller outcomes for the users API.
"""

from typing import Optional

from fastapi import status
from fastapi.responses import JSONResponse

from src.store.outcomes import Outcome, OutcomeKind
from src.store.results import FaultKind

FAULT_STATUS = {
    FaultKind.VALIDATION_FAILED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    FaultKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FaultKind.REMOTE_REJECTED: status.HTTP_400_BAD_REQUEST,
    FaultKind.REMOTE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    FaultKind.CONFLICT: status.HTTP_409_CONFLICT,
}


def to_json(
    outcome: Outcome,
    key: str = "user",
    created: bool = False,
    rejected_status: Optional[int] = None,
) -> JSONResponse:
    """
    Map an Outcome onto a JSON response.

    Args:
        outcome: Controller outcome
        key: Name of the record in success bodies
        created: Answer 201 instead of 200 on success
        rejected_status: Status to use for REMOTE_REJECTED instead of 400
    """
    if outcome.kind == OutcomeKind.SUCCESS:
        return JSONResponse(status_code=status.HTTP_200_OK, content=outcome.payload)

    if outcome.kind == OutcomeKind.WARNING:
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content={"warning": outcome.message},
        )

    if outcome.fault == FaultKind.VALIDATION_FAILED:
        return JSONResponse(
            status_code=FAULT_STATUS[FaultKind.VALIDATION_FAILED],
            content={"error": "Validation error", "errors": outcome.errors},
        )

    if outcome.is_error:
        code = FAULT_STATUS.get(outcome.fault, status.HTTP_500_INTERNAL_SERVER_ERROR)
        if outcome.fault == FaultKind.REMOTE_REJECTED and rejected_status:
            code = rejected_status
        return JSONResponse(status_code=code, content={"error": outcome.message})

    body = {"message": outcome.message}
    if outcome.payload is not None:
        body[key] = outcome.payload
    return JSONResponse(
        status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        content=body,
    )

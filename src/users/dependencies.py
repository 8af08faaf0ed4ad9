"""
Dependency wiring for the users API.
"""

from typing import Optional

from fastapi import Header, Request

from src.store.controller import RecordController
from src.store.exceptions import AuthenticationRequired
from src.users.accounts import AccountService


def get_user_controller(request: Request) -> RecordController:
    """Get the users controller from app state."""
    return request.app.state.user_controller


def get_account_service(request: Request) -> AccountService:
    """Get the account service from app state."""
    return request.app.state.account_service


def get_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    """
    Extract the bearer token of an auth-gated request.

    Raises:
        AuthenticationRequired: If no bearer token was sent
    """
    if not authorization:
        raise AuthenticationRequired()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationRequired(details="Expected 'Authorization: Bearer <token>'")
    return token.strip()

"""
Users API Router

JSON CRUD for user records plus register/login/profile.
"""

from fastapi import APIRouter, Depends, Request, status

from src.store.controller import RecordController
from src.store.middleware import read_input
from src.users.accounts import AccountService
from src.users.dependencies import get_account_service, get_bearer_token, get_user_controller
from src.users.responses import to_json

router = APIRouter()


@router.post("/register", status_code=201)
async def register(
    request: Request,
    accounts: AccountService = Depends(get_account_service),
):
    """Register a new user."""
    data = await read_input(request)
    outcome = await accounts.register(data)
    return to_json(outcome, created=True)


@router.post("/login")
async def login(
    request: Request,
    accounts: AccountService = Depends(get_account_service),
):
    """Exchange email and password for an access token."""
    data = await read_input(request)
    outcome = await accounts.login(data)
    return to_json(outcome, rejected_status=status.HTTP_401_UNAUTHORIZED)


@router.get("/users")
async def get_users(controller: RecordController = Depends(get_user_controller)):
    """List all users."""
    outcome = await controller.list()
    return to_json(outcome)


@router.get("/users/{user_id}")
async def get_user(
    user_id: str,
    controller: RecordController = Depends(get_user_controller),
):
    """Query a user by id."""
    outcome = await controller.show(user_id)
    return to_json(outcome)


@router.put("/users/{user_id}")
async def update_user(
    user_id: str,
    request: Request,
    controller: RecordController = Depends(get_user_controller),
):
    """Update a user's name and email."""
    data = await read_input(request)
    outcome = await controller.submit_update(user_id, data)
    return to_json(outcome)


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    controller: RecordController = Depends(get_user_controller),
):
    """Delete a user."""
    outcome = await controller.destroy(user_id)
    return to_json(outcome)


@router.get("/profile")
async def profile(
    token: str = Depends(get_bearer_token),
    accounts: AccountService = Depends(get_account_service),
):
    """Return the user the bearer token belongs to."""
    outcome = await accounts.profile(token)
    return to_json(outcome, rejected_status=status.HTTP_401_UNAUTHORIZED)

"""
Dependency wiring for the items app.

Clients and controllers are built in the app lifespan and kept on app.state.
"""

from fastapi import Request

from src.store.client import StoreClient
from src.store.config import StoreConfig
from src.store.controller import RecordController


def get_item_controller(request: Request) -> RecordController:
    """Get the items controller from app state."""
    return request.app.state.item_controller


def get_store_client(request: Request) -> StoreClient:
    """Get the remote store client from app state."""
    return request.app.state.store_client


def get_app_config(request: Request) -> StoreConfig:
    """Get the configuration the app was built with."""
    return request.app.state.config

"""
Items Router

HTML CRUD pages for items. Every handler asks the controller for an Outcome
and renders it: a page, a redirect carrying a flash message, or an error page.
"""

from typing import Any, Callable

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from src.items import flash, views
from src.items.dependencies import get_app_config, get_item_controller
from src.store.config import StoreConfig
from src.store.controller import RecordController
from src.store.middleware import read_input
from src.store.outcomes import Outcome, OutcomeKind
from src.store.results import FaultKind

router = APIRouter()

FAILURE_STATUS = {
    FaultKind.REMOTE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    FaultKind.REMOTE_REJECTED: status.HTTP_502_BAD_GATEWAY,
}


def render(
    outcome: Outcome,
    request: Request,
    config: StoreConfig,
    page: Callable[[Any, flash.FlashState], str],
) -> Response:
    """Turn an Outcome into an HTTP response."""
    cookie = config.flash_cookie_name

    if outcome.kind in (OutcomeKind.REDIRECT, OutcomeKind.WARNING):
        response = RedirectResponse(outcome.target, status_code=status.HTTP_303_SEE_OTHER)
        flash.put(response, cookie, flash.FlashState.from_outcome(outcome))
        return response

    state = flash.pull(request, cookie)
    if outcome.kind == OutcomeKind.FAILURE:
        response = HTMLResponse(
            views.error_page(outcome.message or "Unexpected error", state),
            status_code=FAILURE_STATUS.get(outcome.fault, status.HTTP_500_INTERNAL_SERVER_ERROR),
        )
    else:
        response = HTMLResponse(page(outcome.payload, state))
    flash.clear(request, response, cookie)
    return response


@router.get("/items", response_class=HTMLResponse)
async def index(
    request: Request,
    controller: RecordController = Depends(get_item_controller),
    config: StoreConfig = Depends(get_app_config),
):
    """List all items."""
    outcome = await controller.list()
    return render(outcome, request, config, views.index_page)


@router.get("/items/create", response_class=HTMLResponse)
async def create_form(
    request: Request,
    controller: RecordController = Depends(get_item_controller),
    config: StoreConfig = Depends(get_app_config),
):
    """Show the form for creating a new item."""
    outcome = controller.show_create_form()
    return render(
        outcome, request, config,
        lambda payload, state: views.form_page("Create item", "/items", payload["fields"], state),
    )


@router.post("/items")
async def store(
    request: Request,
    controller: RecordController = Depends(get_item_controller),
    config: StoreConfig = Depends(get_app_config),
):
    """Store a newly created item."""
    data = await read_input(request)
    outcome = await controller.submit_create(data)
    return render(outcome, request, config, views.show_page)


@router.get("/items/{item_id}", response_class=HTMLResponse)
async def show(
    item_id: str,
    request: Request,
    controller: RecordController = Depends(get_item_controller),
    config: StoreConfig = Depends(get_app_config),
):
    """Display one item."""
    outcome = await controller.show(item_id)
    return render(outcome, request, config, views.show_page)


@router.get("/items/{item_id}/edit", response_class=HTMLResponse)
async def edit_form(
    item_id: str,
    request: Request,
    controller: RecordController = Depends(get_item_controller),
    config: StoreConfig = Depends(get_app_config),
):
    """Show the form for editing an item."""
    outcome = await controller.show_edit_form(item_id)
    return render(
        outcome, request, config,
        lambda payload, state: views.form_page(
            "Edit item", f"/items/{item_id}", payload["fields"], state, method="PUT"
        ),
    )


@router.put("/items/{item_id}")
async def update(
    item_id: str,
    request: Request,
    controller: RecordController = Depends(get_item_controller),
    config: StoreConfig = Depends(get_app_config),
):
    """Update an item."""
    data = await read_input(request)
    outcome = await controller.submit_update(item_id, data)
    return render(outcome, request, config, views.show_page)


@router.delete("/items/{item_id}")
async def destroy(
    item_id: str,
    request: Request,
    controller: RecordController = Depends(get_item_controller),
    config: StoreConfig = Depends(get_app_config),
):
    """Remove an item."""
    outcome = await controller.destroy(item_id)
    return render(outcome, request, config, views.index_page)


@router.post("/items/{item_id}")
async def spoofed(
    item_id: str,
    request: Request,
    controller: RecordController = Depends(get_item_controller),
    config: StoreConfig = Depends(get_app_config),
):
    """
    HTML forms can only POST; a hidden _method field selects PUT or DELETE.
    """
    data = await read_input(request)
    method = str(data.pop("_method", "")).upper()
    if method == "DELETE":
        outcome = await controller.destroy(item_id)
    elif method in ("PUT", "PATCH"):
        outcome = await controller.submit_update(item_id, data)
    else:
        return HTMLResponse(
            views.error_page(f"Unsupported form method: {method or 'POST'}"),
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        )
    return render(outcome, request, config, views.show_page)

"""
HTML views for the items app.

Deliberately small: pages are plain HTML strings with every dynamic value
escaped. Forms post with a hidden _method field for PUT/DELETE.
"""

from html import escape
from typing import Any, Dict, List, Optional

from src.items.flash import FlashState

FLASH_CLASSES = {"success": "alert-success", "warning": "alert-warning", "error": "alert-danger"}


def _e(value: Any) -> str:
    return escape("" if value is None else str(value))


def layout(title: str, body: str, state: Optional[FlashState] = None) -> str:
    flash_html = ""
    if state is not None and state.flash is not None:
        level = state.flash.level.value
        flash_html = (
            f'<div class="alert {FLASH_CLASSES.get(level, "")}" data-flash="{level}">'
            f"{_e(state.flash.message)}</div>"
        )
    return (
        "<!DOCTYPE html>\n"
        f"<html><head><meta charset=\"utf-8\"><title>{_e(title)}</title></head>\n"
        f"<body><main>\n<h1>{_e(title)}</h1>\n{flash_html}\n{body}\n</main></body></html>\n"
    )


def index_page(items: List[Dict[str, Any]], state: Optional[FlashState] = None) -> str:
    if items:
        rows = "\n".join(
            "<tr>"
            f"<td>{_e(item.get('id'))}</td>"
            f"<td><a href=\"/items/{_e(item.get('id'))}\">{_e(item.get('name'))}</a></td>"
            f"<td>{_e(item.get('description'))}</td>"
            f"<td><a href=\"/items/{_e(item.get('id'))}/edit\">Edit</a> "
            f"{delete_form(item.get('id'))}</td>"
            "</tr>"
            for item in items
        )
        table = (
            "<table><thead><tr><th>ID</th><th>Name</th><th>Description</th><th></th></tr></thead>\n"
            f"<tbody>\n{rows}\n</tbody></table>"
        )
    else:
        table = "<p>No items found.</p>"
    body = f'<p><a href="/items/create">Create item</a></p>\n{table}'
    return layout("Items", body, state)


def show_page(item: Dict[str, Any], state: Optional[FlashState] = None) -> str:
    body = (
        "<dl>"
        f"<dt>Name</dt><dd>{_e(item.get('name'))}</dd>"
        f"<dt>Description</dt><dd>{_e(item.get('description'))}</dd>"
        f"<dt>Created</dt><dd>{_e(item.get('created_at'))}</dd>"
        f"<dt>Updated</dt><dd>{_e(item.get('updated_at'))}</dd>"
        "</dl>\n"
        f'<p><a href="/items/{_e(item.get("id"))}/edit">Edit</a> <a href="/items">Back</a></p>'
    )
    return layout(f"Item {item.get('id')}", body, state)


def delete_form(item_id: Any) -> str:
    return (
        f'<form method="post" action="/items/{_e(item_id)}" style="display:inline">'
        '<input type="hidden" name="_method" value="DELETE">'
        '<button type="submit">Delete</button></form>'
    )


def form_page(
    title: str,
    action: str,
    fields: Dict[str, Any],
    state: Optional[FlashState] = None,
    method: str = "POST",
) -> str:
    """Create/edit form; old input and field errors from the flash state win over fields."""
    state = state or FlashState()
    values = {**fields, **state.old}
    errors = state.errors

    def error_list(name: str) -> str:
        return "".join(f'<div class="invalid-feedback">{_e(m)}</div>' for m in errors.get(name, []))

    spoof = f'<input type="hidden" name="_method" value="{_e(method)}">' if method != "POST" else ""
    body = (
        f'<form method="post" action="{_e(action)}">{spoof}\n'
        '<label for="name">Name</label>'
        f'<input id="name" name="name" maxlength="255" value="{_e(values.get("name"))}">'
        f"{error_list('name')}\n"
        '<label for="description">Description</label>'
        f'<textarea id="description" name="description">{_e(values.get("description"))}</textarea>'
        f"{error_list('description')}\n"
        '<button type="submit">Save</button> <a href="/items">Cancel</a>\n'
        "</form>"
    )
    return layout(title, body, state)


def error_page(message: str, state: Optional[FlashState] = None) -> str:
    body = f'<p class="error">{_e(message)}</p>\n<p><a href="/items">Back to items</a></p>'
    return layout("Something went wrong", body, state)

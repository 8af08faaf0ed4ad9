import pytest
from fastapi.testclient import TestClient

from src.items.main import create_app


@pytest.fixture
def client(app_config, transport):
    with TestClient(create_app(config=app_config, transport=transport)) as test_client:
        yield test_client


def test_root_redirects_to_listing(client):
    response = client.get("/", follow_redirects=False)
    assert response.status_code in (302, 307)
    assert response.headers["location"] == "/items"


def test_index_lists_items(client, fake_store):
    fake_store.seed("items", name="Widget", description="A small widget")
    fake_store.seed("items", name="<b>Bold</b>", description="escaped")

    response = client.get("/items")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Widget" in response.text
    assert "&lt;b&gt;Bold&lt;/b&gt;" in response.text
    assert "X-Request-Id" in response.headers


def test_index_shows_empty_state(client):
    assert "No items found." in client.get("/items").text


def test_create_redirects_with_success_flash(client, fake_store):
    response = client.post("/items", data={"name": "Widget", "description": "A small widget"}, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/items"

    page = client.get("/items")
    assert 'data-flash="success"' in page.text
    assert "Item created successfully." in page.text

    stored = fake_store.tables["items"][0]
    assert stored["created_at"] == stored["updated_at"]

    # the flash is shown once
    assert "Item created successfully." not in client.get("/items").text


def test_create_accepts_json(client, fake_store):
    response = client.post("/items", json={"name": "Widget", "description": "A small widget"})
    assert response.status_code == 200
    assert fake_store.tables["items"][0]["name"] == "Widget"


def test_invalid_create_redisplays_form_with_errors(client, fake_store):
    response = client.post("/items", data={"name": "", "description": "keep me"})

    assert response.status_code == 200
    assert response.url.path == "/items/create"
    assert "The name field is required." in response.text
    assert "keep me" in response.text
    assert fake_store.data_calls() == []


def test_oversized_input_still_shows_errors(client, fake_store):
    response = client.post(
        "/items", data={"name": "x" * 300, "description": "d" * 4000}, follow_redirects=False
    )

    assert response.status_code == 303
    assert len(response.headers["set-cookie"]) <= 4096

    page = client.get("/items/create")
    assert "The name may not be greater than 255 characters." in page.text
    assert "x" * 255 in page.text
    assert "d" * 4000 not in page.text


def test_oversized_input_on_store_fault_keeps_flash(client, fake_store):
    fake_store.reject_writes = 400
    response = client.post(
        "/items", data={"name": "Widget", "description": "d" * 6000}, follow_redirects=False
    )

    assert response.status_code == 303
    assert len(response.headers["set-cookie"]) <= 4096
    assert "Error creating item:" in client.get("/items/create").text


def test_show_and_edit_pages(client, fake_store):
    row = fake_store.seed("items", name="Widget", description="A small widget")

    show = client.get(f"/items/{row['id']}")
    assert show.status_code == 200
    assert "A small widget" in show.text

    edit = client.get(f"/items/{row['id']}/edit")
    assert edit.status_code == 200
    assert 'name="_method" value="PUT"' in edit.text
    assert 'value="Widget"' in edit.text


def test_unknown_item_redirects_with_error(client):
    for path in ("/items/999", "/items/999/edit", "/items/abc"):
        response = client.get(path)
        assert response.url.path == "/items"
        assert 'data-flash="error"' in response.text
        assert "Item not found." in response.text


def test_update_via_put_and_form_spoofing(client, fake_store):
    row = fake_store.seed("items", name="Widget", description="old", created_at="2026-01-01T00:00:00+00:00")

    response = client.put(f"/items/{row['id']}", data={"name": "Widget", "description": "new"})
    assert "Item updated successfully." in response.text
    assert row["description"] == "new"
    assert row["created_at"] == "2026-01-01T00:00:00+00:00"

    response = client.post(f"/items/{row['id']}", data={"_method": "PUT", "name": "Gadget", "description": "newer"})
    assert "Item updated successfully." in response.text
    assert row["name"] == "Gadget"


def test_update_nonexistent_item(client):
    response = client.put("/items/999", data={"name": "Widget", "description": "x"})
    assert response.status_code == 200
    assert response.url.path == "/items"
    assert "Item not found." in response.text


def test_update_with_empty_confirmation_shows_warning(client, fake_store):
    row = fake_store.seed("items", name="Widget", description="old")
    fake_store.empty_writes.add("PATCH")

    response = client.put(f"/items/{row['id']}", data={"name": "Widget", "description": "new"})
    assert 'data-flash="warning"' in response.text
    assert "Item may not have been updated. Please check the database." in response.text


def test_delete_twice(client, fake_store):
    row = fake_store.seed("items", name="Widget", description="x")

    first = client.delete(f"/items/{row['id']}")
    assert "Item deleted successfully." in first.text

    second = client.post(f"/items/{row['id']}", data={"_method": "DELETE"})
    assert 'data-flash="error"' in second.text
    assert "Failed to delete item." in second.text


def test_unsupported_spoofed_method(client, fake_store):
    row = fake_store.seed("items", name="Widget", description="x")
    response = client.post(f"/items/{row['id']}", data={"name": "x"})
    assert response.status_code == 405


def test_store_down_renders_error_page(client, fake_store):
    fake_store.offline = True
    response = client.get("/items")
    assert response.status_code == 503
    assert "Error retrieving items:" in response.text


def test_json_body_must_be_an_object(client):
    response = client.post("/items", content=b"[1, 2]", headers={"content-type": "application/json"})
    assert response.status_code == 400


def test_health_reports_store_reachability(client, fake_store):
    assert client.get("/health").json()["store"] == "reachable"
    fake_store.offline = True
    assert client.get("/health").json()["store"] == "unreachable"

from datetime import datetime, timedelta, timezone

import pytest

from src.store.controller import RecordController
from src.store.outcomes import FlashLevel, OutcomeKind
from src.store.resources import item_resource
from src.store.results import FaultKind, NotFound


class StepClock:
    """Clock that moves forward one second per reading."""

    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def controller(store_client):
    return RecordController(store_client, item_resource(), clock=StepClock())


def _stored(fake_store, record_id):
    return next(r for r in fake_store.tables["items"] if r["id"] == record_id)


def test_create_widget_stamps_equal_timestamps(controller, fake_store, run):
    outcome = run(controller.submit_create({"name": "Widget", "description": "A small widget"}))

    assert outcome.kind == OutcomeKind.REDIRECT
    assert outcome.target == "/items"
    assert outcome.flash.level == FlashLevel.SUCCESS
    assert outcome.message == "Item created successfully."

    record = outcome.payload
    assert record["id"] is not None
    assert record["created_at"] == record["updated_at"]


def test_create_forwards_only_known_fields(controller, fake_store, run):
    run(controller.submit_create({"name": "Widget", "description": "x", "price": "9", "id": "77"}))
    stored = fake_store.tables["items"][0]
    assert set(stored) == {"id", "name", "description", "created_at", "updated_at"}
    assert stored["id"] != "77"


def test_update_moves_updated_at_and_keeps_created_at(controller, fake_store, run):
    created = run(controller.submit_create({"name": "Widget", "description": "A small widget"})).payload

    for n in range(3):
        outcome = run(controller.submit_update(created["id"], {"name": f"Widget {n}", "description": "changed"}))
        assert outcome.kind == OutcomeKind.REDIRECT
        assert outcome.message == "Item updated successfully."

    stored = _stored(fake_store, created["id"])
    assert stored["created_at"] == created["created_at"]
    assert datetime.fromisoformat(stored["updated_at"]) > datetime.fromisoformat(created["updated_at"])
    assert stored["name"] == "Widget 2"


@pytest.mark.parametrize("data,field,message", [
    ({"name": "", "description": "x"}, "name", "The name field is required."),
    ({"name": "   ", "description": "x"}, "name", "The name field is required."),
    ({"description": "x"}, "name", "The name field is required."),
    ({"name": "Widget", "description": ""}, "description", "The description field is required."),
    ({"name": "x" * 256, "description": "x"}, "name", "The name may not be greater than 255 characters."),
])
def test_invalid_input_never_reaches_the_store(controller, fake_store, run, data, field, message):
    row = fake_store.seed("items", name="Widget", description="x")
    fake_store.calls.clear()

    for outcome in (
        run(controller.submit_create(data)),
        run(controller.submit_update(row["id"], data)),
    ):
        assert outcome.kind == OutcomeKind.REDIRECT
        assert outcome.fault == FaultKind.VALIDATION_FAILED
        assert message in outcome.errors[field]

    assert fake_store.calls == []


def test_invalid_input_is_echoed_back(controller, run):
    outcome = run(controller.submit_create({"name": "", "description": "keep me", "_token": "abc"}))
    assert outcome.target == "/items/create"
    assert outcome.old_input == {"name": "", "description": "keep me"}


def test_name_of_exactly_255_characters_is_accepted(controller, run):
    outcome = run(controller.submit_create({"name": "x" * 255, "description": "x"}))
    assert outcome.flash.level == FlashLevel.SUCCESS


def test_update_nonexistent_id_redirects_with_error(controller, run):
    outcome = run(controller.submit_update("999", {"name": "Widget", "description": "x"}))

    assert outcome.kind == OutcomeKind.REDIRECT
    assert outcome.target == "/items"
    assert outcome.flash.level == FlashLevel.ERROR
    assert outcome.message == "Item not found."
    assert outcome.fault == FaultKind.NOT_FOUND


def test_empty_update_confirmation_is_a_warning(controller, fake_store, run):
    row = fake_store.seed("items", name="Widget", description="x")
    fake_store.empty_writes.add("PATCH")

    outcome = run(controller.submit_update(row["id"], {"name": "Widget", "description": "y"}))

    assert outcome.kind == OutcomeKind.WARNING
    assert outcome.fault == FaultKind.AMBIGUOUS_WRITE
    assert outcome.flash.level == FlashLevel.WARNING
    assert outcome.message == "Item may not have been updated. Please check the database."


def test_empty_create_confirmation_is_a_warning(controller, fake_store, run):
    fake_store.empty_writes.add("POST")
    outcome = run(controller.submit_create({"name": "Widget", "description": "y"}))
    assert outcome.kind == OutcomeKind.WARNING
    assert outcome.message == "Item may not have been created. Please check the database."


def test_destroy_twice(controller, fake_store, run):
    row = fake_store.seed("items", name="Widget", description="x")

    first = run(controller.destroy(row["id"]))
    assert first.flash.level == FlashLevel.SUCCESS
    assert first.message == "Item deleted successfully."

    second = run(controller.destroy(row["id"]))
    assert second.kind == OutcomeKind.REDIRECT
    assert second.flash.level == FlashLevel.ERROR
    assert second.message == "Failed to delete item."

    assert isinstance(run(controller.client.get_by_id("items", row["id"])), NotFound)


def test_show_and_edit_form(controller, fake_store, run):
    row = fake_store.seed("items", name="Widget", description="x")

    assert run(controller.show(row["id"])).payload["name"] == "Widget"

    form = run(controller.show_edit_form(row["id"]))
    assert form.kind == OutcomeKind.SUCCESS
    assert form.payload["fields"] == {"name": "Widget", "description": "x"}

    for outcome in (run(controller.show("999")), run(controller.show_edit_form("999"))):
        assert outcome.kind == OutcomeKind.REDIRECT
        assert outcome.message == "Item not found."


def test_create_form_template(controller):
    outcome = controller.show_create_form()
    assert outcome.payload == {"fields": {"name": "", "description": ""}}


def test_list_failure_when_store_is_down(controller, fake_store, run):
    fake_store.offline = True
    outcome = run(controller.list())
    assert outcome.kind == OutcomeKind.FAILURE
    assert outcome.fault == FaultKind.REMOTE_UNAVAILABLE
    assert outcome.message.startswith("Error retrieving items:")


def test_store_faults_on_writes_become_error_redirects(controller, fake_store, run):
    row = fake_store.seed("items", name="Widget", description="x")

    fake_store.reject_writes = 409
    created = run(controller.submit_create({"name": "Widget", "description": "y"}))
    assert created.kind == OutcomeKind.REDIRECT
    assert created.fault == FaultKind.REMOTE_REJECTED
    assert created.target == "/items/create"
    assert "duplicate key" in created.message
    assert created.old_input == {"name": "Widget", "description": "y"}

    fake_store.reject_writes = None
    fake_store.offline = True
    for outcome in (
        run(controller.submit_update(row["id"], {"name": "Widget", "description": "y"})),
        run(controller.destroy(row["id"])),
        run(controller.show(row["id"])),
    ):
        assert outcome.kind == OutcomeKind.REDIRECT
        assert outcome.flash.level == FlashLevel.ERROR
        assert outcome.fault == FaultKind.REMOTE_UNAVAILABLE

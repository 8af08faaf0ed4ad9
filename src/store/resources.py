"""
Resource Definitions

A Resource bundles what differs between record types: the collection it
lives in, how input is validated and which fields are forwarded, and the
wording/routes used when describing outcomes. RecordController is generic
over it.
"""

from typing import Any, Dict, List, Optional, Tuple, Type
from pydantic import BaseModel

from src.store.validation import ItemInput, UserInput, ValidationResult, validate


class Resource:
    """Capability set of one record type."""

    def __init__(
        self,
        collection: str,
        label: str,
        input_model: Type[BaseModel],
        route: Optional[str] = None,
        plural: Optional[str] = None,
    ):
        """
        Args:
            collection: Collection name in the remote store
            label: Singular, lower-case name used in messages ("item")
            input_model: Pydantic model holding the field rules
            route: URL prefix of the resource (defaults to "/{collection}")
            plural: Plural name used in messages (defaults to label + "s")
        """
        self.collection = collection
        self.label = label
        self.plural = plural or f"{label}s"
        self.input_model = input_model
        self.route = route or f"/{collection}"

    @property
    def title(self) -> str:
        return self.label.capitalize()

    @property
    def field_names(self) -> List[str]:
        return list(self.input_model.model_fields)

    @property
    def listing_target(self) -> str:
        return self.route

    @property
    def form_target(self) -> str:
        return f"{self.route}/create"

    def edit_target(self, record_id: Any) -> str:
        return f"{self.route}/{record_id}/edit"

    def template(self) -> Dict[str, Any]:
        """Empty field template for a create form."""
        return {name: "" for name in self.field_names}

    def validate(self, data: Dict[str, Any]) -> Tuple[Dict[str, Any], ValidationResult]:
        """
        Validate submitted input.

        Returns:
            (fields to forward to the store, errors); fields is empty when
            errors is not
        """
        parsed, errors = validate(self.input_model, data)
        if parsed is None:
            return {}, errors
        return parsed.dict(), {}

    def echo(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Submitted input worth redisplaying in a form."""
        return {k: v for k, v in data.items() if k in self.field_names}


def item_resource(collection: str = "items") -> Resource:
    return Resource(collection=collection, label="item", input_model=ItemInput, route="/items")


def user_resource(collection: str = "users") -> Resource:
    return Resource(collection=collection, label="user", input_model=UserInput, route="/users")

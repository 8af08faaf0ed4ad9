"""
Record Controller

Mediates between transport-level input and the remote store. One controller
instance serves one Resource; every operation is single-shot and turns any
client result (record, NotFound, StoreFault, empty confirmation) into an
Outcome. Nothing raised by the remote side escapes this layer.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Union

from src.store.client import StoreClient
from src.store.log import get_logger
from src.store.outcomes import FlashLevel, Outcome
from src.store.resources import Resource
from src.store.results import FaultKind, NotFound, StoreFault


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def timestamp(moment: datetime) -> str:
    """ISO-8601 timestamp as stored in created_at/updated_at."""
    return moment.isoformat()


class RecordController:
    """
    Generic CRUD controller.

    Handles:
    - list / show / create form / edit form
    - create and update with validation and timestamp stamping
    - destroy
    """

    def __init__(
        self,
        client: StoreClient,
        resource: Resource,
        logger: Union[logging.Logger, logging.LoggerAdapter, None] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize controller.

        Args:
            client: Remote store client
            resource: Resource served by this controller
            logger: Logger to report outcomes to (defaults to a logger named after the resource)
            clock: Source of the current time for timestamps
        """
        self.client = client
        self.resource = resource
        self.logger = logger or get_logger(
            f"{__name__}.{resource.collection}", collection=resource.collection
        )
        self.clock = clock

    @property
    def collection(self) -> str:
        return self.resource.collection

    def _not_found(self, record_id: Any) -> Outcome:
        self.logger.info(f"{self.resource.title} not found: {record_id}", extra={"record_id": str(record_id)})
        return Outcome.redirect(
            self.resource.listing_target,
            FlashLevel.ERROR,
            f"{self.resource.title} not found.",
            fault=FaultKind.NOT_FOUND,
        )

    def _fault_redirect(
        self,
        fault: StoreFault,
        action: str,
        target: Optional[str] = None,
        old_input: Optional[Dict[str, Any]] = None,
    ) -> Outcome:
        message = f"Error {action} {self.resource.label}: {fault.describe()}"
        self.logger.error(message, extra={"fault": fault.kind.value})
        return Outcome.redirect(
            target or self.resource.listing_target,
            FlashLevel.ERROR,
            message,
            fault=fault.kind,
            old_input=old_input,
        )

    def _invalid(self, target: str, errors: Dict[str, Any], data: Dict[str, Any]) -> Outcome:
        self.logger.info(
            f"Rejected {self.resource.label} input",
            extra={"fields": sorted(errors)},
        )
        return Outcome.redirect(
            target,
            FlashLevel.ERROR,
            fault=FaultKind.VALIDATION_FAILED,
            errors=errors,
            old_input=self.resource.echo(data),
        )

    # ========== Read Operations ==========

    async def list(self) -> Outcome:
        """All records of the collection, or a Failure carrying the fault message."""
        records = await self.client.list_all(self.collection)
        if isinstance(records, StoreFault):
            message = f"Error retrieving {self.resource.plural}: {records.describe()}"
            self.logger.error(message, extra={"fault": records.kind.value})
            return Outcome.failure(records.kind, message)

        self.logger.info(f"{self.resource.plural.capitalize()} retrieved", extra={"count": len(records)})
        return Outcome.success(records)

    async def show(self, record_id: Any) -> Outcome:
        record = await self.client.get_by_id(self.collection, record_id)
        if isinstance(record, NotFound):
            return self._not_found(record_id)
        if isinstance(record, StoreFault):
            return self._fault_redirect(record, "retrieving")
        return Outcome.success(record)

    def show_create_form(self) -> Outcome:
        return Outcome.success({"fields": self.resource.template()})

    async def show_edit_form(self, record_id: Any) -> Outcome:
        """Pre-populated edit template; unknown ids redirect to the listing."""
        record = await self.client.get_by_id(self.collection, record_id)
        if isinstance(record, NotFound):
            return self._not_found(record_id)
        if isinstance(record, StoreFault):
            return self._fault_redirect(record, "retrieving")
        fields = {name: record.get(name, "") for name in self.resource.field_names}
        return Outcome.success({"record": record, "fields": fields})

    # ========== Write Operations ==========

    async def submit_create(self, data: Dict[str, Any]) -> Outcome:
        """
        Validate and create a record.

        Both timestamps are stamped from a single clock reading. An empty
        confirmation from the store yields a WARNING outcome since the write
        may or may not have happened.
        """
        fields, errors = self.resource.validate(data)
        if errors:
            return self._invalid(self.resource.form_target, errors, data)

        now = timestamp(self.clock())
        fields["created_at"] = now
        fields["updated_at"] = now

        self.logger.info(f"Creating {self.resource.label}", extra={"data": fields})
        result = await self.client.create(self.collection, fields)

        if isinstance(result, StoreFault):
            return self._fault_redirect(
                result, "creating", target=self.resource.form_target, old_input=self.resource.echo(data)
            )
        if not result:
            self.logger.warning(f"Empty result from store create operation on {self.collection}")
            return Outcome.warning(
                self.resource.listing_target,
                f"{self.resource.title} may not have been created. Please check the database.",
            )

        self.logger.info(f"{self.resource.title} created successfully", extra={"record_id": result.get("id")})
        return Outcome.redirect(
            self.resource.listing_target,
            FlashLevel.SUCCESS,
            f"{self.resource.title} created successfully.",
            payload=result,
        )

    async def submit_update(self, record_id: Any, data: Dict[str, Any]) -> Outcome:
        """
        Validate and update a record.

        Only updated_at is stamped; created_at is never sent.
        """
        fields, errors = self.resource.validate(data)
        if errors:
            return self._invalid(self.resource.edit_target(record_id), errors, data)

        existing = await self.client.get_by_id(self.collection, record_id)
        if isinstance(existing, NotFound):
            return self._not_found(record_id)
        if isinstance(existing, StoreFault):
            return self._fault_redirect(existing, "updating")

        fields["updated_at"] = timestamp(self.clock())
        result = await self.client.update(self.collection, record_id, fields)

        if isinstance(result, NotFound):
            return self._not_found(record_id)
        if isinstance(result, StoreFault):
            return self._fault_redirect(
                result,
                "updating",
                target=self.resource.edit_target(record_id),
                old_input=self.resource.echo(data),
            )
        if not result:
            self.logger.warning(
                f"Empty result from store update operation on {self.collection}",
                extra={"record_id": str(record_id)},
            )
            return Outcome.warning(
                self.resource.listing_target,
                f"{self.resource.title} may not have been updated. Please check the database.",
            )

        self.logger.info(f"{self.resource.title} updated successfully", extra={"record_id": str(record_id)})
        return Outcome.redirect(
            self.resource.listing_target,
            FlashLevel.SUCCESS,
            f"{self.resource.title} updated successfully.",
            payload=result,
        )

    async def destroy(self, record_id: Any) -> Outcome:
        deleted = await self.client.delete(self.collection, record_id)
        if isinstance(deleted, StoreFault):
            return self._fault_redirect(deleted, "deleting")
        if not deleted:
            self.logger.warning(f"Nothing deleted for {self.resource.label}", extra={"record_id": str(record_id)})
            return Outcome.redirect(
                self.resource.listing_target,
                FlashLevel.ERROR,
                f"Failed to delete {self.resource.label}.",
                fault=FaultKind.NOT_FOUND,
            )

        self.logger.info(f"{self.resource.title} deleted", extra={"record_id": str(record_id)})
        return Outcome.redirect(
            self.resource.listing_target,
            FlashLevel.SUCCESS,
            f"{self.resource.title} deleted successfully.",
        )

"""
Remote Store Client

This module provides a generic client for the hosted record store's REST data API.
Every collection (items, users, ...) is reached through the same PostgREST-style
interface; faults are returned as values instead of being raised.
"""

import logging
from typing import Optional, Dict, Any, List, Union
import httpx

from src.store.results import (
    FaultKind,
    NotFound,
    Record,
    StoreFault,
)

logger = logging.getLogger(__name__)

EMPTY_BODY = object()

# Postgres "invalid text representation", e.g. a non-numeric id on a bigint column
INVALID_TEXT_REPRESENTATION = "22P02"


def fault_from_response(response: httpx.Response, what: str) -> StoreFault:
    """
    Map a non-2xx store response to a StoreFault.

    Auth failures (401/403) and server errors are treated as the store being
    unavailable; any other 4xx is a rejection of the payload.
    """
    status_code = response.status_code
    if status_code in (401, 403) or status_code >= 500:
        return StoreFault(
            kind=FaultKind.REMOTE_UNAVAILABLE,
            message=f"Remote store unavailable while trying to {what}",
            details=f"HTTP {status_code}",
            status_code=status_code,
        )
    return StoreFault(
        kind=FaultKind.REMOTE_REJECTED,
        message=f"Remote store rejected the request to {what}",
        details=rejection_details(response),
        code=error_code(response),
        status_code=status_code,
    )


def rejection_details(response: httpx.Response) -> str:
    """Pull the store's explanation out of an error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        parts = [
            str(body[k]) for k in ("message", "msg", "error_description", "details", "hint")
            if body.get(k)
        ]
        if parts:
            return "; ".join(parts)
    return str(body)


def error_code(response: httpx.Response) -> Optional[str]:
    """Machine-readable error code of an error body (PostgREST `code`, auth `error_code`)."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    for key in ("error_code", "code"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def is_malformed_id(response: httpx.Response) -> bool:
    """True when the store refused an id filter because the id cannot be of the column's type."""
    return response.status_code == 400 and error_code(response) == INVALID_TEXT_REPRESENTATION


def fault_from_transport(exc: httpx.RequestError, what: str) -> StoreFault:
    return StoreFault(
        kind=FaultKind.REMOTE_UNAVAILABLE,
        message=f"Failed to reach remote store while trying to {what}",
        details=str(exc) or exc.__class__.__name__,
    )


def decode_body(response: httpx.Response, what: str) -> Any:
    """
    Decode a 2xx JSON body.

    Returns EMPTY_BODY for a body with no content, or a StoreFault if the body
    is not JSON.
    """
    if not response.content or not response.content.strip():
        return EMPTY_BODY
    try:
        return response.json()
    except ValueError:
        return StoreFault(
            kind=FaultKind.REMOTE_UNAVAILABLE,
            message=f"Remote store returned an undecodable body while trying to {what}",
            details=response.text[:200],
            status_code=response.status_code,
        )


def first_row(body: Any) -> Optional[Record]:
    """Return the first row of a representation body, or None if there is none."""
    if body is EMPTY_BODY or body is None:
        return None
    if isinstance(body, list):
        return body[0] if body else None
    if isinstance(body, dict):
        return body or None
    return None


class StoreClient:
    """
    Generic remote store client.

    This client handles HTTP communication with the record store, providing
    CRUD operations over any named collection. All requests carry the
    configured API key.

    **Remote Interface** (PostgREST):

    1. GET    /{collection}?select=*                 - List records
    2. GET    /{collection}?id=eq.{id}&select=*      - Query one record
    3. POST   /{collection}                          - Create record
    4. PATCH  /{collection}?id=eq.{id}               - Update record
    5. DELETE /{collection}?id=eq.{id}               - Delete record
    6. GET    /{collection}?{field}=eq.{value}      - Search by field

    Writes ask for `Prefer: return=representation` so the stored row comes back.
    No retry and no caching is performed: a transport fault on a write leaves
    its effect unknown.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        http_client: httpx.AsyncClient,
        rest_path: str = "/rest/v1",
    ):
        """
        Initialize store client.

        Args:
            base_url: Project URL of the remote store
            api_key: API key (sent as apikey header and bearer token)
            http_client: Shared httpx client for connection pooling
            rest_path: Path prefix of the REST data API
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.http_client = http_client
        self.rest_path = "/" + rest_path.strip("/")

    def _url(self, collection: str) -> str:
        return f"{self.base_url}{self.rest_path}/{collection}"

    def _build_headers(self, write: bool = False) -> Dict[str, str]:
        """
        Build HTTP headers with store credentials.

        Args:
            write: Whether the request should return the written representation

        Returns:
            Dict of HTTP headers
        """
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if write:
            headers["Prefer"] = "return=representation"
        return headers

    async def _send(
        self,
        method: str,
        collection: str,
        what: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        write: bool = False,
    ) -> Union[httpx.Response, StoreFault]:
        url = self._url(collection)
        try:
            return await self.http_client.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._build_headers(write),
            )
        except httpx.RequestError as e:
            logger.error(
                f"Failed to connect to remote store: {str(e)}",
                extra={"collection": collection, "url": url, "method": method}
            )
            return fault_from_transport(e, what)

    @staticmethod
    def _id_filter(record_id: Any) -> Dict[str, str]:
        return {"id": f"eq.{record_id}"}

    async def list_all(self, collection: str) -> Union[List[Record], StoreFault]:
        """
        Fetch every record of a collection.

        Returns:
            List of records (empty if none exist), or a StoreFault

        Example:
            >>> await store.list_all("items")
        """
        logger.info(f"Listing {collection}", extra={"collection": collection})
        return await self._select(collection, f"list {collection}", {"select": "*"})

    async def find_by(self, collection: str, field: str, value: Any) -> Union[List[Record], StoreFault]:
        """
        Fetch the records whose `field` equals `value`.

        Example:
            >>> await store.find_by("users", "email", "alice@example.com")
        """
        logger.info(
            f"Searching {collection} by {field}",
            extra={"collection": collection, "field": field}
        )
        params = {field: f"eq.{value}", "select": "*"}
        return await self._select(collection, f"search {collection} by {field}", params)

    async def _select(
        self, collection: str, what: str, params: Dict[str, str]
    ) -> Union[List[Record], StoreFault]:
        response = await self._send("GET", collection, what, params=params)
        if isinstance(response, StoreFault):
            return response
        if response.is_error:
            logger.error(
                f"Store query failed: {response.status_code}",
                extra={"collection": collection, "status_code": response.status_code}
            )
            return fault_from_response(response, what)

        body = decode_body(response, what)
        if isinstance(body, StoreFault):
            return body
        if body is EMPTY_BODY or body is None:
            records: List[Record] = []
        elif isinstance(body, list):
            records = body
        else:
            records = [body]

        logger.info(
            f"{collection.capitalize()} retrieved",
            extra={"collection": collection, "count": len(records)}
        )
        return records

    async def get_by_id(self, collection: str, record_id: Any) -> Union[Record, NotFound, StoreFault]:
        """
        Query one record by id.

        Returns:
            The record, NotFound when the id does not exist, or a StoreFault

        Example:
            >>> await store.get_by_id("items", "42")
        """
        what = f"read {collection} {record_id}"
        logger.info(
            f"Querying {collection}: {record_id}",
            extra={"collection": collection, "record_id": str(record_id)}
        )

        params = {**self._id_filter(record_id), "select": "*"}
        response = await self._send("GET", collection, what, params=params)
        if isinstance(response, StoreFault):
            return response
        if response.status_code == 404 or is_malformed_id(response):
            return NotFound(collection=collection, record_id=str(record_id))
        if response.is_error:
            logger.error(
                f"Store query failed: {response.status_code}",
                extra={"collection": collection, "record_id": str(record_id), "status_code": response.status_code}
            )
            return fault_from_response(response, what)

        body = decode_body(response, what)
        if isinstance(body, StoreFault):
            return body
        record = first_row(body)
        if record is None:
            logger.info(
                f"{collection.capitalize()} not found: {record_id}",
                extra={"collection": collection, "record_id": str(record_id)}
            )
            return NotFound(collection=collection, record_id=str(record_id))
        return record

    async def create(self, collection: str, fields: Dict[str, Any]) -> Union[Optional[Record], StoreFault]:
        """
        Create a record.

        Returns:
            The stored record (with generated id), None if the store confirmed
            nothing, or a StoreFault

        Example:
            >>> await store.create("items", {"name": "Widget", "description": "A small widget"})
        """
        what = f"create {collection}"
        logger.info(f"Creating {collection}", extra={"collection": collection, "data": fields})

        response = await self._send("POST", collection, what, json=fields, write=True)
        if isinstance(response, StoreFault):
            return response
        if response.is_error:
            logger.error(
                f"Store create failed: {response.status_code}",
                extra={"collection": collection, "status_code": response.status_code}
            )
            return fault_from_response(response, what)

        body = decode_body(response, what)
        if isinstance(body, StoreFault):
            return body
        record = first_row(body)
        if record is None:
            logger.warning(
                f"Empty result from store create on {collection}",
                extra={"collection": collection, "status_code": response.status_code}
            )
        return record

    async def update(
        self, collection: str, record_id: Any, fields: Dict[str, Any]
    ) -> Union[Optional[Record], NotFound, StoreFault]:
        """
        Update a record (partial update).

        Returns:
            The updated record, None if the store confirmed nothing,
            NotFound on HTTP 404, or a StoreFault

        Example:
            >>> await store.update("items", "42", {"name": "Gadget"})
        """
        what = f"update {collection} {record_id}"
        logger.info(
            f"Updating {collection}: {record_id}",
            extra={"collection": collection, "record_id": str(record_id)}
        )

        response = await self._send(
            "PATCH", collection, what, params=self._id_filter(record_id), json=fields, write=True
        )
        if isinstance(response, StoreFault):
            return response
        if response.status_code == 404 or is_malformed_id(response):
            return NotFound(collection=collection, record_id=str(record_id))
        if response.is_error:
            logger.error(
                f"Store update failed: {response.status_code}",
                extra={"collection": collection, "record_id": str(record_id), "status_code": response.status_code}
            )
            return fault_from_response(response, what)

        body = decode_body(response, what)
        if isinstance(body, StoreFault):
            return body
        record = first_row(body)
        if record is None:
            logger.warning(
                f"Empty result from store update on {collection}: {record_id}",
                extra={"collection": collection, "record_id": str(record_id)}
            )
        return record

    async def delete(self, collection: str, record_id: Any) -> Union[bool, StoreFault]:
        """
        Delete a record.

        Returns:
            True if a row was deleted, False if nothing matched, or a StoreFault

        Example:
            >>> await store.delete("items", "42")
        """
        what = f"delete {collection} {record_id}"
        logger.info(
            f"Deleting {collection}: {record_id}",
            extra={"collection": collection, "record_id": str(record_id)}
        )

        response = await self._send(
            "DELETE", collection, what, params=self._id_filter(record_id), write=True
        )
        if isinstance(response, StoreFault):
            return response
        if response.status_code == 404 or is_malformed_id(response):
            return False
        if response.is_error:
            logger.error(
                f"Store delete failed: {response.status_code}",
                extra={"collection": collection, "record_id": str(record_id), "status_code": response.status_code}
            )
            return fault_from_response(response, what)

        body = decode_body(response, what)
        if isinstance(body, StoreFault):
            return body
        if body is EMPTY_BODY:
            # 204 without representation: the store accepted the delete
            deleted = True
        else:
            deleted = first_row(body) is not None

        logger.info(
            f"{collection.capitalize()} delete finished: {record_id}",
            extra={"collection": collection, "record_id": str(record_id), "deleted": deleted}
        )
        return deleted

    async def check_health(self) -> bool:
        """
        Check if the store is reachable.

        Uses the shared client's configured timeouts.

        Returns:
            True if the store answers without a server error, False otherwise
        """
        try:
            url = f"{self.base_url}{self.rest_path}/"
            response = await self.http_client.get(url, headers=self._build_headers())
            return response.status_code < 500
        except httpx.HTTPError as e:
            logger.warning(f"Remote store health check failed: {str(e)}")
            return False

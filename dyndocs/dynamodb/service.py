# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
DynamoDB service for storing and retrieving JSON documents.

This module provides the DocumentDynamoDBService class, which encodes
documents into DynamoDB typed attributes, executes one store primitive per
operation, decodes the response and publishes a timing event for every
operation, including failed and cancelled ones.
"""

import logging
from typing import Any, Awaitable, Dict, Iterable, List, Optional

from dyndocs.codec import (
    unwrap,
    unwrap_items,
    unwrap_mixed,
    wrap,
    wrap_key,
    wrap_mixed,
)
from dyndocs.config import DynamoDBConfig
from dyndocs.dynamodb.client import DynamoDBClient, StoreClientError
from dyndocs.events import EventEmitter, EventHandler
from dyndocs.models import (
    EVENT_NAME,
    UNKNOWN_CORRELATION_ID,
    DecodeResult,
    EventCategory,
    ItemKey,
    JsonDocument,
    OperationEvent,
    TypedItem,
)
from dyndocs.utils import elapsed_ms, start_timer

logger = logging.getLogger(__name__)


def _put_updates(attributes: TypedItem) -> Dict[str, Dict[str, Any]]:
    """Build an AttributeUpdates map that PUTs every attribute."""
    return {
        name: {"Action": "PUT", "Value": value} for name, value in attributes.items()
    }


def _error_code(error: Optional[BaseException]) -> Optional[str]:
    """Store error code for a failed operation, or the exception class name."""
    if error is None:
        return None
    if isinstance(error, StoreClientError):
        return error.error_code
    return type(error).__name__


class DocumentDynamoDBService:
    """
    Service for storing JSON documents in DynamoDB.

    Every operation is a coroutine that resolves or raises exactly once and
    publishes exactly one OperationEvent under the "dynamodb" event name,
    even when it fails or is cancelled. Store errors are raised as
    StoreClientError and are never retried here.
    """

    def __init__(
        self,
        dynamodb_client: Optional[DynamoDBClient] = None,
        config: Optional[DynamoDBConfig] = None,
        emitter: Optional[EventEmitter] = None,
    ):
        """
        Initialize the DocumentDynamoDBService.

        Args:
            dynamodb_client: Optional DynamoDBClient instance. If not provided, a new one will be created.
            config: Optional DynamoDBConfig. Used only if dynamodb_client is not provided.
            emitter: Optional EventEmitter. A new one is created per service if not provided.
        """
        self.client = dynamodb_client or DynamoDBClient(config=config)
        self.emitter = emitter or EventEmitter()

    def is_local(self) -> bool:
        """True when the service talks to a local development endpoint."""
        return self.client.is_local()

    def on(self, event_name: str, handler: EventHandler) -> EventHandler:
        """Subscribe to operation events, e.g. service.on("dynamodb", handler)."""
        return self.emitter.on(event_name, handler)

    def off(self, event_name: str, handler: EventHandler) -> bool:
        return self.emitter.off(event_name, handler)

    def _notify(
        self,
        category: EventCategory,
        correlation_id: Optional[str],
        table_name: Optional[str],
        key: Optional[Dict[str, Any]],
        start: float,
        error: Optional[BaseException] = None,
    ) -> None:
        event = OperationEvent(
            category=category,
            correlation_id=correlation_id or UNKNOWN_CORRELATION_ID,
            key=dict(key or {}),
            duration_ms=elapsed_ms(start),
            table_name=table_name,
            succeeded=error is None,
            error_code=_error_code(error),
        )
        self.emitter.emit(EVENT_NAME, event)

    async def _observe(
        self,
        category: EventCategory,
        request: Awaitable[Any],
        start: float,
        correlation_id: Optional[str] = None,
        table_name: Optional[str] = None,
        key: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Await a store request and publish exactly one event, whatever the outcome."""
        try:
            response = await request
        except BaseException as e:
            # Includes cancellation, e.g. a caller's asyncio.wait_for timing out
            self._notify(category, correlation_id, table_name, key, start, error=e)
            raise
        self._notify(category, correlation_id, table_name, key, start)
        return response

    async def _execute(
        self,
        category: EventCategory,
        operation: str,
        params: Dict[str, Any],
        start: float,
        correlation_id: Optional[str] = None,
        table_name: Optional[str] = None,
        key: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Run one store primitive and publish its event."""
        request = self.client.call(
            operation,
            params,
            table_name=table_name,
            key=key,
            correlation_id=correlation_id,
        )
        return await self._observe(
            category, request, start, correlation_id, table_name, key
        )

    async def _list_table_pages(self, correlation_id: Optional[str]) -> List[str]:
        """Follow LastEvaluatedTableName until every table name is collected."""
        names: List[str] = []
        params: Dict[str, Any] = {}
        while True:
            response = await self.client.call(
                "list_tables", params, correlation_id=correlation_id
            )
            names.extend(response.get("TableNames", []))
            last_evaluated = response.get("LastEvaluatedTableName")
            if not last_evaluated:
                return names
            params = {"ExclusiveStartTableName": last_evaluated}

    async def get_item(
        self, correlation_id: Optional[str], table_name: str, key: ItemKey
    ) -> DecodeResult:
        """
        Get a document stored in full JSON mode.

        Args:
            correlation_id: Caller token threaded to the operation event
            table_name: DynamoDB table name
            key: Primary key of the item

        Returns:
            DecodeResult with key fields stripped; empty if the item does not exist
        """
        start = start_timer()
        params = {"Key": wrap_key(key), "TableName": table_name}
        logger.debug(f"get_item called with params {params}")

        response = await self._execute(
            EventCategory.READ, "get_item", params, start, correlation_id, table_name, key
        )
        return unwrap(response.get("Item"), key)

    async def get_mixed_item(
        self,
        correlation_id: Optional[str],
        table_name: str,
        key: ItemKey,
        json_keys: Iterable[str],
    ) -> DecodeResult:
        """
        Get a document stored in mixed mode.

        Only the fields named in json_keys are parsed as JSON; the others are
        returned as their native values.
        """
        start = start_timer()
        params = {"Key": wrap_key(key), "TableName": table_name}
        logger.debug(f"get_mixed_item called with params {params}")

        response = await self._execute(
            EventCategory.READ, "get_item", params, start, correlation_id, table_name, key
        )
        return unwrap_mixed(response.get("Item"), key, json_keys)

    async def put_item(
        self,
        correlation_id: Optional[str],
        table_name: str,
        key: ItemKey,
        document: Optional[JsonDocument],
    ) -> None:
        """
        Store a document in full JSON mode, replacing any existing item.

        Every document field is stored as a JSON string attribute; the key
        fields are stored natively.
        """
        start = start_timer()
        item = wrap(document)
        item.update(wrap_key(key))
        params = {"Item": item, "TableName": table_name}

        await self._execute(
            EventCategory.CREATE, "put_item", params, start, correlation_id, table_name, key
        )

    async def put_mixed_item(
        self,
        correlation_id: Optional[str],
        table_name: str,
        key: ItemKey,
        document: Optional[JsonDocument],
        json_keys: Iterable[str],
    ) -> None:
        """
        Store a document in mixed mode, replacing any existing item.

        Args:
            correlation_id: Caller token threaded to the operation event
            table_name: DynamoDB table name
            key: Primary key of the item
            document: Document to store; None stores the key only
            json_keys: Fields to store as JSON strings, all others are stored natively
        """
        start = start_timer()
        item = wrap_mixed(document, json_keys)
        item.update(wrap_key(key))
        params = {"Item": item, "TableName": table_name}

        await self._execute(
            EventCategory.CREATE, "put_item", params, start, correlation_id, table_name, key
        )

    async def update_item(
        self,
        correlation_id: Optional[str],
        table_name: str,
        key: ItemKey,
        document: JsonDocument,
    ) -> None:
        """
        Replace the named attributes of an item with JSON string values.

        Attributes not present in document are left untouched; the item is
        created if it does not exist.
        """
        start = start_timer()
        params = {
            "Key": wrap_key(key),
            "AttributeUpdates": _put_updates(wrap(document)),
            "TableName": table_name,
            "ReturnValues": "ALL_NEW",
        }

        await self._execute(
            EventCategory.UPDATE, "update_item", params, start, correlation_id, table_name, key
        )

    async def update_mixed_item(
        self,
        correlation_id: Optional[str],
        table_name: str,
        key: ItemKey,
        document: JsonDocument,
        json_keys: Iterable[str],
    ) -> None:
        """Replace the named attributes of an item using mixed encoding."""
        start = start_timer()
        params = {
            "Key": wrap_key(key),
            "AttributeUpdates": _put_updates(wrap_mixed(document, json_keys)),
            "TableName": table_name,
        }

        await self._execute(
            EventCategory.UPDATE, "update_item", params, start, correlation_id, table_name, key
        )

    async def delete_attribute(
        self,
        correlation_id: Optional[str],
        table_name: str,
        key: ItemKey,
        attribute_name: str,
    ) -> DecodeResult:
        """
        Delete a single attribute from an item.

        The store is asked for all old values of the item; the returned
        document is that prior item with the key fields and the deleted
        attribute stripped.

        Args:
            correlation_id: Caller token threaded to the operation event
            table_name: DynamoDB table name
            key: Primary key of the item
            attribute_name: Name of the attribute to delete

        Returns:
            DecodeResult of the remaining attributes
        """
        start = start_timer()
        params = {
            "Key": wrap_key(key),
            "TableName": table_name,
            "AttributeUpdates": {attribute_name: {"Action": "DELETE"}},
            "ReturnValues": "ALL_OLD",
        }
        logger.debug(f"delete_attribute will update attribute with params {params}")

        response = await self._execute(
            EventCategory.UPDATE, "update_item", params, start, correlation_id, table_name, key
        )
        logger.debug(f"delete_attribute return from update {response}")

        stripped = list(key) + [attribute_name]
        return unwrap(response.get("Attributes"), stripped)

    async def remove_item(
        self, correlation_id: Optional[str], table_name: str, key: ItemKey
    ) -> None:
        """Delete an item."""
        start = start_timer()
        params = {"Key": wrap_key(key), "TableName": table_name}

        await self._execute(
            EventCategory.DELETE, "delete_item", params, start, correlation_id, table_name, key
        )

    async def query_table(
        self, correlation_id: Optional[str], params: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        """
        Run a query built with native DynamoDB parameters.

        Items are unwrapped from typed attributes only; JSON string fields
        are returned as stored, since query predicates work on the store's
        native types.

        Args:
            correlation_id: Caller token threaded to the operation event
            params: Complete boto3 query parameters, including TableName

        Returns:
            Items in the order returned by DynamoDB
        """
        start = start_timer()
        response = await self._execute(
            EventCategory.QUERY,
            "query",
            params,
            start,
            correlation_id,
            params.get("TableName"),
        )
        return unwrap_items(response.get("Items"))

    async def list_tables(self, correlation_id: Optional[str] = None) -> List[str]:
        """
        List the table names visible to the configured credentials.

        Follows every result page and publishes a single Read event for the
        whole listing.
        """
        start = start_timer()
        return await self._observe(
            EventCategory.READ,
            self._list_table_pages(correlation_id),
            start,
            correlation_id,
        )

    async def create_table(
        self, table_definition: Dict[str, Any], correlation_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create a table from a native DynamoDB table definition.

        Returns:
            The raw create_table response
        """
        start = start_timer()
        return await self._execute(
            EventCategory.CREATE,
            "create_table",
            table_definition,
            start,
            correlation_id,
            table_definition.get("TableName"),
        )

    async def delete_table(
        self, correlation_id: Optional[str], table_name: str
    ) -> Dict[str, Any]:
        """Delete a table and return the raw delete_table response."""
        start = start_timer()
        return await self._execute(
            EventCategory.DELETE,
            "delete_table",
            {"TableName": table_name},
            start,
            correlation_id,
            table_name,
        )

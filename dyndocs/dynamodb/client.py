# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
DynamoDB client for executing single store primitives without blocking the
event loop.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from dyndocs.config import DynamoDBConfig, get_config

logger = logging.getLogger(__name__)

# Store primitives exposed by the boto3 low-level client
SUPPORTED_OPERATIONS = (
    "get_item",
    "put_item",
    "update_item",
    "delete_item",
    "query",
    "list_tables",
    "create_table",
    "delete_table",
)


class StoreClientError(Exception):
    """Error raised by the underlying DynamoDB call, with request context."""

    def __init__(
        self,
        message: str,
        operation: str,
        table_name: Optional[str] = None,
        key: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.table_name = table_name
        self.key = key or {}
        self.correlation_id = correlation_id
        self.original_error = original_error

    @property
    def error_code(self) -> Optional[str]:
        """DynamoDB error code (e.g. ResourceNotFoundException), or the botocore error class name."""
        if isinstance(self.original_error, ClientError):
            return self.original_error.response.get("Error", {}).get("Code")
        if self.original_error is not None:
            return type(self.original_error).__name__
        return None


class DynamoDBClient:
    """
    Thin asynchronous adapter over the boto3 DynamoDB client.

    Each call runs the blocking boto3 request in a worker thread, so
    concurrent operations suspend cooperatively instead of blocking the event
    loop. Retries, timeouts and connection pooling are left to boto3.
    """

    def __init__(
        self,
        config: Optional[DynamoDBConfig] = None,
        dynamodb_client: Optional[Any] = None,
    ):
        """
        Initialize the DynamoDB client.

        Args:
            config: Optional DynamoDBConfig. If not provided, read from the environment.
            dynamodb_client: Optional pre-configured boto3 dynamodb client.
                             If None, a new client will be created from config.
        """
        self.config = get_config(config)
        if dynamodb_client is not None:
            self.dynamodb = dynamodb_client
        else:
            self.dynamodb = boto3.client("dynamodb", **self.config.to_client_kwargs())
            logger.info(
                f"Initialized DynamoDB client (region={self.config.region}, local={self.config.local})"
            )

    def is_local(self) -> bool:
        return self.config.is_local()

    async def call(
        self,
        operation: str,
        params: Dict[str, Any],
        table_name: Optional[str] = None,
        key: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Execute a single DynamoDB primitive.

        Args:
            operation: boto3 method name, one of SUPPORTED_OPERATIONS
            params: Request parameters in the DynamoDB wire format
            table_name: Table name, used for error context
            key: Plain (unwrapped) item key, used for error context
            correlation_id: Caller correlation id, used for error context

        Returns:
            The raw DynamoDB response

        Raises:
            StoreClientError: If the DynamoDB call fails
        """
        if operation not in SUPPORTED_OPERATIONS:
            raise ValueError(f"Unsupported DynamoDB operation: {operation}")

        method = getattr(self.dynamodb, operation)
        try:
            return await asyncio.to_thread(method, **params)
        except (ClientError, BotoCoreError) as e:
            logger.error(
                f"DynamoDB {operation} failed on table {table_name} "
                f"for key {key} (correlation id {correlation_id}): {e}"
            )
            raise StoreClientError(
                f"DynamoDB {operation} failed on table {table_name}: {e}",
                operation=operation,
                table_name=table_name,
                key=key,
                correlation_id=correlation_id,
                original_error=e,
            ) from e

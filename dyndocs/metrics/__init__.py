# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import asyncio
import boto3
import os
import logging
from typing import List, Dict, Any, Optional, Set

from dyndocs.models import OperationEvent

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "DynDocs"

# Initialize clients
_cloudwatch_client = None


def get_cloudwatch_client():
    """
    Get or initialize the CloudWatch client

    Returns:
        boto3 CloudWatch client
    """
    global _cloudwatch_client
    if _cloudwatch_client is None:
        _cloudwatch_client = boto3.client('cloudwatch')
    return _cloudwatch_client


def put_metric(name: str, value: float, unit: str = 'Count',
              dimensions: Optional[List[Dict[str, str]]] = None,
              namespace: Optional[str] = None,
              cloudwatch_client: Optional[Any] = None) -> None:
    """
    Publish a metric to CloudWatch

    Args:
        name: The name of the metric
        value: The value of the metric
        unit: The unit of the metric
        dimensions: Optional list of dimensions
        namespace: Optional metric namespace, defaults to environment variable
        cloudwatch_client: Optional boto3 CloudWatch client to publish with
    """
    dimensions = dimensions or []

    # Get namespace from environment if not provided
    if namespace is None:
        namespace = os.environ.get('METRIC_NAMESPACE', DEFAULT_NAMESPACE)

    logger.debug(f"Publishing metric {name}: {value}")
    try:
        cloudwatch = cloudwatch_client or get_cloudwatch_client()
        cloudwatch.put_metric_data(
            Namespace=namespace,
            MetricData=[{
                'MetricName': name,
                'Value': value,
                'Unit': unit,
                'Dimensions': dimensions
            }]
        )
    except Exception as e:
        logger.error(f"Error publishing metric {name}: {e}")


def create_client_performance_metrics(name: str, duration_ms: float,
                                     is_success: bool = True,
                                     error_type: Optional[str] = None,
                                     dimensions: Optional[List[Dict[str, str]]] = None,
                                     namespace: Optional[str] = None,
                                     cloudwatch_client: Optional[Any] = None) -> None:
    """
    Helper to publish standardized client performance metrics

    Args:
        name: Base name for the metric group
        duration_ms: Duration in milliseconds
        is_success: Whether the operation succeeded
        error_type: Optional error type for failures
        dimensions: Optional list of dimensions applied to every metric
        namespace: Optional metric namespace
        cloudwatch_client: Optional boto3 CloudWatch client to publish with
    """
    options = {
        'dimensions': dimensions,
        'namespace': namespace,
        'cloudwatch_client': cloudwatch_client,
    }

    # Record latency
    put_metric(f"{name}Latency", duration_ms, 'Milliseconds', **options)

    # Record success/failure
    if is_success:
        put_metric(f"{name}Success", 1, **options)
    else:
        put_metric(f"{name}Failure", 1, **options)
        if error_type:
            put_metric(f"{name}Error.{error_type}", 1, **options)


def publish_operation_event(event: OperationEvent,
                            namespace: Optional[str] = None,
                            cloudwatch_client: Optional[Any] = None) -> None:
    """
    Publish latency and outcome metrics for a store operation event

    Args:
        event: The event published by DocumentDynamoDBService
        namespace: Optional metric namespace
        cloudwatch_client: Optional boto3 CloudWatch client to publish with
    """
    dimensions = []
    if event.table_name:
        dimensions.append({'Name': 'TableName', 'Value': event.table_name})

    create_client_performance_metrics(
        event.category.value,
        event.duration_ms,
        is_success=event.succeeded,
        error_type=event.error_code,
        dimensions=dimensions,
        namespace=namespace,
        cloudwatch_client=cloudwatch_client,
    )


class CloudWatchEventPublisher:
    """
    Event handler publishing every store operation event to CloudWatch.

    Event handlers run on the event loop, so when a loop is running the
    blocking CloudWatch calls are handed to the loop's default executor.
    Await flush() to wait for metrics still in flight.

    Usage:
        publisher = CloudWatchEventPublisher()
        service.on("dynamodb", publisher)
        ...
        await publisher.flush()
    """

    def __init__(self, namespace: Optional[str] = None, cloudwatch_client: Optional[Any] = None):
        self.namespace = namespace
        self.cloudwatch_client = cloudwatch_client
        self._pending: Set[asyncio.Future] = set()

    def _publish(self, event: OperationEvent) -> None:
        publish_operation_event(
            event,
            namespace=self.namespace,
            cloudwatch_client=self.cloudwatch_client,
        )

    def __call__(self, event: OperationEvent) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop, publishing inline blocks nobody
            self._publish(event)
            return

        future = loop.run_in_executor(None, self._publish, event)
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)

    @property
    def pending(self) -> int:
        """Number of events whose metrics are still being published."""
        return len(self._pending)

    async def flush(self) -> None:
        """Wait until every metric handed to the executor has been published."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import time
import logging
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Set

logger = logging.getLogger(__name__)


def start_timer() -> float:
    """
    Start timing an operation

    Returns:
        Opaque start marker to pass to elapsed_ms
    """
    return time.perf_counter()


def elapsed_ms(start: float) -> float:
    """
    Milliseconds elapsed since a start marker returned by start_timer

    Args:
        start: The value returned by start_timer()

    Returns:
        Non-negative duration in milliseconds
    """
    return max(0.0, (time.perf_counter() - start) * 1000.0)


def to_decimal(value: float) -> Decimal:
    """
    Convert a float to a Decimal DynamoDB will accept.

    The shortest repr of the float is used so 0.1 becomes Decimal("0.1")
    rather than its exact binary expansion.
    """
    return Decimal(repr(value))


def from_decimal(value: Decimal) -> Any:
    """
    Convert a DynamoDB number back to a plain Python number

    Args:
        value: Decimal returned by the DynamoDB deserializer

    Returns:
        int when the stored number has no fractional digits, float otherwise
    """
    if value.is_nan() or value.is_infinite():
        return float(value)
    if value.as_tuple().exponent >= 0:
        return int(value)
    return float(value)


def normalize_set(values: Set[Any]) -> List[Any]:
    """
    Convert a DynamoDB string, number or binary set to a sorted list

    Args:
        values: Set returned by the DynamoDB deserializer

    Returns:
        Sorted list of plain Python values
    """
    items = [from_decimal(v) if isinstance(v, Decimal) else v for v in values]
    try:
        return sorted(items)
    except TypeError:
        logger.warning(f"Unable to sort set values of mixed types: {items}")
        return items


def key_names(key_fields: Optional[Iterable[str]]) -> Set[str]:
    """
    Names of the key fields to strip from a decoded document

    Args:
        key_fields: A key mapping, or any iterable of field names

    Returns:
        Set of field names
    """
    if not key_fields:
        return set()
    return set(key_fields)

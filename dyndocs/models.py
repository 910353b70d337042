# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Data model for the DynamoDB document store.

This module defines the JSON value type stored in documents, the events
published after every store operation, and the result type returned when a
stored item is decoded back into a document.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

# Recursive JSON value accepted by the codec
JsonValue = Union[
    str, int, float, bool, None, List["JsonValue"], Dict[str, "JsonValue"]
]

# Arbitrary mapping from field name to JSON value
JsonDocument = Dict[str, JsonValue]

# Key fields are always native scalar attributes
KeyValue = Union[str, int, float, bytes]
ItemKey = Dict[str, KeyValue]

# DynamoDB wire form, e.g. {"S": "abc"} or {"N": "42"}
TypedAttribute = Dict[str, Any]
TypedItem = Dict[str, TypedAttribute]

EVENT_NAME = "dynamodb"
UNKNOWN_CORRELATION_ID = "unknown"


class EventCategory(Enum):
    """Category of a completed store operation."""

    CREATE = "Create"
    READ = "Read"
    UPDATE = "Update"
    DELETE = "Delete"
    QUERY = "Query"


@dataclass
class OperationEvent:
    """Timing event published once per completed store operation."""

    category: EventCategory
    correlation_id: str
    key: Dict[str, Any]
    duration_ms: float
    table_name: Optional[str] = None
    succeeded: bool = True
    error_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary representation."""
        return {
            "category": self.category.value,
            "correlationId": self.correlation_id,
            "key": self.key,
            "durationMs": self.duration_ms,
            "tableName": self.table_name,
            "succeeded": self.succeeded,
            "errorCode": self.error_code,
        }


@dataclass
class FieldDecodeError:
    """A single field that could not be decoded from its stored JSON text."""

    field: str
    value: Any
    reason: str


@dataclass
class DecodeResult:
    """
    Document decoded from a stored item.

    Fields that failed to decode are omitted from ``document`` and listed in
    ``errors``; a missing item decodes to an empty document with no errors.
    """

    document: JsonDocument = field(default_factory=dict)
    errors: List[FieldDecodeError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def failed_fields(self) -> List[str]:
        return [error.field for error in self.errors]

# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Document codec for DynamoDB typed attributes.

Documents are stored in one of two ways:

- Full JSON mode (``wrap`` / ``unwrap``): every non-key field is serialized
  to a JSON string and stored as a string attribute, so arbitrary nested
  values can be stored without describing their DynamoDB types.
- Mixed mode (``wrap_mixed`` / ``unwrap_mixed``): only the named JSON fields
  are stored as JSON strings; all other fields keep their native DynamoDB
  type so they can be used in key conditions and filter expressions.

Key fields are never JSON-encoded and are stripped from decoded documents.
"""

import json
import logging
from decimal import Decimal, DecimalException
from typing import Any, Dict, Iterable, List, Optional

from boto3.dynamodb.types import Binary, TypeDeserializer, TypeSerializer

from dyndocs.models import (
    DecodeResult,
    FieldDecodeError,
    ItemKey,
    JsonDocument,
    JsonValue,
    TypedItem,
)
from dyndocs.utils import from_decimal, key_names, normalize_set, to_decimal

logger = logging.getLogger(__name__)

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _check_json_value(value: Any, path: str) -> None:
    """Raise TypeError unless value is a JSON value (str, number, bool, None, list, dict)."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return
    if isinstance(value, list):
        for index, item in enumerate(value):
            _check_json_value(item, f"{path}[{index}]")
        return
    if isinstance(value, dict):
        for name, item in value.items():
            if not isinstance(name, str):
                raise TypeError(f"Field names must be strings, got {name!r} at {path}")
            _check_json_value(item, f"{path}.{name}")
        return
    raise TypeError(
        f"Value of type {type(value).__name__} at {path} is not JSON serializable"
    )


def _to_native(value: Any, path: str) -> Any:
    """Prepare a JSON value for the DynamoDB serializer (floats become Decimal)."""
    if value is None or isinstance(value, (str, bool, int, Decimal, bytes)):
        return value
    if isinstance(value, float):
        return to_decimal(value)
    if isinstance(value, list):
        return [_to_native(item, f"{path}[{index}]") for index, item in enumerate(value)]
    if isinstance(value, dict):
        result = {}
        for name, item in value.items():
            if not isinstance(name, str):
                raise TypeError(f"Field names must be strings, got {name!r} at {path}")
            result[name] = _to_native(item, f"{path}.{name}")
        return result
    raise TypeError(
        f"Value of type {type(value).__name__} at {path} has no DynamoDB type"
    )


def _from_native(value: Any) -> Any:
    """Convert a deserialized DynamoDB value to plain Python values."""
    if isinstance(value, Decimal):
        return from_decimal(value)
    if isinstance(value, Binary):
        return value.value
    if isinstance(value, set):
        return normalize_set(
            {v.value if isinstance(v, Binary) else v for v in value}
        )
    if isinstance(value, list):
        return [_from_native(item) for item in value]
    if isinstance(value, dict):
        return {name: _from_native(item) for name, item in value.items()}
    return value


def to_json_string(value: JsonValue) -> str:
    """
    Serialize a single field value to its stored JSON text.

    Args:
        value: Any JSON value, including plain strings

    Returns:
        Compact JSON text
    """
    _check_json_value(value, "$")
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def wrap_native(values: Optional[Dict[str, Any]]) -> TypedItem:
    """
    Wrap a mapping into typed attributes using DynamoDB type inference.

    Args:
        values: Mapping of field name to value; None is treated as empty

    Returns:
        Mapping of field name to typed attribute, e.g. {"score": {"N": "42"}}

    Raises:
        TypeError: If a value has no DynamoDB representation, including numbers
            outside the DynamoDB number range or precision
    """
    if not values:
        return {}
    item = {}
    for name, value in values.items():
        try:
            item[name] = _serializer.serialize(_to_native(value, name))
        except DecimalException as e:
            # DYNAMODB_CONTEXT traps out-of-range and inexact numbers
            raise TypeError(
                f"Number at {name} cannot be stored as a DynamoDB number: {e!r}"
            ) from e
    return item


def wrap_key(key: ItemKey) -> TypedItem:
    """Wrap key fields as native typed attributes."""
    return wrap_native(key)


def wrap(document: Optional[JsonDocument]) -> TypedItem:
    """
    Encode a document in full JSON mode.

    Every field value, strings included, is serialized to JSON text and
    stored as a string attribute.

    Args:
        document: The document to encode; None or {} encode to {}

    Returns:
        Mapping of field name to {"S": json_text}

    Raises:
        TypeError: If a value is not a JSON value
    """
    if not document:
        return {}
    return {name: {"S": to_json_string(value)} for name, value in document.items()}


def wrap_mixed(
    document: Optional[JsonDocument], json_keys: Optional[Iterable[str]]
) -> TypedItem:
    """
    Encode a document in mixed mode.

    Fields named in json_keys are stored as JSON strings; all other fields
    keep their native DynamoDB type. Names in json_keys that are not in the
    document are ignored.

    Args:
        document: The document to encode; None encodes to {}
        json_keys: Names of the fields to store as JSON text

    Returns:
        Mapping of field name to typed attribute
    """
    if not document:
        return {}
    json_names = set(json_keys or [])
    json_fields = {k: v for k, v in document.items() if k in json_names}
    native_fields = {k: v for k, v in document.items() if k not in json_names}

    item = wrap_native(native_fields)
    item.update(wrap(json_fields))
    return item


def unwrap_native(item: Optional[TypedItem]) -> Dict[str, Any]:
    """
    Unwrap typed attributes into plain values without any JSON decoding.

    Numbers come back as int or float, sets as sorted lists and binary
    values as bytes.

    Args:
        item: Mapping of field name to typed attribute; None unwraps to {}

    Returns:
        Mapping of field name to plain value
    """
    if not item:
        return {}
    return {
        name: _from_native(_deserializer.deserialize(attribute))
        for name, attribute in item.items()
    }


def _decode_fields(
    item: Optional[TypedItem],
    key_fields: Optional[Iterable[str]],
    json_keys: Optional[Iterable[str]],
) -> DecodeResult:
    result = DecodeResult()
    if not item:
        return result

    stripped = key_names(key_fields)
    # None means every string attribute holds JSON text
    json_names = None if json_keys is None else set(json_keys)

    for name, attribute in item.items():
        if name in stripped:
            continue
        try:
            value = _from_native(_deserializer.deserialize(attribute))
        except (AttributeError, TypeError, ValueError) as e:
            logger.error(f"Unable to unwrap attribute '{name}' of stored item: {e}")
            result.errors.append(FieldDecodeError(field=name, value=attribute, reason=str(e)))
            continue
        is_json = json_names is None or name in json_names
        if not is_json or not isinstance(value, str):
            result.document[name] = value
            continue
        try:
            result.document[name] = json.loads(value)
        except ValueError as e:
            logger.error(f"Unable to parse field '{name}' of stored item: {e}")
            result.errors.append(FieldDecodeError(field=name, value=value, reason=str(e)))

    return result


def unwrap(
    item: Optional[TypedItem], key_fields: Optional[Iterable[str]] = None
) -> DecodeResult:
    """
    Decode an item stored in full JSON mode.

    Key fields are stripped, then every string attribute is parsed as JSON.
    A field that fails to parse is logged, reported in the result's errors
    and omitted from the document; the rest of the document is still
    returned. Attributes stored with a native non-string type are returned
    as their plain value.

    Args:
        item: Typed attributes as returned by DynamoDB; None decodes to {}
        key_fields: Key mapping or names of the key fields to strip

    Returns:
        DecodeResult with the decoded document and any per-field errors
    """
    return _decode_fields(item, key_fields, None)


def unwrap_mixed(
    item: Optional[TypedItem],
    key_fields: Optional[Iterable[str]],
    json_keys: Optional[Iterable[str]],
) -> DecodeResult:
    """
    Decode an item stored in mixed mode.

    Only the fields named in json_keys are parsed as JSON; every other field
    is returned as its native value.
    """
    return _decode_fields(item, key_fields, list(json_keys or []))


def unwrap_items(items: Optional[List[TypedItem]]) -> List[Dict[str, Any]]:
    """Unwrap a list of query result items, preserving their order."""
    return [unwrap_native(item) for item in items or []]

"""
Conversion between Python values and Firestore values.
"""

from __future__ import annotations

__all__ = [
    "decode_fields",
    "decode_value",
    "encode_fields",
    "encode_value",
]

import base64
from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import BaseModel

from fbadmin.core.exceptions import SerializationError

from ._models import (
    VALUE_TYPES,
    ArrayData,
    ArrayValue,
    BooleanValue,
    BytesValue,
    DoubleValue,
    GeoPoint,
    GeoPointValue,
    IntegerValue,
    MapData,
    MapValue,
    NullValue,
    ReferenceValue,
    StringValue,
    TimestampValue,
    Value,
)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def encode_value(obj: Any) -> Value:
    """Encode a Python value.

    Args:
        obj:
            None, bool, int, float, str, bytes, datetime,
            GeoPoint, DocumentReference, list, tuple, dict,
            a pydantic model or an already encoded value.

    Returns:
        Firestore value.

    Raises:
        SerializationError:
            The value has an unsupported type or an
            integer is outside the 64-bit range.
    """
    from ._reference import DocumentReference

    if isinstance(obj, VALUE_TYPES):
        return obj
    if obj is None:
        return NullValue()
    if isinstance(obj, bool):
        return BooleanValue(boolean_value=obj)
    if isinstance(obj, int):
        if obj < INT64_MIN or obj > INT64_MAX:
            raise SerializationError(
                f"Integer {obj} is outside the 64-bit range"
            )
        return IntegerValue(integer_value=str(obj))
    if isinstance(obj, float):
        return DoubleValue(double_value=obj)
    if isinstance(obj, str):
        return StringValue(string_value=obj)
    if isinstance(obj, (bytes, bytearray)):
        return BytesValue(
            bytes_value=base64.b64encode(bytes(obj)).decode("ascii")
        )
    if isinstance(obj, datetime):
        return TimestampValue(timestamp_value=_format_timestamp(obj))
    if isinstance(obj, GeoPoint):
        return GeoPointValue(geo_point_value=obj)
    if isinstance(obj, DocumentReference):
        return ReferenceValue(reference_value=obj.resource_name)
    if isinstance(obj, Mapping):
        return MapValue(map_value=MapData(fields=encode_fields(obj)))
    if isinstance(obj, (list, tuple)):
        return ArrayValue(
            array_value=ArrayData(values=[encode_value(v) for v in obj])
        )
    if isinstance(obj, BaseModel):
        return encode_value(obj.model_dump())
    raise SerializationError(
        f"Unsupported value type {type(obj).__name__}"
    )


def decode_value(value: Value) -> Any:
    """Decode a Firestore value.

    Timestamps, bytes and references decode to their wire
    strings. Geo points decode to a dictionary with latitude
    and longitude.

    Raises:
        SerializationError:
            An integer is not a valid 64-bit integer.
    """
    if isinstance(value, NullValue):
        return None
    if isinstance(value, BooleanValue):
        return value.boolean_value
    if isinstance(value, IntegerValue):
        return _parse_integer(value.integer_value)
    if isinstance(value, DoubleValue):
        return value.double_value
    if isinstance(value, StringValue):
        return value.string_value
    if isinstance(value, TimestampValue):
        return value.timestamp_value
    if isinstance(value, BytesValue):
        return value.bytes_value
    if isinstance(value, ReferenceValue):
        return value.reference_value
    if isinstance(value, GeoPointValue):
        return {
            "latitude": value.geo_point_value.latitude,
            "longitude": value.geo_point_value.longitude,
        }
    if isinstance(value, MapValue):
        return decode_fields(value.map_value.fields)
    if isinstance(value, ArrayValue):
        return [decode_value(v) for v in value.array_value.values]
    raise SerializationError(
        f"Unsupported Firestore value {type(value).__name__}"
    )


def encode_fields(obj: Any) -> dict[str, Value]:
    """Encode the fields of a document.

    Raises:
        SerializationError:
            The value is not a mapping or a pydantic model.
    """
    if isinstance(obj, BaseModel):
        obj = obj.model_dump()
    if not isinstance(obj, Mapping):
        raise SerializationError(
            f"Document data must be a mapping, got {type(obj).__name__}"
        )
    fields: dict[str, Value] = dict()
    for key, value in obj.items():
        if not isinstance(key, str):
            raise SerializationError(
                f"Field names must be strings, got {type(key).__name__}"
            )
        fields[key] = encode_value(value)
    return fields


def decode_fields(fields: Mapping[str, Value]) -> dict[str, Any]:
    return {k: decode_value(v) for k, v in fields.items()}


def _parse_integer(value: str) -> int:
    try:
        result = int(value)
    except ValueError as e:
        raise SerializationError(f"Invalid integer value {value!r}") from e
    if result < INT64_MIN or result > INT64_MAX:
        raise SerializationError(
            f"Integer {value} is outside the 64-bit range"
        )
    return result


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.%fZ")

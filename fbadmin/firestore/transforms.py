"""
Field transform sentinels.

Sentinels can be used as values in set, create and update data.
They are removed from the document fields and sent as field
transforms applied by the server after the write.
"""

from __future__ import annotations

__all__ = [
    "SERVER_TIMESTAMP",
    "ArrayRemove",
    "ArrayUnion",
    "Increment",
    "Maximum",
    "Minimum",
    "ServerTimestamp",
    "Transform",
]

from typing import Any

from ._codec import encode_value
from ._models import ArrayData, FieldTransform, ServerValue


class Transform:
    """Base class for field transform sentinels."""

    def to_field_transform(self, field_path: str) -> FieldTransform:
        raise NotImplementedError

    def __eq__(self, other: Any) -> bool:
        return type(self) is type(other) and vars(self) == vars(other)

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({args})"


class ServerTimestamp(Transform):
    def to_field_transform(self, field_path: str) -> FieldTransform:
        return FieldTransform(
            field_path=field_path,
            set_to_server_value=ServerValue.REQUEST_TIME,
        )


SERVER_TIMESTAMP = ServerTimestamp()


class Increment(Transform):
    value: int | float

    def __init__(self, value: int | float):
        self.value = value

    def to_field_transform(self, field_path: str) -> FieldTransform:
        return FieldTransform(
            field_path=field_path, increment=encode_value(self.value)
        )


class Maximum(Transform):
    value: int | float

    def __init__(self, value: int | float):
        self.value = value

    def to_field_transform(self, field_path: str) -> FieldTransform:
        return FieldTransform(
            field_path=field_path, maximum=encode_value(self.value)
        )


class Minimum(Transform):
    value: int | float

    def __init__(self, value: int | float):
        self.value = value

    def to_field_transform(self, field_path: str) -> FieldTransform:
        return FieldTransform(
            field_path=field_path, minimum=encode_value(self.value)
        )


class ArrayUnion(Transform):
    """Append elements that are not already in the array."""

    values: list

    def __init__(self, values: list):
        self.values = list(values)

    def to_field_transform(self, field_path: str) -> FieldTransform:
        return FieldTransform(
            field_path=field_path,
            append_missing_elements=ArrayData(
                values=[encode_value(v) for v in self.values]
            ),
        )


class ArrayRemove(Transform):
    """Remove all occurrences of the elements from the array."""

    values: list

    def __init__(self, values: list):
        self.values = list(values)

    def to_field_transform(self, field_path: str) -> FieldTransform:
        return FieldTransform(
            field_path=field_path,
            remove_all_from_array=ArrayData(
                values=[encode_value(v) for v in self.values]
            ),
        )

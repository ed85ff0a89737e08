from __future__ import annotations

import re
import secrets
import string
from typing import Any, Mapping

from pydantic import BaseModel

from fbadmin.core.exceptions import BadRequestError, SerializationError

from ._codec import encode_fields
from ._models import (
    Document,
    DocumentMask,
    DocumentTransform,
    FieldTransform,
    Precondition,
    Write,
)
from .transforms import Transform

_AUTO_ID_CHARS = string.ascii_letters + string.digits
_AUTO_ID_LENGTH = 20
_SIMPLE_FIELD = re.compile(r"^[A-Za-z_][A-Za-z_0-9]*$")


def auto_id() -> str:
    return "".join(
        secrets.choice(_AUTO_ID_CHARS) for _ in range(_AUTO_ID_LENGTH)
    )


def split_path(path: str) -> list[str]:
    parts = [p for p in path.strip("/").split("/") if p]
    if not parts:
        raise BadRequestError("Path must not be empty")
    return parts


def get_document_path(path: str) -> str:
    parts = split_path(path)
    if len(parts) % 2 != 0:
        raise BadRequestError(
            f"Document path must have an even number of segments: {path}"
        )
    return "/".join(parts)


def get_collection_path(path: str) -> str:
    parts = split_path(path)
    if len(parts) % 2 != 1:
        raise BadRequestError(
            f"Collection path must have an odd number of segments: {path}"
        )
    return "/".join(parts)


def quote_field_path(field: str) -> str:
    if _SIMPLE_FIELD.match(field):
        return field
    escaped = field.replace("\\", "\\\\").replace("`", "\\`")
    return f"`{escaped}`"


def extract_transforms(
    data: Any,
) -> tuple[dict[str, Any], list[FieldTransform]]:
    """Split document data into plain fields and field transforms.

    Nested maps that only hold transforms are removed.
    """
    if isinstance(data, BaseModel):
        data = data.model_dump()
    if not isinstance(data, Mapping):
        raise SerializationError(
            f"Document data must be a mapping, got {type(data).__name__}"
        )
    transforms: list[FieldTransform] = []
    fields = _extract(data, [], transforms)
    return fields, transforms


def _extract(
    data: Mapping, parent: list[str], transforms: list[FieldTransform]
) -> dict[str, Any]:
    result: dict[str, Any] = dict()
    for key, value in data.items():
        path = parent + [quote_field_path(str(key))]
        if isinstance(value, Transform):
            transforms.append(value.to_field_transform(".".join(path)))
        elif isinstance(value, Mapping) and value:
            nested = _extract(value, path, transforms)
            if nested:
                result[key] = nested
        else:
            result[key] = value
    return result


def build_set_write(name: str, data: Any, merge: bool = False) -> Write:
    fields, transforms = extract_transforms(data)
    return Write(
        update=Document(name=name, fields=encode_fields(fields)),
        update_mask=(
            DocumentMask(field_paths=[quote_field_path(k) for k in fields])
            if merge
            else None
        ),
        update_transforms=transforms or None,
    )


def build_create_write(name: str, data: Any) -> Write:
    write = build_set_write(name, data)
    write.current_document = Precondition(exists=False)
    return write


def build_update_write(name: str, data: Any) -> Write:
    fields, transforms = extract_transforms(data)
    if not fields and not transforms:
        raise BadRequestError("No fields to update")
    write = build_set_write(name, data, merge=True)
    write.current_document = Precondition(exists=True)
    return write


def build_delete_write(
    name: str, precondition: Precondition | None = None
) -> Write:
    return Write(delete=name, current_document=precondition)


def build_transform_write(
    name: str, field_transforms: list[FieldTransform]
) -> Write:
    return Write(
        transform=DocumentTransform(
            document=name, field_transforms=field_transforms
        )
    )

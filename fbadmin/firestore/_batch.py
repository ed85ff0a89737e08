from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Self

from ._helper import (
    build_create_write,
    build_delete_write,
    build_set_write,
    build_transform_write,
    build_update_write,
)
from ._models import FieldTransform, Precondition, Write, WriteResult
from ._reference import DocumentReference

if TYPE_CHECKING:
    from .component import Firestore


class _WriteBuffer:
    lock: threading.Lock
    writes: list[Write]

    def __init__(self):
        self.lock = threading.Lock()
        self.writes = []


class WriteBatch:
    """Writes committed together, atomically, outside a transaction.

    Handles returned by clone() share the same buffer.
    Appends and commit are serialized by a lock, so every
    write is sent at most once.
    """

    _firestore: Firestore
    _buffer: _WriteBuffer

    def __init__(
        self, firestore: Firestore, buffer: _WriteBuffer | None = None
    ):
        self._firestore = firestore
        self._buffer = buffer or _WriteBuffer()

    def clone(self) -> WriteBatch:
        return WriteBatch(self._firestore, self._buffer)

    def __len__(self) -> int:
        with self._buffer.lock:
            return len(self._buffer.writes)

    def set(
        self,
        reference: DocumentReference | str,
        data: Any,
        merge: bool = False,
    ) -> Self:
        name = self._get_name(reference)
        return self._append(build_set_write(name, data, merge=merge))

    def create(self, reference: DocumentReference | str, data: Any) -> Self:
        return self._append(
            build_create_write(self._get_name(reference), data)
        )

    def update(self, reference: DocumentReference | str, data: Any) -> Self:
        return self._append(
            build_update_write(self._get_name(reference), data)
        )

    def delete(
        self,
        reference: DocumentReference | str,
        precondition: Precondition | None = None,
    ) -> Self:
        return self._append(
            build_delete_write(self._get_name(reference), precondition)
        )

    def transform(
        self,
        reference: DocumentReference | str,
        field_transforms: list[FieldTransform],
    ) -> Self:
        return self._append(
            build_transform_write(self._get_name(reference), field_transforms)
        )

    async def commit(self) -> list[WriteResult]:
        """Commit the buffered writes.

        Returns:
            Write results in the order the writes were added.
            Empty without a request when there are no writes.
        """
        with self._buffer.lock:
            writes = self._buffer.writes
            self._buffer.writes = []
        if not writes:
            return []
        response = await self._firestore.commit(writes)
        return response.write_results

    def _append(self, write: Write) -> Self:
        with self._buffer.lock:
            self._buffer.writes.append(write)
        return self

    def _get_name(self, reference: DocumentReference | str) -> str:
        if isinstance(reference, DocumentReference):
            return reference.resource_name
        return self._firestore.doc(reference).resource_name

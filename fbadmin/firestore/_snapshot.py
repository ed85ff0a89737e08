from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator

from ._codec import decode_fields
from ._models import Document

if TYPE_CHECKING:
    from ._reference import DocumentReference


class DocumentSnapshot:
    """Document read at a point in time.

    Attributes:
        reference: Reference to the document.
        document: The document, None if it does not exist.
        read_time: Time the document was read.
    """

    reference: DocumentReference
    document: Document | None
    read_time: str | None

    def __init__(
        self,
        reference: DocumentReference,
        document: Document | None,
        read_time: str | None = None,
    ):
        self.reference = reference
        self.document = document
        self.read_time = read_time

    @property
    def id(self) -> str:
        return self.reference.id

    @property
    def exists(self) -> bool:
        return self.document is not None

    @property
    def create_time(self) -> str | None:
        return self.document.create_time if self.document else None

    @property
    def update_time(self) -> str | None:
        return self.document.update_time if self.document else None

    def to_dict(self) -> dict[str, Any] | None:
        """Decoded document fields, None if the document does not exist."""
        if self.document is None:
            return None
        return decode_fields(self.document.fields)

    def get(self, field_path: str) -> Any:
        """Get a field value.

        Args:
            field_path:
                Dot separated path into nested maps.

        Returns:
            Field value or None if the document or the field
            does not exist.
        """
        data: Any = self.to_dict()
        for part in field_path.split("."):
            if not isinstance(data, dict) or part not in data:
                return None
            data = data[part]
        return data

    def __repr__(self) -> str:
        return (
            f"DocumentSnapshot(path={self.reference.path!r}, "
            f"exists={self.exists})"
        )


class QuerySnapshot:
    """Result of a query.

    Attributes:
        documents: Matching documents in server order.
        read_time: Time the query was read.
    """

    documents: list[DocumentSnapshot]
    read_time: str | None

    def __init__(
        self,
        documents: list[DocumentSnapshot],
        read_time: str | None = None,
    ):
        self.documents = documents
        self.read_time = read_time

    @property
    def empty(self) -> bool:
        return len(self.documents) == 0

    @property
    def size(self) -> int:
        return len(self.documents)

    def __iter__(self) -> Iterator[DocumentSnapshot]:
        return iter(self.documents)

    def __len__(self) -> int:
        return len(self.documents)

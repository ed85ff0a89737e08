from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fbadmin.core.exceptions import BadRequestError, NotFoundError

from ._codec import encode_fields
from ._helper import (
    auto_id,
    build_create_write,
    build_set_write,
    build_update_write,
    extract_transforms,
    get_collection_path,
    get_document_path,
    quote_field_path,
)
from ._models import (
    Direction,
    Document,
    DocumentsTarget,
    FieldOperator,
    Filter,
    Target,
    WriteResult,
)
from ._query import Query
from ._snapshot import DocumentSnapshot, QuerySnapshot

if TYPE_CHECKING:
    from ._listen import ListenStream
    from .component import Firestore


class DocumentReference:
    """Reference to a document.

    Attributes:
        path: Document path relative to the database, e.g. "users/alice".
    """

    path: str

    _firestore: Firestore

    def __init__(self, firestore: Firestore, path: str):
        self._firestore = firestore
        self.path = get_document_path(path)

    @property
    def id(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def parent(self) -> CollectionReference:
        return CollectionReference(
            self._firestore, self.path.rsplit("/", 1)[0]
        )

    @property
    def resource_name(self) -> str:
        return f"{self._firestore.documents_path}/{self.path}"

    def collection(self, collection_id: str) -> CollectionReference:
        return CollectionReference(
            self._firestore, f"{self.path}/{collection_id}"
        )

    async def get(self) -> DocumentSnapshot:
        """Read the document.

        Returns:
            Snapshot of the document. The snapshot does not
            exist if the document was not found.
        """
        try:
            data = await self._firestore.request(
                "GET", self.resource_name, "Failed to get document"
            )
        except NotFoundError:
            return DocumentSnapshot(self, None)
        return DocumentSnapshot(self, Document.from_dict(data))

    async def create(self, data: Any) -> WriteResult:
        """Create the document.

        Raises:
            ConflictError: The document already exists.
        """
        return await self._firestore.commit_single(
            build_create_write(self.resource_name, data)
        )

    async def set(self, data: Any, merge: bool = False) -> WriteResult:
        """Write the document.

        Args:
            data: Document data.
            merge:
                Only overwrite the top level fields in data
                instead of replacing the whole document.
        """
        fields, transforms = extract_transforms(data)
        if transforms:
            return await self._firestore.commit_single(
                build_set_write(self.resource_name, data, merge=merge)
            )
        params: dict[str, Any] = dict()
        if merge:
            params["updateMask.fieldPaths"] = [
                quote_field_path(k) for k in fields
            ]
        response = await self._firestore.request(
            "PATCH",
            self.resource_name,
            "Failed to set document",
            json={"fields": _fields_to_dict(encode_fields(fields))},
            params=params,
        )
        document = Document.from_dict(response)
        return WriteResult(update_time=document.update_time)

    async def update(self, data: Any) -> WriteResult:
        """Update fields of an existing document.

        Raises:
            BadRequestError: No fields to update.
            NotFoundError: The document does not exist.
        """
        fields, transforms = extract_transforms(data)
        if not fields and not transforms:
            raise BadRequestError("No fields to update")
        if transforms:
            return await self._firestore.commit_single(
                build_update_write(self.resource_name, data)
            )
        response = await self._firestore.request(
            "PATCH",
            self.resource_name,
            "Failed to update document",
            json={"fields": _fields_to_dict(encode_fields(fields))},
            params={
                "updateMask.fieldPaths": [quote_field_path(k) for k in fields],
                "currentDocument.exists": "true",
            },
        )
        document = Document.from_dict(response)
        return WriteResult(update_time=document.update_time)

    async def delete(self) -> None:
        await self._firestore.request(
            "DELETE", self.resource_name, "Failed to delete document"
        )

    def listen(
        self,
        target_id: int = 1,
        resume_token: str | None = None,
        read_time: str | None = None,
    ) -> ListenStream:
        """Listen to changes of the document."""
        return self._firestore.listen(
            Target(
                target_id=target_id,
                documents=DocumentsTarget(documents=[self.resource_name]),
                resume_token=resume_token,
                read_time=read_time,
            )
        )

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, DocumentReference)
            and self.resource_name == other.resource_name
        )

    def __hash__(self) -> int:
        return hash(self.resource_name)

    def __repr__(self) -> str:
        return f"DocumentReference(path={self.path!r})"


class CollectionReference:
    """Reference to a collection.

    Attributes:
        path: Collection path relative to the database, e.g. "users".
    """

    path: str

    _firestore: Firestore

    def __init__(self, firestore: Firestore, path: str):
        self._firestore = firestore
        self.path = get_collection_path(path)

    @property
    def id(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def parent(self) -> DocumentReference | None:
        if "/" not in self.path:
            return None
        return DocumentReference(
            self._firestore, self.path.rsplit("/", 1)[0]
        )

    @property
    def parent_resource_name(self) -> str:
        parent = self.parent
        if parent is None:
            return self._firestore.documents_path
        return parent.resource_name

    def doc(self, document_id: str | None = None) -> DocumentReference:
        """Reference a document in the collection.

        Args:
            document_id:
                Document id. A random 20 character id
                is generated when not set.
        """
        return DocumentReference(
            self._firestore, f"{self.path}/{document_id or auto_id()}"
        )

    async def add(self, data: Any) -> DocumentReference:
        """Create a document with a server assigned id."""
        response = await self._firestore.request(
            "POST",
            f"{self._firestore.documents_path}/{self.path}",
            "Failed to add document",
            json={"fields": _fields_to_dict(encode_fields(data))},
        )
        name = Document.from_dict(response).name or ""
        return self.doc(name.rsplit("/", 1)[-1])

    async def list_documents(
        self, page_size: int | None = None
    ) -> list[DocumentReference]:
        """List the documents in the collection.

        Documents that only have subcollections are included.
        """
        references: list[DocumentReference] = []
        page_token = None
        while True:
            params: dict[str, Any] = {
                "showMissing": "true",
                "mask.fieldPaths": "__name__",
            }
            if page_size:
                params["pageSize"] = page_size
            if page_token:
                params["pageToken"] = page_token
            response = await self._firestore.request(
                "GET",
                f"{self._firestore.documents_path}/{self.path}",
                "Failed to list documents",
                params=params,
            )
            for item in response.get("documents", []):
                references.append(
                    self.doc(item["name"].rsplit("/", 1)[-1])
                )
            page_token = response.get("nextPageToken")
            if not page_token:
                return references

    def _query(self) -> Query:
        return Query(
            parent=self.parent_resource_name,
            collection_id=self.id,
            firestore=self._firestore,
        )

    def where(
        self, field: str, op: str | FieldOperator, value: Any
    ) -> Query:
        return self._query().where(field, op, value)

    def where_filter(self, filter: Filter) -> Query:
        return self._query().where_filter(filter)

    def order_by(
        self, field: str, direction: str | Direction = Direction.ASCENDING
    ) -> Query:
        return self._query().order_by(field, direction)

    def limit(self, count: int) -> Query:
        return self._query().limit(count)

    def offset(self, count: int) -> Query:
        return self._query().offset(count)

    def select(self, *field_paths: str) -> Query:
        return self._query().select(*field_paths)

    def start_at(self, *values: Any) -> Query:
        return self._query().start_at(*values)

    def start_after(self, *values: Any) -> Query:
        return self._query().start_after(*values)

    def end_at(self, *values: Any) -> Query:
        return self._query().end_at(*values)

    def end_before(self, *values: Any) -> Query:
        return self._query().end_before(*values)

    async def get(self) -> QuerySnapshot:
        return await self._query().get()

    def listen(
        self,
        target_id: int = 1,
        resume_token: str | None = None,
        read_time: str | None = None,
    ) -> ListenStream:
        return self._query().listen(target_id, resume_token, read_time)

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, CollectionReference)
            and self.path == other.path
        )

    def __hash__(self) -> int:
        return hash(self.path)

    def __repr__(self) -> str:
        return f"CollectionReference(path={self.path!r})"


def _fields_to_dict(fields: dict) -> dict:
    return Document(fields=fields).to_dict().get("fields", {})

"""
Cloud Firestore over the REST API.
"""

from __future__ import annotations

__all__ = ["Firestore"]

from typing import Any, Awaitable, Callable, TypeVar

from fbadmin.core import Transport, parse_json, raise_for_response
from fbadmin.core.exceptions import SerializationError

from ._batch import WriteBatch
from ._listen import ListenStream
from ._models import (
    BatchGetResponse,
    BeginTransactionResponse,
    CommitResponse,
    ListenRequest,
    RunQueryResponse,
    Target,
    TransactionOptions,
    Write,
    WriteResult,
)
from ._query import Query
from ._reference import CollectionReference, DocumentReference
from ._snapshot import DocumentSnapshot, QuerySnapshot
from ._transaction import DEFAULT_MAX_ATTEMPTS, Transaction, run_transaction

T = TypeVar("T")

BASE_URL = "https://firestore.googleapis.com/v1"


class Firestore:
    """Cloud Firestore client.

    Attributes:
        project_id: Google Cloud project id.
        database: Database id.
        base_url: Firestore REST base URL.
    """

    project_id: str
    database: str
    base_url: str

    _transport: Transport

    def __init__(
        self,
        transport: Transport,
        project_id: str,
        database: str = "(default)",
        base_url: str = BASE_URL,
    ):
        """Initialize.

        Args:
            transport:
                Authenticated transport.
            project_id:
                Google Cloud project id.
            database:
                Database id, defaults to "(default)".
            base_url:
                Firestore REST base URL.
        """
        self._transport = transport
        self.project_id = project_id
        self.database = database
        self.base_url = base_url.rstrip("/")

    @property
    def database_path(self) -> str:
        return f"projects/{self.project_id}/databases/{self.database}"

    @property
    def documents_path(self) -> str:
        return f"{self.database_path}/documents"

    def collection(self, path: str) -> CollectionReference:
        return CollectionReference(self, path)

    def doc(self, path: str) -> DocumentReference:
        return DocumentReference(self, path)

    def collection_group(self, collection_id: str) -> Query:
        """Query every collection with the id in the database."""
        return Query(
            parent=self.documents_path,
            collection_id=collection_id,
            all_descendants=True,
            firestore=self,
        )

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    async def list_collections(
        self, page_size: int = 100
    ) -> list[CollectionReference]:
        """List the top level collections."""
        collections: list[CollectionReference] = []
        page_token = None
        while True:
            body: dict[str, Any] = {"pageSize": page_size}
            if page_token:
                body["pageToken"] = page_token
            response = await self.request(
                "POST",
                f"{self.documents_path}:listCollectionIds",
                "Failed to list collections",
                json=body,
            )
            for id in response.get("collectionIds", []):
                collections.append(self.collection(id))
            page_token = response.get("nextPageToken")
            if not page_token:
                return collections

    async def get_all(
        self,
        references: list[DocumentReference],
        transaction: str | None = None,
    ) -> list[DocumentSnapshot]:
        """Read documents.

        Returns:
            Snapshots in the order of the references.
        """
        if not references:
            return []
        body: dict[str, Any] = {
            "documents": [r.resource_name for r in references]
        }
        if transaction:
            body["transaction"] = transaction
        response = await self.request(
            "POST",
            f"{self.documents_path}:batchGet",
            "Failed to get documents",
            json=body,
        )
        found: dict[str, BatchGetResponse] = dict()
        for item in _as_list(response):
            result = BatchGetResponse.from_dict(item)
            if result.found is not None and result.found.name:
                found[result.found.name] = result
            elif result.missing:
                found[result.missing] = result
        snapshots = []
        for reference in references:
            result = found.get(reference.resource_name)
            snapshots.append(
                DocumentSnapshot(
                    reference,
                    result.found if result else None,
                    result.read_time if result else None,
                )
            )
        return snapshots

    async def run_query(
        self, query: Query, transaction: str | None = None
    ) -> QuerySnapshot:
        """Run a structured query.

        Envelopes without a document only advance the read time.
        """
        body: dict[str, Any] = {
            "structuredQuery": query.to_structured_query().to_dict()
        }
        if transaction:
            body["transaction"] = transaction
        response = await self.request(
            "POST",
            f"{query.parent}:runQuery",
            "Failed to run query",
            json=body,
        )
        documents: list[DocumentSnapshot] = []
        read_time: str | None = None
        for item in _as_list(response):
            envelope = RunQueryResponse.from_dict(item)
            if envelope.read_time:
                read_time = envelope.read_time
            document = envelope.document
            if document is None or not document.name:
                continue
            documents.append(
                DocumentSnapshot(
                    self.doc(self._get_relative_path(document.name)),
                    document,
                    envelope.read_time,
                )
            )
        return QuerySnapshot(documents, read_time)

    async def begin_transaction(
        self, options: TransactionOptions | None = None
    ) -> str:
        """Begin a transaction.

        Returns:
            Transaction id.
        """
        body: dict[str, Any] = dict()
        if options is not None:
            body["options"] = options.to_dict()
        response = await self.request(
            "POST",
            f"{self.documents_path}:beginTransaction",
            "Failed to begin transaction",
            json=body,
        )
        return BeginTransactionResponse.from_dict(response).transaction

    async def commit(
        self, writes: list[Write], transaction: str | None = None
    ) -> CommitResponse:
        body: dict[str, Any] = {"writes": [w.to_dict() for w in writes]}
        if transaction:
            body["transaction"] = transaction
        response = await self.request(
            "POST",
            f"{self.documents_path}:commit",
            "Failed to commit",
            json=body,
        )
        return CommitResponse.from_dict(response)

    async def commit_single(self, write: Write) -> WriteResult:
        response = await self.commit([write])
        if response.write_results:
            return response.write_results[0]
        return WriteResult(update_time=response.commit_time)

    async def rollback(self, transaction: str) -> None:
        await self.request(
            "POST",
            f"{self.documents_path}:rollback",
            "Failed to rollback",
            json={"transaction": transaction},
        )

    async def run_transaction(
        self,
        operation: Callable[[Transaction], Awaitable[T]],
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        read_only: bool = False,
    ) -> T:
        """Run an operation in a transaction.

        The operation is retried with a new transaction when
        the commit is aborted by contention.

        Args:
            operation:
                Async function receiving the transaction.
            max_attempts:
                Attempts before raising TransactionError.
                Defaults to 5.
            read_only:
                Begin read only transactions.

        Returns:
            Value returned by the operation.
        """
        return await run_transaction(
            self, operation, max_attempts=max_attempts, read_only=read_only
        )

    def listen(self, target: Target) -> ListenStream:
        """Open a listen stream for a target.

        The request is sent on the first iteration.
        """
        request = ListenRequest(database=self.database_path, add_target=target)
        return ListenStream(
            open=lambda: self._transport.stream(
                "POST",
                self._get_url(f"{self.documents_path}:listen"),
                json=request.to_dict(),
                default_message="Listen failed",
            )
        )

    async def request(
        self,
        method: str,
        resource: str,
        default_message: str,
        json: Any = None,
        params: dict | None = None,
    ) -> Any:
        response = await self._transport.send(
            method, self._get_url(resource), json=json, params=params
        )
        raise_for_response(response, default_message)
        return parse_json(response)

    def _get_url(self, resource: str) -> str:
        return f"{self.base_url}/{resource}"

    def _get_relative_path(self, name: str) -> str:
        prefix = f"{self.documents_path}/"
        if not name.startswith(prefix):
            raise SerializationError(f"Unexpected document name {name}")
        return name[len(prefix) :]


def _as_list(response: Any) -> list:
    if isinstance(response, list):
        return response
    if isinstance(response, dict) and response:
        return [response]
    return []

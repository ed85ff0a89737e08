"""
Transactions with optimistic concurrency.

A transaction attempt begins a server transaction, runs the caller's
operation against it and commits the buffered writes. When the commit
is aborted by contention the whole attempt is retried with a new
transaction, up to a maximum number of attempts.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "Transaction",
    "TransactionState",
    "is_contention_error",
    "run_transaction",
]

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Self, TypeVar

from fbadmin.core import warn
from fbadmin.core.exceptions import (
    ApiError,
    BaseError,
    NotFoundError,
    TransactionError,
)

from ._helper import (
    build_create_write,
    build_delete_write,
    build_set_write,
    build_update_write,
)
from ._models import (
    Document,
    Precondition,
    ReadOnly,
    ReadWrite,
    TransactionOptions,
    Write,
    WriteResult,
)
from ._query import Query
from ._reference import DocumentReference
from ._snapshot import DocumentSnapshot, QuerySnapshot

if TYPE_CHECKING:
    from .component import Firestore

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 5

_CONTENTION_MARKERS = ("ABORTED", "409", "Aborted")


class TransactionState(str, Enum):
    """Transaction attempt state.

    Attributes:
        BEGIN: Begin a new server transaction.
        EXECUTE: Run the operation.
        COMMIT: Commit the buffered writes.
        RETRY: Commit was aborted by contention.
        ROLLBACK: Operation or commit failed, roll back unless read-only.
        DONE: Committed.
        FAILED: Retries exhausted.
    """

    BEGIN = "begin"
    EXECUTE = "execute"
    COMMIT = "commit"
    RETRY = "retry"
    ROLLBACK = "rollback"
    DONE = "done"
    FAILED = "failed"


def is_contention_error(error: ApiError) -> bool:
    """Check if the error is a transaction contention abort.

    The canonical status of the error envelope is used when
    the server sent one. Otherwise the HTTP status and the
    message are inspected.
    """
    if error.status:
        return error.status == "ABORTED"
    if error.status_code == 409:
        return True
    message = str(error)
    return any(marker in message for marker in _CONTENTION_MARKERS)


class Transaction:
    """Server transaction for a single attempt.

    Reads go to the server tagged with the transaction id.
    Writes are buffered and sent on commit. A transaction
    is used by one task at a time.

    Attributes:
        id: Server issued transaction id.
    """

    id: str

    _firestore: Firestore
    _writes: list[Write]

    def __init__(self, firestore: Firestore, id: str):
        self._firestore = firestore
        self.id = id
        self._writes = []

    @property
    def writes(self) -> list[Write]:
        return list(self._writes)

    async def get(
        self, reference: DocumentReference | str
    ) -> DocumentSnapshot:
        """Read a document in the transaction.

        Returns:
            Snapshot of the document. The snapshot does not
            exist if the document was not found.
        """
        reference = self._get_reference(reference)
        try:
            data = await self._firestore.request(
                "GET",
                reference.resource_name,
                "Failed to get document",
                params={"transaction": self.id},
            )
        except NotFoundError:
            return DocumentSnapshot(reference, None)
        return DocumentSnapshot(reference, Document.from_dict(data))

    async def get_all(
        self, references: list[DocumentReference | str]
    ) -> list[DocumentSnapshot]:
        return await self._firestore.get_all(
            [self._get_reference(r) for r in references],
            transaction=self.id,
        )

    async def query(self, query: Query) -> QuerySnapshot:
        return await self._firestore.run_query(query, transaction=self.id)

    def set(
        self,
        reference: DocumentReference | str,
        data: Any,
        merge: bool = False,
    ) -> Self:
        name = self._get_reference(reference).resource_name
        self._writes.append(build_set_write(name, data, merge=merge))
        return self

    def create(self, reference: DocumentReference | str, data: Any) -> Self:
        name = self._get_reference(reference).resource_name
        self._writes.append(build_create_write(name, data))
        return self

    def update(self, reference: DocumentReference | str, data: Any) -> Self:
        """Stage an update of the top level fields in data.

        The commit fails if the document does not exist.
        """
        name = self._get_reference(reference).resource_name
        self._writes.append(build_update_write(name, data))
        return self

    def delete(
        self,
        reference: DocumentReference | str,
        precondition: Precondition | None = None,
    ) -> Self:
        name = self._get_reference(reference).resource_name
        self._writes.append(build_delete_write(name, precondition))
        return self

    async def commit(self) -> list[WriteResult]:
        writes = self._writes
        self._writes = []
        response = await self._firestore.commit(writes, transaction=self.id)
        return response.write_results

    async def rollback(self) -> None:
        self._writes = []
        await self._firestore.rollback(self.id)

    def _get_reference(
        self, reference: DocumentReference | str
    ) -> DocumentReference:
        if isinstance(reference, DocumentReference):
            return reference
        return self._firestore.doc(reference)


async def run_transaction(
    firestore: Firestore,
    operation: Callable[[Transaction], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    read_only: bool = False,
) -> T:
    """Run an operation in a transaction.

    Args:
        firestore: Firestore client.
        operation:
            Async function that reads and stages writes
            through the transaction it receives. It is called
            again for every retried attempt.
        max_attempts: Attempts before giving up on contention.
        read_only: Begin read only transactions.

    Returns:
        Value returned by the operation in the committed attempt.

    Raises:
        TransactionError: Every attempt was aborted by contention.
    """
    state = TransactionState.BEGIN
    attempt = 0
    transaction: Transaction | None = None
    previous_id: str | None = None
    result: Any = None
    error: Exception | None = None
    while True:
        if state == TransactionState.BEGIN:
            attempt += 1
            logger.debug("Transaction attempt %d", attempt)
            transaction = Transaction(
                firestore,
                await firestore.begin_transaction(
                    _get_options(read_only, previous_id)
                ),
            )
            state = TransactionState.EXECUTE
        elif state == TransactionState.EXECUTE:
            try:
                result = await operation(_get_active(transaction))
            except Exception as e:
                error = e
                state = TransactionState.ROLLBACK
            else:
                state = TransactionState.COMMIT
        elif state == TransactionState.COMMIT:
            transaction = _get_active(transaction)
            try:
                await transaction.commit()
            except ApiError as e:
                if not is_contention_error(e):
                    error = e
                    state = TransactionState.ROLLBACK
                    continue
                logger.debug("Transaction %s aborted: %s", transaction.id, e)
                state = TransactionState.RETRY
            else:
                state = TransactionState.DONE
        elif state == TransactionState.RETRY:
            previous_id = _get_active(transaction).id
            if attempt >= max_attempts:
                state = TransactionState.FAILED
            else:
                state = TransactionState.BEGIN
        elif state == TransactionState.ROLLBACK:
            transaction = _get_active(transaction)
            if not read_only:
                try:
                    await transaction.rollback()
                except BaseError as e:
                    warn(
                        f"Rollback of transaction {transaction.id} "
                        f"failed: {e}"
                    )
            if error is None:
                raise TransactionError("rolled back without an error")
            raise error
        elif state == TransactionState.DONE:
            return result
        elif state == TransactionState.FAILED:
            raise TransactionError("retries exhausted")


def _get_active(transaction: Transaction | None) -> Transaction:
    if transaction is None:
        raise TransactionError("no active transaction")
    return transaction


def _get_options(
    read_only: bool, previous_id: str | None
) -> TransactionOptions:
    if read_only:
        return TransactionOptions(read_only=ReadOnly())
    return TransactionOptions(
        read_write=ReadWrite(retry_transaction=previous_id)
    )

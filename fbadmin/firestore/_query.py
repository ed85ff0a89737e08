"""
Structured query builder.
"""

from __future__ import annotations

__all__ = [
    "Query",
    "and_filter",
    "field_filter",
    "get_direction",
    "get_operator",
    "or_filter",
    "unary_filter",
]

import copy
import math
from typing import TYPE_CHECKING, Any, Self

from fbadmin.core.exceptions import BadRequestError

from ._codec import encode_value
from ._models import (
    CollectionSelector,
    CompositeFilter,
    CompositeOperator,
    Cursor,
    Direction,
    FieldFilter,
    FieldOperator,
    FieldReference,
    Filter,
    Order,
    Projection,
    QueryTarget,
    StructuredQuery,
    Target,
    UnaryFilter,
    UnaryOperator,
)
from ._snapshot import QuerySnapshot

if TYPE_CHECKING:
    from ._listen import ListenStream
    from .component import Firestore

_OPERATORS: dict[str, FieldOperator] = {
    "<": FieldOperator.LESS_THAN,
    "<=": FieldOperator.LESS_THAN_OR_EQUAL,
    ">": FieldOperator.GREATER_THAN,
    ">=": FieldOperator.GREATER_THAN_OR_EQUAL,
    "==": FieldOperator.EQUAL,
    "!=": FieldOperator.NOT_EQUAL,
    "array-contains": FieldOperator.ARRAY_CONTAINS,
    "array_contains": FieldOperator.ARRAY_CONTAINS,
    "in": FieldOperator.IN,
    "array-contains-any": FieldOperator.ARRAY_CONTAINS_ANY,
    "array_contains_any": FieldOperator.ARRAY_CONTAINS_ANY,
    "not-in": FieldOperator.NOT_IN,
    "not_in": FieldOperator.NOT_IN,
}


def get_operator(op: str | FieldOperator) -> FieldOperator:
    if isinstance(op, FieldOperator):
        return op
    if op in _OPERATORS:
        return _OPERATORS[op]
    try:
        return FieldOperator(op.upper())
    except ValueError as e:
        raise BadRequestError(f"Operator {op} is not supported") from e


def get_direction(direction: str | Direction) -> Direction:
    if isinstance(direction, Direction):
        return direction
    value = direction.upper()
    if value in ("ASC", "ASCENDING"):
        return Direction.ASCENDING
    if value in ("DESC", "DESCENDING"):
        return Direction.DESCENDING
    raise BadRequestError(f"Direction {direction} is not supported")


def field_filter(field: str, op: str | FieldOperator, value: Any) -> Filter:
    """Build a filter comparing a field with a value.

    Equality with None or NaN becomes the matching unary filter.
    """
    operator = get_operator(op)
    if operator in (FieldOperator.EQUAL, FieldOperator.NOT_EQUAL):
        equal = operator == FieldOperator.EQUAL
        if value is None:
            return unary_filter(
                field,
                UnaryOperator.IS_NULL if equal else UnaryOperator.IS_NOT_NULL,
            )
        if isinstance(value, float) and math.isnan(value):
            return unary_filter(
                field,
                UnaryOperator.IS_NAN if equal else UnaryOperator.IS_NOT_NAN,
            )
    return Filter(
        field_filter=FieldFilter(
            field=FieldReference(field_path=field),
            op=operator,
            value=encode_value(value),
        )
    )


def unary_filter(field: str, op: str | UnaryOperator) -> Filter:
    return Filter(
        unary_filter=UnaryFilter(
            op=UnaryOperator(op),
            field=FieldReference(field_path=field),
        )
    )


def and_filter(*filters: Filter) -> Filter:
    return Filter(
        composite_filter=CompositeFilter(
            op=CompositeOperator.AND, filters=list(filters)
        )
    )


def or_filter(*filters: Filter) -> Filter:
    return Filter(
        composite_filter=CompositeFilter(
            op=CompositeOperator.OR, filters=list(filters)
        )
    )


class Query:
    """Query over the documents of a collection.

    Every modifier returns a new query and leaves
    the original unchanged.

    Attributes:
        parent:
            Resource name of the parent document, or the
            documents root for top level collections.
        collection_id: Collection to query.
        all_descendants:
            Query every collection with this id under the parent.
    """

    parent: str
    collection_id: str
    all_descendants: bool

    _firestore: Firestore | None
    _query: StructuredQuery

    def __init__(
        self,
        parent: str,
        collection_id: str,
        all_descendants: bool = False,
        firestore: Firestore | None = None,
    ):
        self.parent = parent
        self.collection_id = collection_id
        self.all_descendants = all_descendants
        self._firestore = firestore
        self._query = StructuredQuery(
            from_=[
                CollectionSelector(
                    collection_id=collection_id,
                    all_descendants=all_descendants or None,
                )
            ]
        )

    def _copy(self) -> Self:
        query = copy.copy(self)
        query._query = self._query.model_copy(deep=True)
        return query

    def where(self, field: str, op: str | FieldOperator, value: Any) -> Self:
        """Add a field filter.

        Filters accumulate into a single AND composite
        in call order.

        Args:
            field: Field path.
            op: Operator, e.g. FieldOperator.EQUAL or "==".
            value: Value to compare with.
        """
        return self.where_filter(field_filter(field, op, value))

    def where_filter(self, filter: Filter) -> Self:
        """Add a prebuilt filter, e.g. an OR composite."""
        query = self._copy()
        where = query._query.where
        if where is None:
            query._query.where = filter
        elif where.is_and() and where.composite_filter is not None:
            where.composite_filter.filters.append(filter)
        else:
            query._query.where = and_filter(where, filter)
        return query

    def order_by(
        self,
        field: str,
        direction: str | Direction = Direction.ASCENDING,
    ) -> Self:
        query = self._copy()
        if query._query.order_by is None:
            query._query.order_by = []
        query._query.order_by.append(
            Order(
                field=FieldReference(field_path=field),
                direction=get_direction(direction),
            )
        )
        return query

    def limit(self, count: int) -> Self:
        query = self._copy()
        query._query.limit = count
        return query

    def offset(self, count: int) -> Self:
        query = self._copy()
        query._query.offset = count
        return query

    def select(self, *field_paths: str) -> Self:
        query = self._copy()
        query._query.select = Projection(
            fields=[FieldReference(field_path=f) for f in field_paths]
        )
        return query

    def start_at(self, *values: Any) -> Self:
        return self._set_cursor("start_at", values, before=True)

    def start_after(self, *values: Any) -> Self:
        return self._set_cursor("start_at", values, before=False)

    def end_before(self, *values: Any) -> Self:
        return self._set_cursor("end_at", values, before=True)

    def end_at(self, *values: Any) -> Self:
        return self._set_cursor("end_at", values, before=False)

    def _set_cursor(self, name: str, values: tuple, before: bool) -> Self:
        query = self._copy()
        setattr(
            query._query,
            name,
            Cursor(values=[encode_value(v) for v in values], before=before),
        )
        return query

    def to_structured_query(self) -> StructuredQuery:
        return self._query.model_copy(deep=True)

    def to_dict(self) -> dict:
        return {
            "parent": self.parent,
            "structuredQuery": self._query.to_dict(),
        }

    def to_target(self, target_id: int = 1) -> Target:
        return Target(
            target_id=target_id,
            query=QueryTarget(
                parent=self.parent,
                structured_query=self.to_structured_query(),
            ),
        )

    async def get(self) -> QuerySnapshot:
        """Run the query.

        Returns:
            Query snapshot with documents in server order.
        """
        return await self._get_firestore().run_query(self)

    def listen(
        self,
        target_id: int = 1,
        resume_token: str | None = None,
        read_time: str | None = None,
    ) -> ListenStream:
        """Listen to changes of the query results."""
        target = self.to_target(target_id)
        target.resume_token = resume_token
        target.read_time = read_time
        return self._get_firestore().listen(target)

    def _get_firestore(self) -> Firestore:
        if self._firestore is None:
            raise BadRequestError("Query is not bound to a Firestore client")
        return self._firestore

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Query)
            and self.parent == other.parent
            and self._query == other._query
        )

    def __repr__(self) -> str:
        return f"Query(parent={self.parent!r}, query={self._query.to_dict()})"

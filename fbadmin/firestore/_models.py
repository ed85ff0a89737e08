from __future__ import annotations

import math
from enum import Enum
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import (
    Discriminator,
    Field,
    Tag,
    field_serializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

from fbadmin.core import DataModel

# Values


class GeoPoint(DataModel):
    """Geographic point.

    Attributes:
        latitude: Latitude in degrees.
        longitude: Longitude in degrees.
    """

    latitude: float
    longitude: float


class StringValue(DataModel):
    kind: ClassVar[str] = "stringValue"
    string_value: str


class IntegerValue(DataModel):
    """Integer value.

    Attributes:
        integer_value:
            64-bit integer as a decimal string.
    """

    kind: ClassVar[str] = "integerValue"
    integer_value: str

    @field_validator("integer_value", mode="before")
    @classmethod
    def _to_str(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


_NON_FINITE = {"NaN": math.nan, "Infinity": math.inf, "-Infinity": -math.inf}


class DoubleValue(DataModel):
    kind: ClassVar[str] = "doubleValue"
    double_value: float

    @field_validator("double_value", mode="before")
    @classmethod
    def _from_wire(cls, value: Any) -> Any:
        if isinstance(value, str) and value in _NON_FINITE:
            return _NON_FINITE[value]
        return value

    @field_serializer("double_value")
    def _to_wire(self, value: float) -> float | str:
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return value


class BooleanValue(DataModel):
    kind: ClassVar[str] = "booleanValue"
    boolean_value: bool


class NullValue(DataModel):
    kind: ClassVar[str] = "nullValue"
    null_value: Literal["NULL_VALUE"] = "NULL_VALUE"

    @field_validator("null_value", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        return "NULL_VALUE"


class TimestampValue(DataModel):
    """Timestamp value.

    Attributes:
        timestamp_value: RFC3339 timestamp, kept verbatim.
    """

    kind: ClassVar[str] = "timestampValue"
    timestamp_value: str


class GeoPointValue(DataModel):
    kind: ClassVar[str] = "geoPointValue"
    geo_point_value: GeoPoint


class BytesValue(DataModel):
    """Bytes value.

    Attributes:
        bytes_value: Base64 encoded bytes, kept verbatim.
    """

    kind: ClassVar[str] = "bytesValue"
    bytes_value: str


class ReferenceValue(DataModel):
    """Reference value.

    Attributes:
        reference_value:
            Document resource name
            "projects/{p}/databases/{d}/documents/{path}".
    """

    kind: ClassVar[str] = "referenceValue"
    reference_value: str


class MapData(DataModel):
    fields: dict[str, Value] = Field(default_factory=dict)


class MapValue(DataModel):
    kind: ClassVar[str] = "mapValue"
    map_value: MapData


class ArrayData(DataModel):
    values: list[Value] = Field(default_factory=list)


class ArrayValue(DataModel):
    kind: ClassVar[str] = "arrayValue"
    array_value: ArrayData


VALUE_TYPES = (
    StringValue,
    IntegerValue,
    DoubleValue,
    BooleanValue,
    MapValue,
    ArrayValue,
    NullValue,
    TimestampValue,
    GeoPointValue,
    BytesValue,
    ReferenceValue,
)

_VALUE_KINDS = {t.kind for t in VALUE_TYPES}


def get_value_kind(value: Any) -> str | None:
    if isinstance(value, dict):
        for key in value:
            kind = key if key in _VALUE_KINDS else to_camel(key)
            if kind in _VALUE_KINDS:
                return kind
        return None
    return getattr(value, "kind", None)


Value = Annotated[
    Union[
        Annotated[StringValue, Tag("stringValue")],
        Annotated[IntegerValue, Tag("integerValue")],
        Annotated[DoubleValue, Tag("doubleValue")],
        Annotated[BooleanValue, Tag("booleanValue")],
        Annotated[MapValue, Tag("mapValue")],
        Annotated[ArrayValue, Tag("arrayValue")],
        Annotated[NullValue, Tag("nullValue")],
        Annotated[TimestampValue, Tag("timestampValue")],
        Annotated[GeoPointValue, Tag("geoPointValue")],
        Annotated[BytesValue, Tag("bytesValue")],
        Annotated[ReferenceValue, Tag("referenceValue")],
    ],
    Discriminator(get_value_kind),
]

MapData.model_rebuild()
ArrayData.model_rebuild()
MapValue.model_rebuild()
ArrayValue.model_rebuild()


# Documents and writes


class Document(DataModel):
    """Firestore document.

    Attributes:
        name:
            Resource name
            "projects/{p}/databases/{d}/documents/{path}".
        fields: Document fields.
        create_time: Time the document was created.
        update_time: Time the document was last changed.
    """

    name: str | None = None
    fields: dict[str, Value] = Field(default_factory=dict)
    create_time: str | None = None
    update_time: str | None = None


class Precondition(DataModel):
    """Write precondition.

    Attributes:
        exists:
            True if the document must exist,
            False if it must not exist.
        update_time: The document must have been last updated at this time.
    """

    exists: bool | None = None
    update_time: str | None = None


class DocumentMask(DataModel):
    field_paths: list[str] = Field(default_factory=list)


class ServerValue(str, Enum):
    """Server value.

    Attributes:
        REQUEST_TIME: Time the server processed the request.
    """

    REQUEST_TIME = "REQUEST_TIME"


class FieldTransform(DataModel):
    """Transformation of a single field.

    Exactly one transformation is set.

    Attributes:
        field_path: Field path.
        set_to_server_value: Set to a server value.
        increment: Add the value to the current value.
        maximum: Keep the larger of the value and the current value.
        minimum: Keep the smaller of the value and the current value.
        append_missing_elements: Array union.
        remove_all_from_array: Array remove.
    """

    field_path: str
    set_to_server_value: ServerValue | None = None
    increment: Value | None = None
    maximum: Value | None = None
    minimum: Value | None = None
    append_missing_elements: ArrayData | None = None
    remove_all_from_array: ArrayData | None = None


class DocumentTransform(DataModel):
    document: str
    field_transforms: list[FieldTransform] = Field(default_factory=list)


class Write(DataModel):
    """Write intent.

    Exactly one of update, delete or transform is set.

    Attributes:
        update:
            Document to write.
        delete:
            Resource name of the document to delete.
        transform:
            Transformations to apply to a document.
        update_mask:
            Fields the update applies to. The whole document
            is replaced when not set.
        update_transforms:
            Transformations applied after the update.
        current_document:
            Precondition the server checks before writing.
    """

    update: Document | None = None
    delete: str | None = None
    transform: DocumentTransform | None = None
    update_mask: DocumentMask | None = None
    update_transforms: list[FieldTransform] | None = None
    current_document: Precondition | None = None


class WriteResult(DataModel):
    """Result of a single write.

    Attributes:
        update_time: Last update time of the document after the write.
        transform_results: Results of the field transforms, in order.
    """

    update_time: str | None = None
    transform_results: list[Value] | None = None


class CommitResponse(DataModel):
    write_results: list[WriteResult] = Field(default_factory=list)
    commit_time: str | None = None


class ReadOnly(DataModel):
    read_time: str | None = None


class ReadWrite(DataModel):
    retry_transaction: str | None = None


class TransactionOptions(DataModel):
    """Options for beginning a transaction.

    Attributes:
        read_only: The transaction can only read.
        read_write:
            The transaction can read and write.
            Set retry_transaction to the id of an aborted
            transaction being retried.
    """

    read_only: ReadOnly | None = None
    read_write: ReadWrite | None = None


class BeginTransactionResponse(DataModel):
    transaction: str


class BatchGetResponse(DataModel):
    found: Document | None = None
    missing: str | None = None
    transaction: str | None = None
    read_time: str | None = None


# Queries


class FieldOperator(str, Enum):
    """Field filter operator.

    Attributes:
        LESS_THAN: Less than.
        LESS_THAN_OR_EQUAL: Less than or equal.
        GREATER_THAN: Greater than.
        GREATER_THAN_OR_EQUAL: Greater than or equal.
        EQUAL: Equal.
        NOT_EQUAL: Not equal.
        ARRAY_CONTAINS: Array field contains the value.
        IN: Field equals one of the values.
        ARRAY_CONTAINS_ANY: Array field contains any of the values.
        NOT_IN: Field equals none of the values.
    """

    LESS_THAN = "LESS_THAN"
    LESS_THAN_OR_EQUAL = "LESS_THAN_OR_EQUAL"
    GREATER_THAN = "GREATER_THAN"
    GREATER_THAN_OR_EQUAL = "GREATER_THAN_OR_EQUAL"
    EQUAL = "EQUAL"
    NOT_EQUAL = "NOT_EQUAL"
    ARRAY_CONTAINS = "ARRAY_CONTAINS"
    IN = "IN"
    ARRAY_CONTAINS_ANY = "ARRAY_CONTAINS_ANY"
    NOT_IN = "NOT_IN"


class UnaryOperator(str, Enum):
    """Unary filter operator.

    Attributes:
        IS_NAN: Field is NaN.
        IS_NULL: Field is null.
        IS_NOT_NAN: Field is not NaN.
        IS_NOT_NULL: Field is not null.
    """

    IS_NAN = "IS_NAN"
    IS_NULL = "IS_NULL"
    IS_NOT_NAN = "IS_NOT_NAN"
    IS_NOT_NULL = "IS_NOT_NULL"


class CompositeOperator(str, Enum):
    """Composite filter operator.

    Attributes:
        AND: All filters match.
        OR: At least one filter matches.
    """

    AND = "AND"
    OR = "OR"


class Direction(str, Enum):
    """Sort direction.

    Attributes:
        ASCENDING: Ascending.
        DESCENDING: Descending.
    """

    ASCENDING = "ASCENDING"
    DESCENDING = "DESCENDING"


class FieldReference(DataModel):
    field_path: str


class FieldFilter(DataModel):
    field: FieldReference
    op: FieldOperator
    value: Value


class UnaryFilter(DataModel):
    op: UnaryOperator
    field: FieldReference


class CompositeFilter(DataModel):
    op: CompositeOperator
    filters: list[Filter] = Field(default_factory=list)


class Filter(DataModel):
    """Query filter.

    Exactly one of the filters is set.

    Attributes:
        field_filter: Comparison of a field with a value.
        unary_filter: Unary check of a field.
        composite_filter: AND or OR of nested filters.
    """

    field_filter: FieldFilter | None = None
    unary_filter: UnaryFilter | None = None
    composite_filter: CompositeFilter | None = None

    def is_and(self) -> bool:
        return (
            self.composite_filter is not None
            and self.composite_filter.op == CompositeOperator.AND
        )


CompositeFilter.model_rebuild()


class Order(DataModel):
    field: FieldReference
    direction: Direction = Direction.ASCENDING


class Cursor(DataModel):
    """Query cursor.

    Attributes:
        values: Values of the order by fields, in order.
        before:
            True if the position is just before the values,
            False if just after.
    """

    values: list[Value] = Field(default_factory=list)
    before: bool | None = None


class Projection(DataModel):
    fields: list[FieldReference] = Field(default_factory=list)


class CollectionSelector(DataModel):
    collection_id: str
    all_descendants: bool | None = None


class StructuredQuery(DataModel):
    """Structured query.

    Attributes:
        select: Fields to return.
        from_: Collections to query.
        where: Filter tree.
        order_by: Sort keys in priority order.
        start_at: Start cursor.
        end_at: End cursor.
        offset: Results to skip.
        limit: Maximum results to return.
    """

    select: Projection | None = None
    from_: list[CollectionSelector] | None = Field(default=None, alias="from")
    where: Filter | None = None
    order_by: list[Order] | None = None
    start_at: Cursor | None = None
    end_at: Cursor | None = None
    offset: int | None = None
    limit: int | None = None


class RunQueryResponse(DataModel):
    document: Document | None = None
    read_time: str | None = None
    transaction: str | None = None
    skipped_results: int | None = None


# Listen


class QueryTarget(DataModel):
    parent: str
    structured_query: StructuredQuery


class DocumentsTarget(DataModel):
    documents: list[str] = Field(default_factory=list)


class Target(DataModel):
    """Listen target registration.

    Attributes:
        query: Query to listen to.
        documents: Documents to listen to.
        target_id: Client assigned target id.
        resume_token: Resume from this token.
        read_time: Resume from this time.
        once: Remove the target once it is current.
    """

    query: QueryTarget | None = None
    documents: DocumentsTarget | None = None
    target_id: int | None = None
    resume_token: str | None = None
    read_time: str | None = None
    once: bool | None = None


class ListenRequest(DataModel):
    database: str
    add_target: Target | None = None
    remove_target: int | None = None
    labels: dict[str, str] | None = None


class TargetChangeType(str, Enum):
    """Target change type.

    Attributes:
        NO_CHANGE: No change, used to send a resume token.
        ADD: Targets were added.
        REMOVE: Targets were removed.
        CURRENT: Targets are consistent with the server.
        RESET: Targets were reset and will be resent.
    """

    NO_CHANGE = "NO_CHANGE"
    ADD = "ADD"
    REMOVE = "REMOVE"
    CURRENT = "CURRENT"
    RESET = "RESET"


class Status(DataModel):
    code: int | None = None
    message: str | None = None
    details: list[dict] | None = None


class TargetChange(DataModel):
    target_change_type: TargetChangeType = TargetChangeType.NO_CHANGE
    target_ids: list[int] = Field(default_factory=list)
    cause: Status | None = None
    resume_token: str | None = None
    read_time: str | None = None


class DocumentChange(DataModel):
    document: Document
    target_ids: list[int] = Field(default_factory=list)
    removed_target_ids: list[int] = Field(default_factory=list)


class DocumentDelete(DataModel):
    document: str
    removed_target_ids: list[int] = Field(default_factory=list)
    read_time: str | None = None


class DocumentRemove(DataModel):
    document: str
    removed_target_ids: list[int] = Field(default_factory=list)
    read_time: str | None = None


class ExistenceFilter(DataModel):
    target_id: int | None = None
    count: int | None = None


class ListenResponseType(str, Enum):
    """Listen response type.

    Attributes:
        TARGET_CHANGE: Target state changed.
        DOCUMENT_CHANGE: Document changed.
        DOCUMENT_DELETE: Document was deleted.
        DOCUMENT_REMOVE: Document no longer matches the target.
        FILTER: Existence filter.
    """

    TARGET_CHANGE = "target_change"
    DOCUMENT_CHANGE = "document_change"
    DOCUMENT_DELETE = "document_delete"
    DOCUMENT_REMOVE = "document_remove"
    FILTER = "filter"


class ListenResponse(DataModel):
    """Listen stream event.

    Exactly one of the attributes is set.
    """

    target_change: TargetChange | None = None
    document_change: DocumentChange | None = None
    document_delete: DocumentDelete | None = None
    document_remove: DocumentRemove | None = None
    filter: ExistenceFilter | None = None

    @property
    def type(self) -> ListenResponseType | None:
        for t in ListenResponseType:
            if getattr(self, t.value) is not None:
                return t
        return None

    @property
    def resume_token(self) -> str | None:
        if self.target_change is not None:
            return self.target_change.resume_token
        return None

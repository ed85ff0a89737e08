from ._batch import WriteBatch
from ._codec import decode_fields, decode_value, encode_fields, encode_value
from ._listen import JsonBoundaryScanner, ListenStream
from ._models import (
    ArrayValue,
    BooleanValue,
    BytesValue,
    CommitResponse,
    CompositeFilter,
    CompositeOperator,
    Cursor,
    Direction,
    Document,
    DocumentChange,
    DocumentDelete,
    DocumentMask,
    DocumentRemove,
    DocumentTransform,
    DoubleValue,
    ExistenceFilter,
    FieldFilter,
    FieldOperator,
    FieldReference,
    FieldTransform,
    Filter,
    GeoPoint,
    GeoPointValue,
    IntegerValue,
    ListenRequest,
    ListenResponse,
    ListenResponseType,
    MapValue,
    NullValue,
    Order,
    Precondition,
    ReferenceValue,
    RunQueryResponse,
    StringValue,
    StructuredQuery,
    Target,
    TargetChange,
    TargetChangeType,
    TimestampValue,
    TransactionOptions,
    UnaryFilter,
    UnaryOperator,
    Value,
    Write,
    WriteResult,
)
from ._query import Query, and_filter, field_filter, or_filter, unary_filter
from ._reference import CollectionReference, DocumentReference
from ._snapshot import DocumentSnapshot, QuerySnapshot
from ._transaction import (
    Transaction,
    TransactionState,
    is_contention_error,
)
from .component import Firestore
from .transforms import (
    SERVER_TIMESTAMP,
    ArrayRemove,
    ArrayUnion,
    Increment,
    Maximum,
    Minimum,
)

__all__ = [
    "SERVER_TIMESTAMP",
    "ArrayRemove",
    "ArrayUnion",
    "ArrayValue",
    "BooleanValue",
    "BytesValue",
    "CollectionReference",
    "CommitResponse",
    "CompositeFilter",
    "CompositeOperator",
    "Cursor",
    "Direction",
    "Document",
    "DocumentChange",
    "DocumentDelete",
    "DocumentMask",
    "DocumentReference",
    "DocumentRemove",
    "DocumentSnapshot",
    "DocumentTransform",
    "DoubleValue",
    "ExistenceFilter",
    "FieldFilter",
    "FieldOperator",
    "FieldReference",
    "FieldTransform",
    "Filter",
    "Firestore",
    "GeoPoint",
    "GeoPointValue",
    "Increment",
    "IntegerValue",
    "JsonBoundaryScanner",
    "ListenRequest",
    "ListenResponse",
    "ListenResponseType",
    "ListenStream",
    "MapValue",
    "Maximum",
    "Minimum",
    "NullValue",
    "Order",
    "Precondition",
    "Query",
    "QuerySnapshot",
    "ReferenceValue",
    "RunQueryResponse",
    "StringValue",
    "StructuredQuery",
    "Target",
    "TargetChange",
    "TargetChangeType",
    "TimestampValue",
    "Transaction",
    "TransactionOptions",
    "TransactionState",
    "UnaryFilter",
    "UnaryOperator",
    "Value",
    "Write",
    "WriteBatch",
    "WriteResult",
    "and_filter",
    "decode_fields",
    "decode_value",
    "encode_fields",
    "encode_value",
    "field_filter",
    "is_contention_error",
    "or_filter",
    "unary_filter",
]

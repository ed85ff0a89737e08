import math
from datetime import datetime, timezone

import pytest
from fbadmin.core.exceptions import SerializationError
from fbadmin.firestore import (
    Document,
    DoubleValue,
    GeoPoint,
    IntegerValue,
    MapValue,
    NullValue,
    decode_fields,
    decode_value,
    encode_fields,
    encode_value,
)


@pytest.mark.parametrize(
    "value",
    [
        None,
        True,
        False,
        0,
        42,
        -(2**63),
        2**63 - 1,
        3.25,
        -0.5,
        "",
        "hello",
        [],
        [1, "a", None, [2.5, False]],
        {},
        {"a": {"b": [1, {"c": "d"}]}},
    ],
)
def test_round_trip(value):
    assert decode_value(encode_value(value)) == value


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, {"nullValue": "NULL_VALUE"}),
        (True, {"booleanValue": True}),
        (42, {"integerValue": "42"}),
        (1.5, {"doubleValue": 1.5}),
        ("x", {"stringValue": "x"}),
        (b"\x00\x01", {"bytesValue": "AAE="}),
        (
            datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
            {"timestampValue": "2024-01-02T03:04:05.000000Z"},
        ),
        (
            GeoPoint(latitude=1.5, longitude=-2.0),
            {"geoPointValue": {"latitude": 1.5, "longitude": -2.0}},
        ),
        ([1], {"arrayValue": {"values": [{"integerValue": "1"}]}}),
        (
            {"a": "b"},
            {"mapValue": {"fields": {"a": {"stringValue": "b"}}}},
        ),
    ],
)
def test_encode_wire_format(value, expected):
    assert encode_value(value).to_dict() == expected


def test_decode_document_from_wire():
    document = Document.from_dict(
        {
            "name": "projects/p/databases/(default)/documents/users/alice",
            "fields": {
                "age": {"integerValue": "30"},
                "score": {"doubleValue": 9.5},
                "nickname": {"nullValue": None},
                "tags": {"arrayValue": {"values": [{"stringValue": "a"}]}},
                "address": {
                    "mapValue": {
                        "fields": {"city": {"stringValue": "Paris"}}
                    }
                },
                "empty": {"arrayValue": {}},
            },
            "createTime": "2024-01-01T00:00:00Z",
        }
    )
    assert isinstance(document.fields["age"], IntegerValue)
    assert isinstance(document.fields["nickname"], NullValue)
    assert isinstance(document.fields["address"], MapValue)
    assert decode_fields(document.fields) == {
        "age": 30,
        "score": 9.5,
        "nickname": None,
        "tags": ["a"],
        "address": {"city": "Paris"},
        "empty": [],
    }
    assert document.create_time == "2024-01-01T00:00:00Z"


def test_integer_outside_range():
    with pytest.raises(SerializationError):
        encode_value(2**63)
    with pytest.raises(SerializationError):
        decode_value(IntegerValue(integer_value=str(2**64)))


@pytest.mark.parametrize("number", [math.inf, -math.inf])
def test_infinite_double_round_trip(number: float):
    wire = encode_value(number).to_dict()
    assert wire == {
        "doubleValue": "Infinity" if number > 0 else "-Infinity"
    }
    document = Document.from_dict({"fields": {"x": wire}})
    assert decode_value(document.fields["x"]) == number
    assert decode_value(encode_value(number)) == number


def test_nan_double_round_trip():
    document = Document.from_dict(
        {"fields": {"x": {"doubleValue": "NaN"}, "y": {"integerValue": "1"}}}
    )
    value = document.fields["x"]
    assert isinstance(value, DoubleValue)
    assert encode_value(math.nan).to_dict() == {"doubleValue": "NaN"}
    assert math.isnan(decode_value(value))
    assert math.isnan(decode_value(encode_value(math.nan)))
    data = decode_fields(document.fields)
    assert math.isnan(data["x"])
    assert data["y"] == 1


def test_unsupported_type():
    with pytest.raises(SerializationError):
        encode_value(object())
    with pytest.raises(SerializationError):
        encode_fields(["not", "a", "mapping"])
    with pytest.raises(SerializationError):
        encode_fields({1: "non string key"})

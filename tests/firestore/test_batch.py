import asyncio

import pytest
from fbadmin.core.exceptions import BadRequestError
from fbadmin.firestore import (
    SERVER_TIMESTAMP,
    ArrayUnion,
    Firestore,
    Increment,
)

from common import DOCUMENTS_PATH, PROJECT_ID, MockServer


def get_commit_response(count: int) -> dict:
    return {
        "writeResults": [
            {"updateTime": f"2024-01-01T00:00:0{i}Z"} for i in range(count)
        ],
        "commitTime": "2024-01-01T00:00:09Z",
    }


@pytest.mark.asyncio
async def test_empty_commit_sends_nothing():
    server = MockServer()
    firestore = Firestore(server.get_transport(), PROJECT_ID)
    assert await firestore.batch().commit() == []
    assert server.requests == []


@pytest.mark.asyncio
async def test_update_without_fields_is_rejected():
    server = MockServer()
    firestore = Firestore(server.get_transport(), PROJECT_ID)
    batch = firestore.batch()

    with pytest.raises(BadRequestError):
        batch.update("users/alice", {})
    assert await batch.commit() == []
    assert server.requests == []


@pytest.mark.asyncio
async def test_commit_writes_in_order():
    server = MockServer().add(200, json=get_commit_response(3))
    firestore = Firestore(server.get_transport(), PROJECT_ID)
    batch = firestore.batch()
    batch.set("users/alice", {"name": "Alice"})
    batch.update(firestore.doc("users/bob"), {"age": 40})
    batch.delete("users/carol")
    assert len(batch) == 3

    results = await batch.commit()

    assert [r.update_time for r in results] == [
        "2024-01-01T00:00:00Z",
        "2024-01-01T00:00:01Z",
        "2024-01-01T00:00:02Z",
    ]
    assert str(server.requests[0].url).endswith("/documents:commit")
    writes = server.get_json(0)["writes"]
    assert writes[0] == {
        "update": {
            "name": f"{DOCUMENTS_PATH}/users/alice",
            "fields": {"name": {"stringValue": "Alice"}},
        }
    }
    assert writes[1]["updateMask"] == {"fieldPaths": ["age"]}
    assert writes[1]["currentDocument"] == {"exists": True}
    assert writes[2] == {"delete": f"{DOCUMENTS_PATH}/users/carol"}
    assert len(batch) == 0


@pytest.mark.asyncio
async def test_clones_share_buffer():
    server = MockServer().add(200, json=get_commit_response(2))
    firestore = Firestore(server.get_transport(), PROJECT_ID)
    batch = firestore.batch()
    clone = batch.clone()
    batch.create("users/alice", {"a": 1})
    clone.create("users/bob", {"b": 2})

    results, empty = await asyncio.gather(batch.commit(), clone.commit())

    assert len(results) + len(empty) == 2
    assert len(server.requests) == 1
    assert len(server.get_json(0)["writes"]) == 2


@pytest.mark.asyncio
async def test_transforms_are_sent_as_update_transforms():
    server = MockServer().add(200, json=get_commit_response(1))
    firestore = Firestore(server.get_transport(), PROJECT_ID)
    batch = firestore.batch()
    batch.set(
        "users/alice",
        {
            "name": "Alice",
            "visits": Increment(1),
            "meta": {"updated": SERVER_TIMESTAMP},
            "tags": ArrayUnion(["a"]),
        },
        merge=True,
    )
    await batch.commit()

    write = server.get_json(0)["writes"][0]
    assert write["update"]["fields"] == {"name": {"stringValue": "Alice"}}
    assert write["updateMask"] == {"fieldPaths": ["name"]}
    assert write["updateTransforms"] == [
        {"fieldPath": "visits", "increment": {"integerValue": "1"}},
        {"fieldPath": "meta.updated", "setToServerValue": "REQUEST_TIME"},
        {
            "fieldPath": "tags",
            "appendMissingElements": {"values": [{"stringValue": "a"}]},
        },
    ]

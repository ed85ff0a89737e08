import json

import httpx
import pytest
from fbadmin.core.exceptions import BadRequestError, MultipartError
from fbadmin.messaging import (
    AndroidConfig,
    ApnsConfig,
    ApnsPayload,
    Aps,
    Message,
    Messaging,
    MulticastMessage,
    Notification,
)
from fbadmin.messaging.component import parse_multipart_response

from common import PROJECT_ID, MockServer, get_error

SEND_URL = f"https://fcm.googleapis.com/v1/projects/{PROJECT_ID}/messages:send"
BOUNDARY = "batch_response"


def get_part(status_code: int, body: dict, reason: str = "OK") -> str:
    return (
        f"--{BOUNDARY}\r\n"
        "Content-Type: application/http\r\n"
        "Content-ID: response-1\r\n"
        "\r\n"
        f"HTTP/1.1 {status_code} {reason}\r\n"
        "Content-Type: application/json; charset=UTF-8\r\n"
        "\r\n"
        f"{json.dumps(body)}\r\n"
        "\r\n"
    )


def get_batch_response(*parts: str) -> httpx.Response:
    return httpx.Response(
        200,
        content=("".join(parts) + f"--{BOUNDARY}--\r\n").encode(),
        headers={"content-type": f"multipart/mixed; boundary={BOUNDARY}"},
    )


@pytest.mark.asyncio
async def test_send():
    server = MockServer().add(
        200, json={"name": f"projects/{PROJECT_ID}/messages/1"}
    )
    messaging = Messaging(server.get_transport(), PROJECT_ID)

    name = await messaging.send(
        Message(
            topic="/topics/news",
            notification=Notification(title="Hello", body="World"),
            android=AndroidConfig(collapse_key="news", ttl="3600s"),
            apns=ApnsConfig(
                payload=ApnsPayload(
                    aps=Aps(content_available=1), custom="value"
                )
            ),
        )
    )

    assert name == f"projects/{PROJECT_ID}/messages/1"
    assert str(server.requests[0].url) == SEND_URL
    assert server.get_json() == {
        "validateOnly": False,
        "message": {
            "topic": "news",
            "notification": {"title": "Hello", "body": "World"},
            "android": {"collapseKey": "news", "ttl": "3600s"},
            "apns": {
                "payload": {"aps": {"content-available": 1}, "custom": "value"}
            },
        },
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "message",
    [
        Message(data={"a": "b"}),
        Message(token="device", topic="news"),
        Message(token="device", condition="'a' in topics"),
    ],
)
async def test_send_requires_one_target(message: Message):
    server = MockServer()
    messaging = Messaging(server.get_transport(), PROJECT_ID)
    with pytest.raises(BadRequestError):
        await messaging.send(message)
    assert server.requests == []


@pytest.mark.asyncio
async def test_send_error():
    server = MockServer().add(
        400,
        json=get_error(400, "Invalid registration token", "INVALID_ARGUMENT"),
    )
    messaging = Messaging(server.get_transport(), PROJECT_ID)
    with pytest.raises(BadRequestError) as e:
        await messaging.send(Message(token="bad"))
    assert "Invalid registration token" in str(e.value)


@pytest.mark.asyncio
async def test_send_each():
    server = MockServer(
        lambda request: get_batch_response(
            get_part(200, {"name": "projects/p/messages/1"}),
            get_part(
                400,
                get_error(400, "Invalid token", "INVALID_ARGUMENT"),
                "Bad Request",
            ),
            get_part(200, {"name": "projects/p/messages/3"}),
        )
    )
    messaging = Messaging(server.get_transport(), PROJECT_ID)

    response = await messaging.send_each(
        [
            Message(token="a", data={"k": "v"}),
            Message(token="b"),
            Message(topic="news"),
        ],
        dry_run=True,
    )

    assert response.success_count == 2
    assert response.failure_count == 1
    assert [r.success for r in response.responses] == [True, False, True]
    assert response.responses[0].message_id == "projects/p/messages/1"
    assert response.responses[1].error == "Invalid token (code: 400)"
    assert response.responses[1].status_code == 400

    request = server.requests[0]
    assert str(request.url) == "https://fcm.googleapis.com/batch"
    content_type = request.headers["content-type"]
    assert content_type.startswith("multipart/mixed; boundary=batch_")
    body = request.content.decode()
    assert body.count(f"POST /v1/projects/{PROJECT_ID}/messages:send") == 3
    assert '"validateOnly": true' in body
    assert body.endswith("--\r\n")


@pytest.mark.asyncio
async def test_send_each_empty_sends_nothing():
    server = MockServer()
    messaging = Messaging(server.get_transport(), PROJECT_ID)

    response = await messaging.send_each([])

    assert response.success_count == 0
    assert response.responses == []
    assert server.requests == []


@pytest.mark.asyncio
async def test_send_each_limit():
    messaging = Messaging(MockServer().get_transport(), PROJECT_ID)
    with pytest.raises(BadRequestError):
        await messaging.send_each(
            [Message(token=str(i)) for i in range(501)]
        )


@pytest.mark.asyncio
async def test_send_each_response_count_mismatch():
    server = MockServer(
        lambda request: get_batch_response(
            get_part(200, {"name": "projects/p/messages/1"})
        )
    )
    messaging = Messaging(server.get_transport(), PROJECT_ID)
    with pytest.raises(MultipartError):
        await messaging.send_each([Message(token="a"), Message(token="b")])


@pytest.mark.asyncio
async def test_send_each_for_multicast():
    server = MockServer(
        lambda request: get_batch_response(
            get_part(200, {"name": "projects/p/messages/1"}),
            get_part(200, {"name": "projects/p/messages/2"}),
        )
    )
    messaging = Messaging(server.get_transport(), PROJECT_ID)

    response = await messaging.send_each_for_multicast(
        MulticastMessage(tokens=["a", "b"], data={"k": "v"})
    )

    assert response.success_count == 2
    body = server.requests[0].content.decode()
    assert '"token": "a"' in body
    assert '"token": "b"' in body
    assert body.count('"data": {"k": "v"}') == 2


def test_parse_multipart_without_boundary():
    with pytest.raises(MultipartError):
        parse_multipart_response(b"", "multipart/mixed")


def test_parse_multipart_invalid_part():
    content = (
        f"--{BOUNDARY}\r\n"
        "Content-Type: application/http\r\n"
        "\r\n"
        "HTTP/1.1 200 OK\r\n"
        "\r\n"
        "not json\r\n"
        f"--{BOUNDARY}--\r\n"
    ).encode()
    with pytest.raises(MultipartError):
        parse_multipart_response(
            content, f"multipart/mixed; boundary={BOUNDARY}"
        )


@pytest.mark.asyncio
async def test_subscribe_to_topic_chunks_tokens():
    server = (
        MockServer()
        .add(200, json={"results": [{}] * 999 + [{"error": "NOT_FOUND"}]})
        .add(200, json={"results": [{"error": "INVALID_ARGUMENT"}, {}]})
    )
    messaging = Messaging(server.get_transport(), PROJECT_ID)

    response = await messaging.subscribe_to_topic(
        [f"token-{i}" for i in range(1002)], "news"
    )

    assert response.success_count == 1000
    assert response.failure_count == 2
    assert [(e.index, e.reason) for e in response.errors] == [
        (999, "NOT_FOUND"),
        (1000, "INVALID_ARGUMENT"),
    ]
    assert len(server.requests) == 2
    request = server.requests[0]
    assert str(request.url) == "https://iid.googleapis.com/iid/v1:batchAdd"
    assert request.headers["access_token_auth"] == "true"
    assert server.get_json(0)["to"] == "/topics/news"
    assert len(server.get_json(0)["registration_tokens"]) == 1000
    assert server.get_json(1)["registration_tokens"] == [
        "token-1000",
        "token-1001",
    ]


@pytest.mark.asyncio
async def test_unsubscribe_from_topic():
    server = MockServer().add(200, json={"results": [{}]})
    messaging = Messaging(server.get_transport(), PROJECT_ID)

    response = await messaging.unsubscribe_from_topic(["a"], "/topics/news")

    assert response.success_count == 1
    assert str(server.requests[0].url).endswith("/iid/v1:batchRemove")
    assert server.get_json()["to"] == "/topics/news"

import httpx
import pytest
from fbadmin.core.exceptions import ApiError, NotFoundError, TransportError

from common import MockServer, get_error

URL = "https://example.googleapis.com/v1/resource"


@pytest.mark.asyncio
async def test_send_attaches_bearer_token():
    server = MockServer().add(200, json={"ok": True})
    transport = server.get_transport()
    response = await transport.send("GET", URL)
    assert response.json() == {"ok": True}
    assert server.requests[0].headers["authorization"] == "Bearer test-token"


@pytest.mark.asyncio
async def test_send_retries_unavailable():
    server = MockServer()
    server.add(503, json=get_error(503, "Unavailable", "UNAVAILABLE"))
    server.add(200, json={"ok": True})
    transport = server.get_transport(max_retries=3)
    response = await transport.send("POST", URL, json={"a": 1})
    assert response.status_code == 200
    assert len(server.requests) == 2
    assert server.get_json(1) == {"a": 1}


@pytest.mark.asyncio
async def test_send_returns_last_retryable_response():
    server = MockServer(lambda request: httpx.Response(429))
    transport = server.get_transport(max_retries=2)
    response = await transport.send("GET", URL)
    assert response.status_code == 429
    assert len(server.requests) == 3


@pytest.mark.asyncio
async def test_send_does_not_retry_client_errors():
    server = MockServer().add(400)
    transport = server.get_transport(max_retries=3)
    response = await transport.send("GET", URL)
    assert response.status_code == 400
    assert len(server.requests) == 1


@pytest.mark.asyncio
async def test_send_raises_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    server = MockServer(handler)
    transport = server.get_transport(max_retries=1)
    with pytest.raises(TransportError):
        await transport.send("GET", URL)
    assert len(server.requests) == 2


@pytest.mark.asyncio
async def test_stream_raises_api_error():
    server = MockServer().add(
        404, json=get_error(404, "Database not found", "NOT_FOUND")
    )
    transport = server.get_transport()
    with pytest.raises(NotFoundError) as e:
        async with transport.stream("POST", URL, json={}):
            pass
    assert str(e.value) == "Database not found (code: 404)"


@pytest.mark.asyncio
async def test_stream_retries_unavailable():
    server = MockServer()
    server.add(503, json=get_error(503, "Unavailable", "UNAVAILABLE"))
    server.add(200, content=b'[{"a": 1}]')
    transport = server.get_transport(max_retries=1)
    async with transport.stream("POST", URL, json={"a": 1}) as response:
        assert response.status_code == 200
        assert await response.aread() == b'[{"a": 1}]'
    assert len(server.requests) == 2
    assert server.get_json(1) == {"a": 1}


@pytest.mark.asyncio
async def test_stream_raises_last_retryable_response():
    server = MockServer(lambda request: httpx.Response(503))
    transport = server.get_transport(max_retries=1)
    with pytest.raises(ApiError) as e:
        async with transport.stream("GET", URL):
            pass
    assert e.value.status_code == 503
    assert len(server.requests) == 2

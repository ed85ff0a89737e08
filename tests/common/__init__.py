import json
from typing import Any, Callable

import httpx
from fbadmin.core import GoogleCredentials, Transport

PROJECT_ID = "test-project"
DOCUMENTS_PATH = f"projects/{PROJECT_ID}/databases/(default)/documents"


class MockServer:
    """Replies to requests from a queue of responses or a handler
    and records every request it receives.
    """

    requests: list[httpx.Request]
    responses: list[httpx.Response]
    handler: Callable[[httpx.Request], httpx.Response] | None

    def __init__(
        self,
        handler: Callable[[httpx.Request], httpx.Response] | None = None,
    ):
        self.requests = []
        self.responses = []
        self.handler = handler

    def add(
        self,
        status_code: int = 200,
        json: Any = None,
        content: bytes | str | None = None,
        headers: dict | None = None,
    ) -> "MockServer":
        self.responses.append(
            httpx.Response(
                status_code, json=json, content=content, headers=headers
            )
        )
        return self

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.handler is not None:
            return self.handler(request)
        assert self.responses, f"Unexpected request {request.url}"
        return self.responses.pop(0)

    def get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))

    def get_transport(
        self, max_retries: int = 0, credentials: Any = None
    ) -> Transport:
        return Transport(
            credentials or GoogleCredentials(access_token="test-token"),
            max_retries=max_retries,
            backoff_factor=0,
            client=self.get_client(),
        )

    def get_json(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


def get_error(status_code: int, message: str, status: str) -> dict:
    return {
        "error": {"code": status_code, "message": message, "status": status}
    }

"""
Firebase Cloud Messaging over the FCM v1 REST API.

Batches are sent to the FCM batch endpoint as a multipart/mixed
request with one embedded HTTP request per message.
"""

from __future__ import annotations

__all__ = ["Messaging"]

import email
import email.policy
import json
import logging
import uuid
from typing import Any

from fbadmin.core import Transport, parse_json, raise_for_response
from fbadmin.core.exceptions import BadRequestError, MultipartError

from ._models import (
    BatchResponse,
    ErrorInfo,
    Message,
    MulticastMessage,
    SendResponse,
    TopicManagementResponse,
)

logger = logging.getLogger(__name__)

FCM_URL = "https://fcm.googleapis.com"
IID_URL = "https://iid.googleapis.com"
MAX_BATCH_MESSAGES = 500
MAX_TOPIC_TOKENS = 1000
TOPIC_PREFIX = "/topics/"


class Messaging:
    """Firebase Cloud Messaging client.

    Attributes:
        project_id: Google Cloud project id.
    """

    project_id: str

    _transport: Transport
    _fcm_url: str
    _iid_url: str

    def __init__(
        self,
        transport: Transport,
        project_id: str,
        fcm_url: str = FCM_URL,
        iid_url: str = IID_URL,
    ):
        self._transport = transport
        self.project_id = project_id
        self._fcm_url = fcm_url.rstrip("/")
        self._iid_url = iid_url.rstrip("/")

    @property
    def send_path(self) -> str:
        return f"/v1/projects/{self.project_id}/messages:send"

    async def send(self, message: Message, dry_run: bool = False) -> str:
        """Send a message.

        Args:
            message:
                Message with exactly one target.
            dry_run:
                Validate the message without delivering it.

        Returns:
            Message name assigned by FCM.
        """
        body = build_send_request(message, dry_run)
        response = await self._transport.send(
            "POST", f"{self._fcm_url}{self.send_path}", json=body
        )
        raise_for_response(response, "FCM send failed")
        return parse_json(response)["name"]

    async def send_each(
        self, messages: list[Message], dry_run: bool = False
    ) -> BatchResponse:
        """Send messages in one batch request.

        Args:
            messages:
                Messages, at most 500.
            dry_run:
                Validate the messages without delivering them.

        Returns:
            Outcome of every message, in order. A rejected
            message does not fail the batch.
        """
        bodies = [build_send_request(m, dry_run) for m in messages]
        if not bodies:
            return BatchResponse()
        if len(bodies) > MAX_BATCH_MESSAGES:
            raise BadRequestError(
                f"Can not send more than {MAX_BATCH_MESSAGES} messages "
                "in a single batch"
            )
        boundary = f"batch_{uuid.uuid4().hex}"
        response = await self._transport.send(
            "POST",
            f"{self._fcm_url}/batch",
            content=build_multipart_body(self.send_path, bodies, boundary),
            headers={
                "Content-Type": f"multipart/mixed; boundary={boundary}"
            },
        )
        raise_for_response(response, "FCM batch send failed")
        responses = parse_multipart_response(
            response.content, response.headers.get("content-type", "")
        )
        if len(responses) != len(bodies):
            raise MultipartError(
                f"Expected {len(bodies)} responses, got {len(responses)}"
            )
        success_count = sum(1 for r in responses if r.success)
        return BatchResponse(
            success_count=success_count,
            failure_count=len(responses) - success_count,
            responses=responses,
        )

    async def send_each_for_multicast(
        self, message: MulticastMessage, dry_run: bool = False
    ) -> BatchResponse:
        """Send the message to every token of a multicast message."""
        payload = {
            name: getattr(message, name)
            for name in MulticastMessage.model_fields
            if name != "tokens"
        }
        messages = [
            Message(token=token, **payload) for token in message.tokens
        ]
        return await self.send_each(messages, dry_run)

    async def subscribe_to_topic(
        self, tokens: list[str], topic: str
    ) -> TopicManagementResponse:
        return await self._manage_topic(tokens, topic, "batchAdd")

    async def unsubscribe_from_topic(
        self, tokens: list[str], topic: str
    ) -> TopicManagementResponse:
        return await self._manage_topic(tokens, topic, "batchRemove")

    async def _manage_topic(
        self, tokens: list[str], topic: str, operation: str
    ) -> TopicManagementResponse:
        if not tokens:
            raise BadRequestError("Tokens must not be empty")
        if not topic:
            raise BadRequestError("Topic must not be empty")
        if not topic.startswith(TOPIC_PREFIX):
            topic = f"{TOPIC_PREFIX}{topic}"
        result = TopicManagementResponse()
        for start in range(0, len(tokens), MAX_TOPIC_TOKENS):
            chunk = tokens[start : start + MAX_TOPIC_TOKENS]
            response = await self._transport.send(
                "POST",
                f"{self._iid_url}/iid/v1:{operation}",
                json={"to": topic, "registration_tokens": chunk},
                headers={"access_token_auth": "true"},
            )
            raise_for_response(response, "Topic management failed")
            results = parse_json(response).get("results") or []
            for i, item in enumerate(results):
                if item.get("error"):
                    result.failure_count += 1
                    result.errors.append(
                        ErrorInfo(index=start + i, reason=item["error"])
                    )
                else:
                    result.success_count += 1
        return result


def build_send_request(message: Message, dry_run: bool) -> dict[str, Any]:
    targets = [
        t
        for t in (message.token, message.topic, message.condition)
        if t is not None
    ]
    if len(targets) != 1:
        raise BadRequestError(
            "Message must have exactly one of token, topic or condition"
        )
    data = message.to_dict()
    topic = data.get("topic")
    if topic and topic.startswith(TOPIC_PREFIX):
        data["topic"] = topic[len(TOPIC_PREFIX) :]
    return {"validateOnly": dry_run, "message": data}


def build_multipart_body(
    path: str, bodies: list[dict[str, Any]], boundary: str
) -> bytes:
    parts = []
    for i, body in enumerate(bodies):
        parts.append(
            f"--{boundary}\r\n"
            "Content-Type: application/http\r\n"
            "Content-Transfer-Encoding: binary\r\n"
            f"Content-ID: {i + 1}\r\n"
            "\r\n"
            f"POST {path}\r\n"
            "Content-Type: application/json; charset=UTF-8\r\n"
            "\r\n"
            f"{json.dumps(body)}\r\n"
        )
    parts.append(f"--{boundary}--\r\n")
    return "".join(parts).encode("utf-8")


def parse_multipart_response(
    content: bytes, content_type: str
) -> list[SendResponse]:
    """Parse a multipart/mixed batch response.

    Each part holds an embedded HTTP response whose JSON body
    is a message name or an error envelope.

    Raises:
        MultipartError:
            Missing boundary, or a part that is not an HTTP
            response with a JSON body.
    """
    if "boundary=" not in content_type:
        raise MultipartError("Multipart boundary not found in response")
    message = email.message_from_bytes(
        f"Content-Type: {content_type}\r\n\r\n".encode("utf-8") + content,
        policy=email.policy.HTTP,
    )
    if not message.is_multipart():
        raise MultipartError("Response is not multipart")
    responses = []
    for part in message.iter_parts():
        payload = part.get_payload(decode=True)
        if not payload:
            raise MultipartError("Empty part in response")
        responses.append(_parse_part(payload.decode("utf-8")))
    return responses


def _parse_part(text: str) -> SendResponse:
    text = text.replace("\r\n", "\n").strip()
    head, separator, body = text.partition("\n\n")
    if not separator:
        raise MultipartError("Invalid inner HTTP response format")
    status_line = head.split("\n", 1)[0].split()
    if len(status_line) < 2 or not status_line[1].isdigit():
        raise MultipartError(f"Invalid status line {status_line}")
    status_code = int(status_line[1])
    body = body.strip()
    if not body:
        raise MultipartError("Empty JSON body in response part")
    try:
        data = json.loads(body)
    except ValueError as e:
        raise MultipartError(f"Invalid JSON in response part: {e}") from e
    if 200 <= status_code < 300:
        if not isinstance(data, dict) or "name" not in data:
            raise MultipartError("Response part has no message name")
        return SendResponse(
            success=True, message_id=data["name"], status_code=status_code
        )
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and "message" in error:
        message = f"{error.get('message')} (code: {error.get('code')})"
    else:
        message = f"FCM send failed: {status_code}"
    logger.debug("Batch message failed: %s", message)
    return SendResponse(success=False, error=message, status_code=status_code)

from __future__ import annotations

from typing import Any

import httpx

from .exceptions import (
    ApiError,
    BadRequestError,
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    PreconditionFailedError,
    SerializationError,
    TooManyRequestsError,
    UnauthorizedError,
)

_STATUS_ERRORS: dict[int, type[ApiError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    412: PreconditionFailedError,
    429: TooManyRequestsError,
}


def get_error_envelope(response: httpx.Response) -> dict | None:
    try:
        body = response.json()
    except ValueError:
        return None
    # runQuery and batchGet report errors as a one element array
    if isinstance(body, list) and body:
        body = body[0]
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        return error
    return None


def get_error_message(response: httpx.Response, default_message: str) -> str:
    error = get_error_envelope(response)
    if error is not None and "message" in error:
        return f"{error.get('message')} (code: {error.get('code')})"
    return f"{default_message}: {response.status_code}"


def build_api_error(
    response: httpx.Response,
    default_message: str,
    error_type: type[ApiError] | None = None,
) -> ApiError:
    error = get_error_envelope(response)
    message = get_error_message(response, default_message)
    if error_type is None:
        if response.status_code >= 500:
            error_type = InternalError
        else:
            error_type = _STATUS_ERRORS.get(response.status_code, ApiError)
    code: Any = error.get("code") if error else None
    return error_type(
        message,
        status_code=response.status_code,
        status=error.get("status") if error else None,
        code=code if isinstance(code, int) else None,
        details=error,
    )


def raise_for_response(
    response: httpx.Response,
    default_message: str,
) -> None:
    if response.is_success:
        return
    raise build_api_error(response, default_message)


def parse_json(response: httpx.Response) -> Any:
    if not response.content:
        return dict()
    try:
        return response.json()
    except ValueError as e:
        raise SerializationError(f"Invalid JSON response: {e}") from e

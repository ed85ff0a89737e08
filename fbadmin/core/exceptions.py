__all__ = [
    "ApiError",
    "BaseError",
    "BadRequestError",
    "ConfigError",
    "ConflictError",
    "ForbiddenError",
    "ImportUserError",
    "ImportUsersError",
    "IncompleteMessageError",
    "InternalError",
    "MultipartError",
    "NotFoundError",
    "PreconditionFailedError",
    "SerializationError",
    "TokenVerificationError",
    "TooManyRequestsError",
    "TransactionError",
    "TransportError",
    "UnauthorizedError",
    "UserNotFoundError",
]

from typing import Any


class BaseError(Exception):
    status_code: int | None = None


class TransportError(BaseError):
    """Network failure after the transport exhausted its retries."""


class ApiError(BaseError):
    """Non-2xx response from a Firebase API.

    Attributes:
        message: Human readable message.
        status: Canonical status from the error envelope, e.g. ABORTED.
        code: Numeric code from the error envelope.
        details: Raw error envelope, if any.
    """

    message: str
    status: str | None
    code: int | None
    details: Any

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        status: str | None = None,
        code: int | None = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.status = status
        self.code = code
        self.details = details


class BadRequestError(ApiError):
    status_code = 400


class UnauthorizedError(ApiError):
    status_code = 401


class ForbiddenError(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class UserNotFoundError(NotFoundError):
    pass


class ConflictError(ApiError):
    status_code = 409


class PreconditionFailedError(ApiError):
    status_code = 412


class TooManyRequestsError(ApiError):
    status_code = 429


class InternalError(ApiError):
    status_code = 500


class SerializationError(BaseError):
    """Malformed JSON or a value that cannot be converted."""


class IncompleteMessageError(SerializationError):
    """Stream ended in the middle of a message."""


class MultipartError(SerializationError):
    """Malformed multipart batch response."""


class TransactionError(BaseError):
    """Transaction failed without a server error to report.

    Attributes:
        reason: Why the transaction failed.
    """

    reason: str

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ImportUserError:
    """Failure of one row in a bulk user import.

    Attributes:
        index: Index of the user in the import request.
        message: Error message from the server.
    """

    index: int
    message: str

    def __init__(self, index: int, message: str):
        self.index = index
        self.message = message

    def __repr__(self) -> str:
        return f"ImportUserError(index={self.index}, message={self.message!r})"


class ImportUsersError(BaseError):
    """One or more users failed to import.

    Attributes:
        errors: Per-user failures in request order.
    """

    errors: list[ImportUserError]

    def __init__(self, errors: list[ImportUserError]):
        lines = [f"index {e.index}: {e.message}" for e in errors]
        super().__init__(
            f"Failed to import {len(errors)} user(s): " + "; ".join(lines)
        )
        self.errors = errors


class TokenVerificationError(BaseError):
    status_code = 401


class ConfigError(BaseError):
    status_code = 500

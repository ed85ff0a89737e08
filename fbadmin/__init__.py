from .app import FirebaseApp
from .core import AppOptions
from .core.exceptions import (
    ApiError,
    BadRequestError,
    BaseError,
    ConfigError,
    ConflictError,
    ForbiddenError,
    ImportUserError,
    ImportUsersError,
    IncompleteMessageError,
    InternalError,
    MultipartError,
    NotFoundError,
    PreconditionFailedError,
    SerializationError,
    TokenVerificationError,
    TooManyRequestsError,
    TransactionError,
    TransportError,
    UnauthorizedError,
    UserNotFoundError,
)

__all__ = [
    "ApiError",
    "AppOptions",
    "BadRequestError",
    "BaseError",
    "ConfigError",
    "ConflictError",
    "FirebaseApp",
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

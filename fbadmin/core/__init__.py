from ._credentials import SCOPES, GoogleCredentials
from ._http_helper import (
    build_api_error,
    get_error_message,
    parse_json,
    raise_for_response,
)
from ._log_helper import warn
from ._transport import Transport
from .config import AppOptions
from .data_model import DataModel

__all__ = [
    "AppOptions",
    "DataModel",
    "GoogleCredentials",
    "SCOPES",
    "Transport",
    "build_api_error",
    "get_error_message",
    "parse_json",
    "raise_for_response",
    "warn",
]

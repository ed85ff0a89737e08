from ._models import (
    AndroidConfig,
    AndroidFcmOptions,
    AndroidMessagePriority,
    AndroidNotification,
    ApnsConfig,
    ApnsFcmOptions,
    ApnsPayload,
    Aps,
    ApsAlert,
    BatchResponse,
    Color,
    ErrorInfo,
    FcmOptions,
    LightSettings,
    Message,
    MulticastMessage,
    Notification,
    NotificationPriority,
    SendResponse,
    TopicManagementResponse,
    Visibility,
    WebpushConfig,
    WebpushFcmOptions,
)
from .component import (
    Messaging,
    build_multipart_body,
    parse_multipart_response,
)

__all__ = [
    "AndroidConfig",
    "AndroidFcmOptions",
    "AndroidMessagePriority",
    "AndroidNotification",
    "ApnsConfig",
    "ApnsFcmOptions",
    "ApnsPayload",
    "Aps",
    "ApsAlert",
    "BatchResponse",
    "Color",
    "ErrorInfo",
    "FcmOptions",
    "LightSettings",
    "Message",
    "Messaging",
    "MulticastMessage",
    "Notification",
    "NotificationPriority",
    "SendResponse",
    "TopicManagementResponse",
    "Visibility",
    "WebpushConfig",
    "WebpushFcmOptions",
    "build_multipart_body",
    "parse_multipart_response",
]

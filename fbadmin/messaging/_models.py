from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import ConfigDict, Field

from fbadmin.core import DataModel


class Notification(DataModel):
    """Notification shown on every platform.

    Attributes:
        title: Title.
        body: Body text.
        image: URL of an image to show.
    """

    title: str | None = None
    body: str | None = None
    image: str | None = None


class AndroidMessagePriority(str, Enum):
    NORMAL = "NORMAL"
    HIGH = "HIGH"


class NotificationPriority(str, Enum):
    PRIORITY_UNSPECIFIED = "PRIORITY_UNSPECIFIED"
    PRIORITY_MIN = "PRIORITY_MIN"
    PRIORITY_LOW = "PRIORITY_LOW"
    PRIORITY_DEFAULT = "PRIORITY_DEFAULT"
    PRIORITY_HIGH = "PRIORITY_HIGH"
    PRIORITY_MAX = "PRIORITY_MAX"


class Visibility(str, Enum):
    VISIBILITY_UNSPECIFIED = "VISIBILITY_UNSPECIFIED"
    PRIVATE = "PRIVATE"
    PUBLIC = "PUBLIC"
    SECRET = "SECRET"


class Color(DataModel):
    red: float | None = None
    green: float | None = None
    blue: float | None = None
    alpha: float | None = None


class LightSettings(DataModel):
    color: Color | None = None
    light_on_duration: str | None = None
    light_off_duration: str | None = None


class AndroidNotification(DataModel):
    """Android specific notification.

    Attributes:
        channel_id: Notification channel.
        event_time: RFC3339 time of the event.
        vibrate_timings: Durations, e.g. "0.5s".
    """

    title: str | None = None
    body: str | None = None
    icon: str | None = None
    color: str | None = None
    sound: str | None = None
    tag: str | None = None
    click_action: str | None = None
    body_loc_key: str | None = None
    body_loc_args: list[str] | None = None
    title_loc_key: str | None = None
    title_loc_args: list[str] | None = None
    channel_id: str | None = None
    ticker: str | None = None
    sticky: bool | None = None
    event_time: str | None = None
    local_only: bool | None = None
    notification_priority: NotificationPriority | None = None
    default_sound: bool | None = None
    default_vibrate_timings: bool | None = None
    default_light_settings: bool | None = None
    vibrate_timings: list[str] | None = None
    visibility: Visibility | None = None
    notification_count: int | None = None
    light_settings: LightSettings | None = None
    image: str | None = None


class AndroidFcmOptions(DataModel):
    analytics_label: str | None = None


class AndroidConfig(DataModel):
    """Android delivery options.

    Attributes:
        ttl: Time to live as a duration, e.g. "3600s".
    """

    collapse_key: str | None = None
    priority: AndroidMessagePriority | None = None
    ttl: str | None = None
    restricted_package_name: str | None = None
    data: dict[str, str] | None = None
    notification: AndroidNotification | None = None
    fcm_options: AndroidFcmOptions | None = None
    direct_boot_ok: bool | None = None


class WebpushFcmOptions(DataModel):
    link: str | None = None
    analytics_label: str | None = None


class WebpushConfig(DataModel):
    """Web push delivery options.

    Attributes:
        notification: Web notification properties, sent as is.
    """

    headers: dict[str, str] | None = None
    data: dict[str, str] | None = None
    notification: dict[str, Any] | None = None
    fcm_options: WebpushFcmOptions | None = None


class ApsAlert(DataModel):
    title: str | None = None
    subtitle: str | None = None
    body: str | None = None
    loc_key: str | None = Field(default=None, alias="loc-key")
    loc_args: list[str] | None = Field(default=None, alias="loc-args")
    title_loc_key: str | None = Field(default=None, alias="title-loc-key")
    title_loc_args: list[str] | None = Field(
        default=None, alias="title-loc-args"
    )
    subtitle_loc_key: str | None = Field(
        default=None, alias="subtitle-loc-key"
    )
    subtitle_loc_args: list[str] | None = Field(
        default=None, alias="subtitle-loc-args"
    )
    action_loc_key: str | None = Field(default=None, alias="action-loc-key")
    launch_image: str | None = Field(default=None, alias="launch-image")


class Aps(DataModel):
    """APNs aps dictionary.

    Attributes:
        alert: Alert text or alert dictionary.
        content_available: 1 for a background update.
        mutable_content: 1 to let an extension modify the content.
    """

    alert: str | ApsAlert | None = None
    badge: int | None = None
    sound: str | None = None
    content_available: int | None = Field(
        default=None, alias="content-available"
    )
    mutable_content: int | None = Field(
        default=None, alias="mutable-content"
    )
    category: str | None = None
    thread_id: str | None = Field(default=None, alias="thread-id")


class ApnsPayload(DataModel):
    """APNs payload. Custom keys are sent next to aps."""

    model_config = ConfigDict(extra="allow")

    aps: Aps | None = None


class ApnsFcmOptions(DataModel):
    analytics_label: str | None = None
    image: str | None = None


class ApnsConfig(DataModel):
    headers: dict[str, str] | None = None
    payload: ApnsPayload | None = None
    fcm_options: ApnsFcmOptions | None = None


class FcmOptions(DataModel):
    analytics_label: str | None = None


class Message(DataModel):
    """Message for a single target.

    Exactly one of token, topic or condition must be set.

    Attributes:
        name: Message name set by the server.
        data: Custom key value pairs.
        notification: Notification for every platform.
        android: Android options.
        webpush: Web push options.
        apns: APNs options.
        fcm_options: Options for every platform.
        token: Registration token of a device.
        topic: Topic name, without the /topics/ prefix.
        condition: Topic condition, e.g. "'a' in topics".
    """

    name: str | None = None
    data: dict[str, str] | None = None
    notification: Notification | None = None
    android: AndroidConfig | None = None
    webpush: WebpushConfig | None = None
    apns: ApnsConfig | None = None
    fcm_options: FcmOptions | None = None
    token: str | None = None
    topic: str | None = None
    condition: str | None = None


class MulticastMessage(DataModel):
    """Message sent to many devices.

    Attributes:
        tokens: Registration tokens, at most 500.
    """

    tokens: list[str]
    data: dict[str, str] | None = None
    notification: Notification | None = None
    android: AndroidConfig | None = None
    webpush: WebpushConfig | None = None
    apns: ApnsConfig | None = None
    fcm_options: FcmOptions | None = None


class SendResponse(DataModel):
    """Outcome of one message of a batch.

    Attributes:
        success: Message was accepted.
        message_id: Message name, when accepted.
        error: Error message, when rejected.
        status_code: HTTP status of the part.
    """

    success: bool
    message_id: str | None = None
    error: str | None = None
    status_code: int | None = None


class BatchResponse(DataModel):
    """Outcome of a batch, responses in message order."""

    success_count: int = 0
    failure_count: int = 0
    responses: list[SendResponse] = Field(default_factory=list)


class ErrorInfo(DataModel):
    """Failure of one token in a topic request.

    Attributes:
        index: Index of the token in the request.
        reason: Error reason, e.g. INVALID_ARGUMENT.
    """

    index: int
    reason: str


class TopicManagementResponse(DataModel):
    success_count: int = 0
    failure_count: int = 0
    errors: list[ErrorInfo] = Field(default_factory=list)

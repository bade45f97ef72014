from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_SOUND = "default"


class PayloadError(Exception):
    pass


def compute_badge(message_badge: int | None, device_badge: int | None = None) -> int:
    """
    Badge shown on the app icon.

    Only a message-level badge turns badges on; the device value is an offset on top of it.
    """

    if message_badge is None:
        return 0
    try:
        badge = int(message_badge) + int(device_badge or 0)
    except (TypeError, ValueError) as e:
        raise PayloadError(f"Invalid badge: {message_badge!r} + {device_badge!r}") from e
    return max(badge, 0)


@dataclass(slots=True)
class NotificationPayload:
    alert: str
    badge: int = 0
    sound: str = DEFAULT_SOUND
    custom: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if "aps" in self.custom:
            raise PayloadError("Custom fields must not override the 'aps' dictionary")
        if self.badge < 0:
            raise PayloadError("badge must be >= 0")

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "aps": {
                "alert": self.alert,
                "sound": self.sound,
                "badge": self.badge,
            }
        }
        body.update(self.custom)
        return body

    def to_json(self) -> bytes:
        try:
            raw = json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise PayloadError("Payload is not JSON serializable") from e
        return raw.encode("utf-8")


def build_payload(
    text: str,
    *,
    message_badge: int | None = None,
    device_badge: int | None = None,
    custom: Mapping[str, Any] | None = None,
) -> NotificationPayload:
    if custom is not None and not isinstance(custom, Mapping):
        raise PayloadError(f"Custom fields must be a mapping, got {type(custom).__name__}")
    return NotificationPayload(
        alert=text,
        badge=compute_badge(message_badge, device_badge),
        custom=dict(custom or {}),
    )

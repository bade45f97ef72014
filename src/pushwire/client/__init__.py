from __future__ import annotations

from .config import PushConfig
from .models import Device, Message
from .pusher import ApnsRawPusher, FeedbackNotSupportedError, GatewayError, PushError

__all__ = [
    "ApnsRawPusher",
    "Device",
    "FeedbackNotSupportedError",
    "GatewayError",
    "Message",
    "PushConfig",
    "PushError",
]

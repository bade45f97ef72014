from .frame import EncodingError, NotificationFrame, encode, encode_notification, parse_frame
from .identifiers import IdentifierGenerator
from .payload import NotificationPayload, PayloadError, build_payload, compute_badge
from .response import (
    ErrorResponse,
    ErrorResponseReader,
    ResponseError,
    decode_error_response,
)
from .token import TokenError, decode_token, supports

__all__ = [
    "EncodingError",
    "ErrorResponse",
    "ErrorResponseReader",
    "IdentifierGenerator",
    "NotificationFrame",
    "NotificationPayload",
    "PayloadError",
    "ResponseError",
    "TokenError",
    "build_payload",
    "compute_badge",
    "decode_error_response",
    "decode_token",
    "encode",
    "encode_notification",
    "parse_frame",
    "supports",
]

"""
Shared protocol package that centralizes command keys, the KLV codec, the frame
model and stream helpers for both client and server.
"""

from .commands import Command, is_broadcast, normalize_command
from .constants import DEFAULT_HISTORY_SIZE, ENCODING, HEADER_SIZE, KEY_SIZE, NO_HISTORY_TEXT
from .errors import (
    FramingError,
    InvalidKey,
    ProtocolError,
    StatusCode,
    TruncatedHeader,
    TruncatedValue,
    ValueTooLarge,
)
from .framing import decode_frame, decode_nested, encode_frame, encode_nested, hex_dump, iter_frames
from .messages import Frame
from .stream import read_exact, read_frame

__all__ = [
    "Command",
    "is_broadcast",
    "normalize_command",
    "DEFAULT_HISTORY_SIZE",
    "ENCODING",
    "HEADER_SIZE",
    "KEY_SIZE",
    "NO_HISTORY_TEXT",
    "FramingError",
    "InvalidKey",
    "ProtocolError",
    "StatusCode",
    "TruncatedHeader",
    "TruncatedValue",
    "ValueTooLarge",
    "encode_frame",
    "decode_frame",
    "encode_nested",
    "decode_nested",
    "iter_frames",
    "hex_dump",
    "Frame",
    "read_exact",
    "read_frame",
]

"""Protocol-wide constants shared by client and server."""

ENCODING = "utf-8"
KEY_ENCODING = "ascii"
KEY_SIZE = 4
LENGTH_SIZE = 4
HEADER_SIZE = KEY_SIZE + LENGTH_SIZE
KEY_PADDING = b"\x00"
MAX_VALUE_SIZE = 2**32 - 1  # range of the 4-byte length field

DEFAULT_HISTORY_SIZE = 20
NO_HISTORY_TEXT = "No message history available."
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

__all__ = [
    "ENCODING",
    "KEY_ENCODING",
    "KEY_SIZE",
    "LENGTH_SIZE",
    "HEADER_SIZE",
    "KEY_PADDING",
    "MAX_VALUE_SIZE",
    "DEFAULT_HISTORY_SIZE",
    "NO_HISTORY_TEXT",
    "TIME_FORMAT",
]

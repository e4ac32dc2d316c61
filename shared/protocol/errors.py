from __future__ import annotations

from enum import IntEnum


class StatusCode(IntEnum):
    """HTTP-like status codes carried as ASCII text in RESP frames."""

    SUCCESS = 200
    BAD_REQUEST = 400

    def to_value(self) -> bytes:
        return str(int(self)).encode("ascii")


class ProtocolError(Exception):
    """Structured protocol exception carrying status + message."""

    def __init__(self, status: StatusCode, message: str = "") -> None:
        self.status = status
        self.message = message
        super().__init__(f"{status.name} ({int(status)}): {message}")


class FramingError(ProtocolError):
    """Raised when bytes cannot be turned into (or from) a KLV frame."""

    def __init__(self, message: str = "") -> None:
        super().__init__(StatusCode.BAD_REQUEST, message)


class InvalidKey(FramingError):
    pass


class ValueTooLarge(FramingError):
    pass


class TruncatedHeader(FramingError):
    pass


class TruncatedValue(FramingError):
    pass


__all__ = [
    "StatusCode",
    "ProtocolError",
    "FramingError",
    "InvalidKey",
    "ValueTooLarge",
    "TruncatedHeader",
    "TruncatedValue",
]

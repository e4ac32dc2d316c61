from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .commands import Command, normalize_command
from .constants import ENCODING, KEY_PADDING, KEY_SIZE
from .errors import FramingError, InvalidKey
from .framing import decode_frame, encode_frame


class Frame(BaseModel):
    """One decoded KLV unit."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="0-4 characters, zero padded ASCII on the wire")
    value: bytes = Field(default=b"", description="Raw payload, UTF-8 text in the chat protocol")

    @field_validator("key", mode="before")
    @classmethod
    def _check_key(cls, key: Union[str, Command]) -> str:
        # ASCII is enforced by encode(); keys read off the wire may carry U+FFFD
        key = normalize_command(key)
        if len(key) > KEY_SIZE:
            raise InvalidKey(f"Key {key!r} is too long (max {KEY_SIZE} characters)")
        if KEY_PADDING.decode() in key:
            raise InvalidKey(f"Key {key!r} contains a NUL byte")
        return key

    @classmethod
    def of(cls, key: Union[str, Command], text: str = "") -> "Frame":
        """Build a frame whose value is UTF-8 encoded text."""
        return cls(key=key, value=text.encode(ENCODING))

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> "Frame":
        key, value, _ = decode_frame(data, offset)
        return cls(key=key, value=value)

    @property
    def length(self) -> int:
        return len(self.value)

    @property
    def text(self) -> str:
        return self.value.decode(ENCODING, errors="replace")

    def is_key(self, command: Union[str, Command]) -> bool:
        return self.key == normalize_command(command)

    def status(self) -> Optional[int]:
        """Numeric status of a RESP frame, None for anything else."""
        if not self.is_key(Command.RESP):
            return None
        try:
            return int(self.text.strip())
        except ValueError as exc:
            raise FramingError(f"RESP value {self.text!r} is not a decimal status") from exc

    def encode(self) -> bytes:
        return encode_frame(self.key, self.value)

    def __str__(self) -> str:
        return f"{self.key}:{self.length}:{self.text}"


__all__ = ["Frame"]

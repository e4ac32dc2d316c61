from __future__ import annotations

import struct
from typing import Iterable, Iterator, List, Tuple, Union

from .constants import HEADER_SIZE, KEY_ENCODING, KEY_PADDING, KEY_SIZE, MAX_VALUE_SIZE
from .errors import FramingError, InvalidKey, TruncatedHeader, TruncatedValue, ValueTooLarge

# [key:4][length:4, unsigned big-endian]
HEADER_STRUCT = struct.Struct(f"!{KEY_SIZE}sI")

BytesLike = Union[bytes, bytearray, memoryview]


def pack_key(key: str) -> bytes:
    """Left-justify an ASCII key into the zero padded 4-byte key field."""
    if not isinstance(key, str):
        raise InvalidKey(f"Key must be str, got {type(key).__name__}")
    try:
        raw = key.encode(KEY_ENCODING)
    except UnicodeEncodeError as exc:
        raise InvalidKey(f"Key {key!r} is not ASCII") from exc
    if len(raw) > KEY_SIZE:
        raise InvalidKey(f"Key {key!r} is too long (max {KEY_SIZE} bytes)")
    if KEY_PADDING in raw:
        raise InvalidKey(f"Key {key!r} contains a NUL byte")
    return raw.ljust(KEY_SIZE, KEY_PADDING)


def unpack_key(field: bytes, strict: bool = True) -> str:
    """
    Recover the key text: everything before the first zero byte.

    With `strict` off, non-ASCII bytes become U+FFFD so a peer sending them
    still gets an unknown-command reply.
    """
    raw = bytes(field).split(KEY_PADDING, 1)[0]
    if not strict:
        return raw.decode(KEY_ENCODING, errors="replace")
    try:
        return raw.decode(KEY_ENCODING)
    except UnicodeDecodeError as exc:
        raise InvalidKey(f"Key field {bytes(field)!r} is not ASCII") from exc


def encode_header(key: str, length: int) -> bytes:
    if length > MAX_VALUE_SIZE:
        raise ValueTooLarge(f"Value of {length} bytes exceeds {MAX_VALUE_SIZE}")
    return HEADER_STRUCT.pack(pack_key(key), length)


def decode_header(header: bytes, strict: bool = True) -> Tuple[str, int]:
    if len(header) < HEADER_SIZE:
        raise TruncatedHeader(f"Need {HEADER_SIZE} header bytes, got {len(header)}")
    field, length = HEADER_STRUCT.unpack_from(header)
    return unpack_key(field, strict), length


def encode_frame(key: str, value: BytesLike) -> bytes:
    """Encode one KLV frame: key field + big-endian length + value verbatim."""
    if isinstance(value, str):
        raise TypeError("Frame value must be bytes; encode text before framing")
    value = bytes(value)
    return encode_header(key, len(value)) + value


def decode_frame(data: BytesLike, offset: int = 0) -> Tuple[str, bytes, int]:
    """
    Decode the frame starting at `offset`.

    Returns (key, value, consumed) where consumed = 8 + length, so concatenated
    frames can be walked by advancing the offset.
    """
    if offset < 0:
        raise ValueError("offset must be non-negative")
    view = memoryview(data)
    available = len(view) - offset
    if available < HEADER_SIZE:
        raise TruncatedHeader(f"Need {HEADER_SIZE} header bytes, got {max(available, 0)}")
    key, length = decode_header(view[offset : offset + HEADER_SIZE])
    if available - HEADER_SIZE < length:
        raise TruncatedValue(
            f"Expected {HEADER_SIZE + length} bytes, got {available}"
        )
    start = offset + HEADER_SIZE
    return key, bytes(view[start : start + length]), HEADER_SIZE + length


def iter_frames(data: BytesLike) -> Iterator[Tuple[str, bytes]]:
    """Yield every frame of a buffer holding concatenated frames."""
    offset = 0
    while offset < len(data):
        key, value, consumed = decode_frame(data, offset)
        offset += consumed
        yield key, value


def encode_nested(key: str, items: Iterable[Tuple[str, BytesLike]]) -> bytes:
    """Encode items back to back and wrap them as the value of an outer frame."""
    inner = b"".join(encode_frame(item_key, item_value) for item_key, item_value in items)
    return encode_frame(key, inner)


def decode_nested(data: BytesLike, strict: bool = False) -> Tuple[str, List[Tuple[str, bytes]]]:
    """
    Decode an outer frame and the frames nested in its value.

    By default parsing stops at the first malformed fragment and trailing bytes
    shorter than a header are dropped. With `strict` those raise instead.
    """
    outer_key, inner, _ = decode_frame(data)
    items: List[Tuple[str, bytes]] = []
    offset = 0
    while offset + HEADER_SIZE <= len(inner):
        try:
            key, value, consumed = decode_frame(inner, offset)
        except FramingError:
            if strict:
                raise
            break
        items.append((key, value))
        offset += consumed
    if strict and offset != len(inner):
        raise TruncatedHeader(f"{len(inner) - offset} trailing bytes after nested frames")
    return outer_key, items


def hex_dump(data: BytesLike) -> str:
    return " ".join(f"{byte:02x}" for byte in bytes(data))


__all__ = [
    "HEADER_STRUCT",
    "pack_key",
    "unpack_key",
    "encode_header",
    "decode_header",
    "encode_frame",
    "decode_frame",
    "iter_frames",
    "encode_nested",
    "decode_nested",
    "hex_dump",
]

"""Exact-length reads of KLV frames from an asyncio stream."""

from __future__ import annotations

import asyncio
from typing import Optional

from .constants import KEY_SIZE, LENGTH_SIZE
from .framing import decode_header
from .messages import Frame


async def read_exact(reader: asyncio.StreamReader, n: int) -> Optional[bytes]:
    """
    Read exactly `n` bytes, looping across partial reads.

    Returns None when the peer closes the stream before `n` bytes arrive;
    a short buffer is never returned.
    """
    if n < 0:
        raise ValueError("n must be non-negative")
    buf = bytearray()
    while len(buf) < n:
        chunk = await reader.read(n - len(buf))
        if not chunk:
            return None
        buf.extend(chunk)
    return bytes(buf)


async def read_frame(reader: asyncio.StreamReader) -> Optional[Frame]:
    """Read key, length and value fields in turn; None if the stream ends at any of them."""
    key_field = await read_exact(reader, KEY_SIZE)
    if key_field is None:
        return None
    length_field = await read_exact(reader, LENGTH_SIZE)
    if length_field is None:
        return None
    key, length = decode_header(key_field + length_field, strict=False)
    value = await read_exact(reader, length)
    if value is None:
        return None
    return Frame(key=key, value=value)


__all__ = ["read_exact", "read_frame"]

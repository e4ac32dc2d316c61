from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Dict, List, Optional, Union

from client.config import CLIENT_CONFIG
from shared.protocol.commands import Command, normalize_command
from shared.protocol.constants import ENCODING
from shared.protocol.errors import FramingError, ProtocolError, StatusCode
from shared.protocol.framing import encode_frame
from shared.protocol.messages import Frame
from shared.protocol.stream import read_frame

logger = logging.getLogger(__name__)

FrameHandler = Callable[[str, bytes], Awaitable[None]]


class NetworkError(ProtocolError):
    """Network level error surfaced to higher layers."""

    def __init__(self, message: str = "") -> None:
        super().__init__(StatusCode.BAD_REQUEST, message)


class NetworkClient:
    """TCP client speaking KLV frames; delivers every received frame to callbacks."""

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        self.config = config or CLIENT_CONFIG
        self.host: str = self.config["server_host"]
        self.port: int = int(self.config["server_port"])
        self.backoff: float = float(self.config["reconnect_backoff"])
        self.max_backoff: float = float(self.config["max_reconnect_backoff"])
        self.max_retries: int = int(self.config["max_reconnect_retries"])

        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.connected: bool = False
        self._receive_task: Optional[asyncio.Task] = None
        self._handlers: Dict[str, List[FrameHandler]] = {}
        self._catch_all: List[FrameHandler] = []
        self._closed = asyncio.Event()

    async def connect(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        if self.connected:
            return
        self.host = host or self.host
        self.port = port or self.port

        retries = 0
        delay = self.backoff
        while retries <= self.max_retries:
            try:
                self.reader, self.writer = await asyncio.open_connection(self.host, self.port)
                self.connected = True
                self._closed.clear()
                logger.info("Connected to %s:%s", self.host, self.port)
                self._receive_task = asyncio.create_task(self._receive_loop(), name="client-recv-loop")
                return
            except OSError as exc:
                retries += 1
                logger.warning("Connect attempt %s failed: %s", retries, exc)
                if retries > self.max_retries:
                    break
                await asyncio.sleep(delay)
                delay = min(delay * 2, self.max_backoff)
        raise NetworkError(f"Could not connect to {self.host}:{self.port} after {retries} attempts")

    async def close(self) -> None:
        self.connected = False
        if self._receive_task:
            self._receive_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._receive_task
            self._receive_task = None
        if self.writer:
            self.writer.close()
            with contextlib.suppress(ConnectionError, OSError):
                await self.writer.wait_closed()
            self.writer = None
        self._closed.set()
        logger.info("Network client closed")

    async def send(self, key: Union[str, Command], value: str = "") -> None:
        """Encode one frame with a UTF-8 text value and write it."""
        if not self.connected or self.writer is None:
            raise NetworkError("Not connected")
        key_text = normalize_command(key)
        data = value.encode(ENCODING)
        payload = encode_frame(key_text, data)
        try:
            self.writer.write(payload)
            await self.writer.drain()
            logger.debug("Sent %s:%s:%s", key_text, len(data), value)
        except (ConnectionResetError, BrokenPipeError, ConnectionAbortedError) as exc:
            logger.warning("Connection lost during send: %s", exc)
            self.connected = False
            raise NetworkError(f"Connection lost: {exc}") from exc

    def on_frame(self, handler: FrameHandler) -> None:
        """Register a callback invoked once for every received frame."""
        self._catch_all.append(handler)

    def register_handler(self, key: Union[str, Command], handler: FrameHandler) -> None:
        self._handlers.setdefault(normalize_command(key), []).append(handler)

    async def wait_closed(self) -> None:
        await self._closed.wait()

    async def _receive_loop(self) -> None:
        assert self.reader is not None
        try:
            while True:
                frame = await read_frame(self.reader)
                if frame is None:
                    logger.info("Server closed connection")
                    break
                await self._dispatch(frame)
        except asyncio.CancelledError:
            raise
        except FramingError as exc:
            logger.error("Malformed frame from server: %s", exc)
        except (ConnectionError, OSError) as exc:
            logger.error("Receive loop terminated: %s", exc)
        finally:
            self.connected = False
            self._closed.set()

    async def _dispatch(self, frame: Frame) -> None:
        logger.debug("Received %s", frame)
        handlers = self._handlers.get(frame.key, []) + self._catch_all
        if not handlers:
            logger.debug("No handler registered for %s", frame.key)
        for handler in handlers:
            try:
                await handler(frame.key, frame.value)
            except Exception as exc:
                logger.exception("Handler error for %s: %s", frame.key, exc)

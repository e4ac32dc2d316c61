from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Optional

from shared.protocol import framing
from shared.protocol.commands import Command
from shared.protocol.errors import FramingError
from shared.protocol.messages import Frame
from shared.protocol.stream import read_frame

from .connection import ConnectionContext
from .registry import BroadcastRegistry
from .router import CommandResult, CommandRouter

logger = logging.getLogger(__name__)


class SocketServer:
    def __init__(
        self,
        host: str,
        port: int,
        router: CommandRouter,
        registry: BroadcastRegistry,
    ) -> None:
        self.host = host
        self.port = port
        self.router = router
        self.registry = registry
        self._server: Optional[asyncio.AbstractServer] = None
        self._stopped = asyncio.Event()
        self._ids = itertools.count(1)

    async def start(self) -> None:
        self._stopped.clear()
        self._server = await asyncio.start_server(self._handle_client, self.host, self.port)
        # Resolve port 0 to the one actually bound
        self.port = self._server.sockets[0].getsockname()[1]
        logger.info("Server listening on %s:%s", self.host, self.port)

    @property
    def is_serving(self) -> bool:
        return self._server is not None and self._server.is_serving()

    async def serve_forever(self) -> None:
        """Block until stop() is called."""
        await self._stopped.wait()

    def stop(self) -> None:
        """Close the listening socket; live connections finish on their own."""
        if self._server is not None:
            self._server.close()
            self._server = None
            logger.info("Server stopped")
        self._stopped.set()

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        ctx = ConnectionContext(
            conn_id=next(self._ids),
            reader=reader,
            writer=writer,
            peername=str(writer.get_extra_info("peername")),
        )
        await self.registry.register(writer)
        logger.info("Client %s connected from %s", ctx.conn_id, ctx.peername)
        try:
            while True:
                try:
                    frame = await read_frame(reader)
                except FramingError as exc:
                    logger.warning("Framing error for %s: %s", ctx, exc)
                    break
                if frame is None:
                    break
                logger.debug("%s received %s", ctx, frame)
                result = await self.router.dispatch(frame, ctx)
                await self._respond(ctx, result)
                if result.close:
                    break
        except (ConnectionResetError, ConnectionAbortedError, BrokenPipeError, OSError) as exc:
            logger.info("Client %s connection reset: %s", ctx.conn_id, exc)
        except Exception as exc:
            logger.exception("Unhandled error for %s: %s", ctx, exc)
        finally:
            await self.registry.deregister(writer)
            try:
                writer.close()
                await writer.wait_closed()
            except (ConnectionError, OSError) as e:
                logger.debug("Error during writer cleanup: %s", e)
            logger.info("Client %s disconnected", ctx.conn_id)

    async def _respond(self, ctx: ConnectionContext, result: CommandResult) -> None:
        status = Frame(key=Command.RESP, value=result.status.to_value())
        await self.registry.send_to(ctx.writer, status.encode())
        payload = result.frame.encode()
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s sending %s [%s]", ctx, result.frame, framing.hex_dump(payload))
        if result.ok and result.broadcast:
            await self.registry.broadcast(payload)
        else:
            await self.registry.send_to(ctx.writer, payload)

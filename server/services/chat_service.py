from __future__ import annotations

import logging

from server.core.connection import ConnectionContext
from server.core.history import HistoryBuffer
from server.core.router import CommandResult, CommandRouter
from shared.protocol.commands import Command, is_broadcast
from shared.protocol.constants import NO_HISTORY_TEXT
from shared.protocol.errors import StatusCode
from shared.protocol.messages import Frame
from shared.utils.common import local_timestamp

logger = logging.getLogger(__name__)

EMPTY_MESSAGE_TEXT = "Message text must not be empty"


class ChatService:
    """Handlers for the chat-room commands."""

    def __init__(self, history: HistoryBuffer) -> None:
        self.history = history

    def register(self, router: CommandRouter) -> CommandRouter:
        router.register(Command.JOIN, self.handle_join)
        router.register(Command.NAME, self.handle_name)
        router.register(Command.MSG, self.handle_msg)
        router.register(Command.TIME, self.handle_time)
        router.register(Command.READ, self.handle_read)
        router.register(Command.QUIT, self.handle_quit)
        return router

    async def handle_join(self, frame: Frame, ctx: ConnectionContext) -> CommandResult:
        if frame.value:
            ctx.rename(frame.text)
        return _ok(Command.JOIN, f"{ctx.display_name} joined")

    async def handle_name(self, frame: Frame, ctx: ConnectionContext) -> CommandResult:
        old = ctx.rename(frame.text)
        logger.info("%s renamed from %s", ctx, old)
        return _ok(Command.NAME, f"{old} has changed their name to {ctx.display_name}")

    async def handle_msg(self, frame: Frame, ctx: ConnectionContext) -> CommandResult:
        text = frame.text
        if not text.strip():
            return CommandResult(
                StatusCode.BAD_REQUEST,
                Frame.of(Command.ERR, EMPTY_MESSAGE_TEXT),
                broadcast=False,
            )
        line = f"{ctx.display_name}:\t{text}"
        await self.history.append(line)
        return _ok(Command.MSG, line)

    async def handle_time(self, frame: Frame, ctx: ConnectionContext) -> CommandResult:
        return _ok(Command.TIME, local_timestamp())

    async def handle_read(self, frame: Frame, ctx: ConnectionContext) -> CommandResult:
        lines = await self.history.snapshot()
        text = "\n".join(lines) if lines else NO_HISTORY_TEXT
        return _ok(Command.READ, text)

    async def handle_quit(self, frame: Frame, ctx: ConnectionContext) -> CommandResult:
        return _ok(Command.QUIT, f"{ctx.display_name} has left :(", close=True)


def _ok(command: Command, text: str, close: bool = False) -> CommandResult:
    return CommandResult(StatusCode.SUCCESS, Frame.of(command, text), broadcast=is_broadcast(command), close=close)

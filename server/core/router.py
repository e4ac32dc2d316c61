from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Dict, Optional, TYPE_CHECKING, Union

from shared.protocol.commands import Command, normalize_command
from shared.protocol.errors import StatusCode
from shared.protocol.messages import Frame

if TYPE_CHECKING:
    from .connection import ConnectionContext


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one request: the RESP status and the frame that follows it."""

    status: StatusCode
    frame: Frame
    broadcast: bool = True
    close: bool = False

    @property
    def ok(self) -> bool:
        return self.status == StatusCode.SUCCESS


Handler = Callable[[Frame, "ConnectionContext"], Awaitable[CommandResult]]


async def unknown_command(frame: Frame, ctx: "ConnectionContext") -> CommandResult:
    return CommandResult(
        StatusCode.BAD_REQUEST,
        Frame.of(Command.ERR, f"Unknown command: {frame.key}"),
        broadcast=False,
    )


class CommandRouter:
    """Maps frame keys to async command handlers."""

    def __init__(self, fallback: Optional[Handler] = None) -> None:
        self._handlers: Dict[str, Handler] = {}
        self._fallback: Handler = fallback or unknown_command

    def register(self, command: Union[str, Command], handler: Handler) -> None:
        self._handlers[normalize_command(command)] = handler

    async def dispatch(self, frame: Frame, ctx: "ConnectionContext") -> CommandResult:
        handler = self._handlers.get(frame.key, self._fallback)
        return await handler(frame, ctx)

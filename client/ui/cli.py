from __future__ import annotations

import asyncio
import logging
from typing import List

from client.core.network import NetworkClient, NetworkError
from shared.protocol.commands import Command
from shared.protocol.constants import ENCODING
from shared.protocol.errors import StatusCode

logger = logging.getLogger(__name__)

QUIT_TIMEOUT = 5.0

STATUS_TEXT = {
    int(StatusCode.SUCCESS): "Success",
    int(StatusCode.BAD_REQUEST): "Bad Request",
}


def render_frame(key: str, value: bytes) -> List[str]:
    """Turn one received frame into the lines shown on the console."""
    text = value.decode(ENCODING, errors="replace")
    if key == Command.RESP:
        code = text.strip()
        label = STATUS_TEXT.get(int(code), "Status") if code.isdigit() else "Status"
        return [f"[{label}] ({code})"]
    if key == Command.READ:
        return [line for line in text.split("\n") if line.strip()]
    if key == Command.ERR:
        return [f"! {text}"]
    return [text]


class ChatCLI:
    """Line-oriented console over a NetworkClient."""

    def __init__(self, network: NetworkClient, display_name: str = "") -> None:
        self.network = network
        self.display_name = display_name
        self.network.on_frame(self._print_frame)

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        await self.network.send(Command.JOIN, self.display_name)
        self._show_help()
        while self.network.connected:
            try:
                line = await loop.run_in_executor(None, input, "> ")
            except EOFError:
                # stdin closed (Ctrl-D)
                line = "quit"
            if not self.network.connected:
                print("Disconnected from server.")
                break
            parts = line.strip().split(maxsplit=1)
            if not parts:
                continue
            command, arg = parts[0].lower(), parts[1] if len(parts) > 1 else ""
            try:
                match command:
                    case "help":
                        self._show_help()
                    case "name":
                        if not arg:
                            print("Usage: name <new name>")
                            continue
                        await self.network.send(Command.NAME, arg)
                        self.display_name = arg
                    case "msg":
                        if not arg:
                            print("Usage: msg <text>")
                            continue
                        await self.network.send(Command.MSG, arg)
                    case "read":
                        await self.network.send(Command.READ)
                    case "time":
                        await self.network.send(Command.TIME)
                    case "quit":
                        await self._quit()
                        break
                    case _:
                        print("Unknown command. Type 'help' for commands.")
            except NetworkError as exc:
                logger.warning("Send failed: %s", exc)
                print(f"Send failed: {exc.message}")
                break

    async def _quit(self) -> None:
        await self.network.send(Command.QUIT)
        try:
            await asyncio.wait_for(self.network.wait_closed(), timeout=QUIT_TIMEOUT)
        except asyncio.TimeoutError:
            logger.warning("Server did not close the connection after QUIT")
        await self.network.close()

    def _show_help(self) -> None:
        print(
            "Commands: name <new name>, msg <text>, read (last messages), "
            "time (server time), quit, help"
        )

    async def _print_frame(self, key: str, value: bytes) -> None:
        for line in render_frame(key, value):
            print(f"\n{line}")
        print("> ", end="", flush=True)

from __future__ import annotations

from enum import StrEnum
from typing import FrozenSet, Union


class Command(StrEnum):
    """
    Frame keys understood by client/server.
    Requests and their result frames share a key; RESP and ERR are server-only.
    """

    JOIN = "JOIN"
    NAME = "NAME"
    MSG = "MSG"
    TIME = "TIME"
    READ = "READ"
    QUIT = "QUIT"

    RESP = "RESP"
    ERR = "ERR"


# Result frames of these requests go back to the requester only.
PRIVATE_COMMANDS: FrozenSet[str] = frozenset({Command.READ.value, Command.ERR.value})


def normalize_command(command: Union[str, Command]) -> str:
    """Convert enum/string into canonical key text."""
    return command.value if isinstance(command, Command) else str(command)


def is_broadcast(command: Union[str, Command]) -> bool:
    return normalize_command(command) not in PRIVATE_COMMANDS


__all__ = [
    "Command",
    "PRIVATE_COMMANDS",
    "normalize_command",
    "is_broadcast",
]

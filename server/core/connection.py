from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field

from shared.utils.common import default_display_name


@dataclass
class ConnectionContext:
    conn_id: int
    reader: asyncio.StreamReader
    writer: asyncio.StreamWriter
    peername: str
    display_name: str = ""
    connected_at: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = default_display_name(self.conn_id)

    def rename(self, name: str) -> str:
        """Set a new display name and return the previous one."""
        old, self.display_name = self.display_name, name
        return old

    def __str__(self) -> str:
        return f"[Client {self.conn_id}] {self.display_name}@{self.peername}"

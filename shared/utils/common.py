from __future__ import annotations

from datetime import datetime
from typing import Optional

from shared.protocol.constants import TIME_FORMAT


def default_display_name(conn_id: int) -> str:
    """Placeholder name a connection carries until it JOINs or renames."""
    return f"user{conn_id}"


def local_timestamp(now: Optional[datetime] = None) -> str:
    """Current local time as YYYY-MM-DD HH:MM:SS."""
    return (now or datetime.now()).strftime(TIME_FORMAT)


__all__ = ["default_display_name", "local_timestamp"]

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from typing import Optional, Sequence

from server.config import SERVER_CONFIG, ConfigError, load_server_config
from server.core import BroadcastRegistry, CommandRouter, HistoryBuffer, SocketServer
from server.services import ChatService
from shared.protocol.constants import DEFAULT_HISTORY_SIZE

logger = logging.getLogger(__name__)


def create_server(host: str, port: int, history_size: int = DEFAULT_HISTORY_SIZE) -> SocketServer:
    """Wire one registry and one history buffer into a ready-to-start server."""
    history = HistoryBuffer(history_size)
    router = ChatService(history).register(CommandRouter())
    return SocketServer(host, port, router, BroadcastRegistry())


async def run_server(host: str, port: int, history_size: int) -> None:
    server = create_server(host, port, history_size)
    await server.start()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not available on Windows event loops
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, server.stop)
    await server.serve_forever()


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="KLV chat server")
    parser.add_argument("port", nargs="?", type=int, help="listening port (overrides SERVER_PORT)")
    parser.add_argument("--host", help="listening address (overrides SERVER_HOST)")
    parser.add_argument("--history-size", type=int, help="number of messages kept for READ")
    parser.add_argument("--log-level", help="logging level (overrides SERVER_LOG_LEVEL)")
    parser.add_argument("--env-file", default=".env", help="dotenv file to load")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        load_server_config(args.env_file)
    except ConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    host = args.host or SERVER_CONFIG["host"]
    port = args.port if args.port is not None else SERVER_CONFIG["port"]
    history_size = args.history_size if args.history_size is not None else SERVER_CONFIG["history_size"]
    if history_size < 1:
        print(f"Invalid history size: {history_size} (must be at least 1)", file=sys.stderr)
        return 2
    logging.basicConfig(
        level=(args.log_level or SERVER_CONFIG["log_level"]).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        asyncio.run(run_server(host, port, history_size))
    except OSError as exc:
        logger.error("Could not start server on %s:%s: %s", host, port, exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Shutting down server...")
    return 0


if __name__ == "__main__":
    sys.exit(main())

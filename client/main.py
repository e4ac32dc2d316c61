from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from client.config import CLIENT_CONFIG, ConfigError, load_config
from client.core import NetworkClient, NetworkError
from client.ui import ChatCLI


async def run_client(host: str, port: int, display_name: str) -> None:
    network = NetworkClient()
    await network.connect(host, port)
    cli = ChatCLI(network, display_name)
    try:
        await cli.run()
    finally:
        await network.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="KLV chat console client")
    parser.add_argument("--host", help="server address (overrides CLIENT_SERVER_HOST)")
    parser.add_argument("--port", type=int, help="server port (overrides CLIENT_SERVER_PORT)")
    parser.add_argument("--name", help="display name sent with JOIN")
    parser.add_argument("--env-file", default=".env", help="dotenv file to load")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING)
    try:
        load_config(args.env_file)
    except ConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    try:
        asyncio.run(
            run_client(
                args.host or CLIENT_CONFIG["server_host"],
                args.port or CLIENT_CONFIG["server_port"],
                args.name if args.name is not None else CLIENT_CONFIG["display_name"],
            )
        )
    except NetworkError as exc:
        print(f"Connection failed: {exc.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())

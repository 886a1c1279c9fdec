"""Run the server: ``python -m rpcserver``."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace

import uvicorn

from rpcserver.config import Settings
from rpcserver.server import create_app


def main() -> None:
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="JSON-RPC 2.0 batch server")
    parser.add_argument("--host", type=str, default=settings.host, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.port, help="Bind port")
    parser.add_argument("--log_level", type=str, default=settings.log_level, help="Log level")
    parser.add_argument(
        "--stop_on_error",
        action="store_true",
        default=settings.stop_on_error,
        help="End a batch at the first request that cannot be resolved",
    )
    args = parser.parse_args()

    settings = replace(
        settings,
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        stop_on_error=args.stop_on_error,
    )

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()

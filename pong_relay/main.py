#!/usr/bin/env python3
"""Pong relay server.

Relays controller input from phones to a single renderer per room and
broadcasts renderer state back to the room's controllers.

Usage:
    # Start with settings from the environment / .env
    pong-relay

    # Override the port and default room
    pong-relay --port 8080 --default-room lobby
"""
from __future__ import annotations

import argparse
import logging
from typing import List, Optional

import uvicorn

from .app import create_app
from .config import Settings, load_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_args(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> Settings:
    """Return *settings* (or the environment's) with command-line overrides applied."""
    settings = settings or load_settings()
    parser = argparse.ArgumentParser(description="Pong controller/renderer relay")
    parser.add_argument("--host", type=str, default=settings.host, help="Address to bind to.")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to listen on.")
    parser.add_argument(
        "--default-room",
        type=str,
        default=settings.default_room,
        help="Room used when a client does not name one.",
    )
    parser.add_argument("--log-level", type=str, default=settings.log_level, help="Logging level.")
    args = parser.parse_args(argv)
    return settings.model_copy(
        update={
            "host": args.host,
            "port": args.port,
            "default_room": args.default_room.strip() or settings.default_room,
            "log_level": args.log_level.upper(),
        }
    )


def main(argv: Optional[List[str]] = None) -> None:
    settings = parse_args(argv)
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()

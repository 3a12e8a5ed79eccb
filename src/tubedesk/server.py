"""Server entry point.

Usage:
    tubedesk

Exit codes:
    0: Clean shutdown
    1: Invalid configuration or the listening socket could not be bound
"""

from __future__ import annotations

import logging
import socket
import sys

import uvicorn
from pydantic import ValidationError

from tubedesk.api.app import create_app
from tubedesk.config import Settings
from tubedesk.db.client import StorageClient
from tubedesk.db.session import init_db

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Route application and uvicorn logs through the root logger."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind the listening socket up front so bind failures surface here.

    Raises:
        OSError: If the address is unavailable, e.g. already in use.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


def run(settings: Settings) -> None:
    """Build the app and serve it until shutdown.

    Exits with status 1 if the socket cannot be bound.
    """
    storage = StorageClient.from_settings(settings)
    if settings.create_tables:
        init_db(storage.engine)

    app = create_app(settings, storage=storage)
    host, port = settings.bind_host, settings.port

    try:
        sock = bind_socket(host, port)
    except OSError as e:
        logger.error(f"Failed to bind {host}:{port}: {e}")
        storage.close()
        sys.exit(1)

    config = uvicorn.Config(app, log_config=None, log_level=settings.log_level.lower())
    server = uvicorn.Server(config)
    logger.info(f"Server listening on {host}:{port} ({settings.environment})")
    server.run(sockets=[sock])


def main() -> None:
    """Console entry point."""
    try:
        settings = Settings()
    except ValidationError as e:
        configure_logging("INFO")
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    configure_logging(settings.log_level)
    run(settings)


if __name__ == "__main__":
    main()

"""
Server lifecycle: open the database, serve the app with uvicorn, shut both down
"""

import asyncio
import logging
import socket
from typing import Optional

import uvicorn

from blog_api.app import app
from blog_api.config.settings import DATABASE_URL, HOST, LOG_LEVEL, PORT
from blog_api.database.connection import close_database, init_database

logger = logging.getLogger(__name__)

STARTUP_POLL_INTERVAL = 0.05

_server: Optional[uvicorn.Server] = None
_server_task: Optional[asyncio.Task] = None


def _bind_socket(host: str, port: int) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


async def run_server(database_url: str = DATABASE_URL, host: str = HOST, port: int = PORT) -> int:
    """
    Connect the database and start serving in the background

    Args:
        database_url: Document store URL (memory:// or postgresql://)
        host: Interface to bind
        port: Port to bind, 0 picks a free one

    Returns:
        The port the server is listening on
    """
    global _server, _server_task
    if _server is not None:
        raise RuntimeError("Server is already running")

    await init_database(database_url)
    try:
        sock = _bind_socket(host, port)
    except OSError:
        await close_database()
        raise

    bound_port = sock.getsockname()[1]
    config = uvicorn.Config(app, log_level=LOG_LEVEL.lower(), lifespan="on")
    server = uvicorn.Server(config)
    task = asyncio.create_task(server.serve(sockets=[sock]))

    while not server.started:
        if task.done():
            sock.close()
            await close_database()
            raise RuntimeError("Server stopped before accepting connections")
        await asyncio.sleep(STARTUP_POLL_INTERVAL)

    _server, _server_task = server, task
    logger.info(f"Blog Posts API listening on {host}:{bound_port}")
    return bound_port


async def close_server() -> None:
    """Stop uvicorn and close the database"""
    global _server, _server_task
    if _server is not None:
        _server.should_exit = True
        await _server_task
        _server, _server_task = None, None
        logger.info("Blog Posts API stopped")
    await close_database()

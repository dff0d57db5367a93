"""Entry point for running the intake API under uvicorn.

Intended for platforms where only a single Python file can be given as
the start command.  Host and port come from ``HOST`` and ``PORT`` (see
``quiz_intake_api.app.core.config``); everything else is read from the
environment or a ``.env`` file by the application itself.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from quiz_intake_api.app.core.config import settings
from quiz_intake_api.app.main import app


async def main() -> None:
    """Serve the API until SIGINT/SIGTERM; uvicorn runs the shutdown hooks."""
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    logging.getLogger(__name__).info("Listening on %s:%s", settings.host, settings.port)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass

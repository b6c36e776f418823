from __future__ import annotations

import logging
import signal
import sys
from typing import Optional, Sequence

from waitress import create_server

from .app import create_app
from .config import load_settings
from .errors import InsightError
from .observability import configure_logging

logger = logging.getLogger("insight")


def _raise_exit(signum, frame):
    logger.info("shutting down", extra={"signal": signum})
    # waitress' run loop closes the server on SystemExit
    raise SystemExit(0)


def serve(app, settings) -> None:
    server = create_server(app, host=settings.host, port=settings.port, threads=settings.threads)
    logger.info("listening", extra={"address": settings.http_addr})
    # returns once SIGINT or SIGTERM closed the server
    server.run()
    logger.info("shutdown complete")


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = load_settings(argv)
    configure_logging(settings.debug)
    logger.info("preparing", extra={"settings": repr(settings)})
    signal.signal(signal.SIGTERM, _raise_exit)

    logger.info("starting")
    try:
        app = create_app(settings)
    except InsightError as e:
        logger.error("bootstrap failed, not serving", extra={"error": str(e)})
        return 1

    store = app.extensions["insight.store"]
    try:
        serve(app, settings)
    except Exception:
        logger.exception("server error")
        return 1
    finally:
        store.close()
        logger.info("closing db", extra={"file": settings.db_path})
        logger.info("finished")
    return 0


if __name__ == "__main__":
    sys.exit(main())

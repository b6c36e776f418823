from pythonjsonlogger import jsonlogger
import logging
from flask import Response

from . import __version__

SERVICE_NAME = "insight"


def configure_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    # service/version are hidden while debugging to keep lines short
    static_fields = {} if debug else {"service": SERVICE_NAME, "version": __version__}
    handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(levelname)s %(name)s %(message)s',
        static_fields=static_fields,
    )
    handler.setFormatter(formatter)
    root = logging.getLogger()
    # Avoid adding duplicate handlers
    for h in list(root.handlers):
        if getattr(h, "_insight", False):
            root.removeHandler(h)
    handler._insight = True
    root.addHandler(handler)
    root.setLevel(level)
    return handler


def metrics_response(mirror):
    """Return a Flask Response with the mirror's Prometheus exposition."""
    return Response(mirror.export(), mimetype=mirror.CONTENT_TYPE)

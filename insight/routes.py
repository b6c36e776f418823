from __future__ import annotations

import logging

from flask import Blueprint, abort, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from .errors import CorruptionError, StoreError, ValidationError
from .observability import metrics_response

logger = logging.getLogger(__name__)

bp = Blueprint("insight", __name__)


def get_store():
    return current_app.extensions["insight.store"]


def decode_request() -> tuple[str, str]:
    """Return (type, app) from the JSON body; abort(400) when it is not an object."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, "request body must be a JSON object")
    ctype = data.get("type", "")
    app = data.get("app", "")
    if not isinstance(ctype, str) or not isinstance(app, str):
        abort(400, "type and app must be strings")
    return ctype, app


@bp.post("/add")
def add():
    logger.debug("started handling")
    ctype, app = decode_request()
    try:
        total = get_store().increment(app, ctype)
    except ValidationError as e:
        logger.warning("failed handling", extra={"error": str(e)})
        abort(400, str(e))
    except CorruptionError as e:
        logger.error("failed incrementing", extra={"app": app, "type": ctype, "error": str(e)})
        abort(500, str(e))
    except StoreError as e:
        logger.error("failed incrementing", extra={"app": app, "type": ctype, "error": str(e)})
        abort(500, str(e))
    logger.info("finished handling", extra={"app": app, "type": ctype, "total": total})
    return jsonify({"app": app, "type": ctype, "total": total})


@bp.get("/metrics")
def metrics():
    return metrics_response(current_app.extensions["insight.mirror"])


@bp.get("/health")
def health():
    return jsonify({"status": "ok"})


# JSON error handler: return consistent JSON with {error, details}
@bp.app_errorhandler(HTTPException)
def json_error_handler(err):
    payload = {"error": err.name, "details": err.description}
    return jsonify(payload), err.code


@bp.app_errorhandler(Exception)
def unhandled_error(err):
    # catch-and-report for anything a handler did not map itself
    logger.exception("unhandled error", extra={"path": request.path})
    payload = {"error": "Internal Server Error", "details": str(err)}
    return jsonify(payload), 500

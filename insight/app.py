from __future__ import annotations

import logging
from typing import Optional

from flask import Flask

from .config import Settings
from .counter_store import CounterStore
from .kv import KVStore
from .mirror import MetricsMirror
from .reconcile import Reconciler
from .routes import bp

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, store: Optional[CounterStore] = None) -> Flask:
    """Build the Flask app; the store is reconciled into its mirror before returning.

    When no store is passed one is opened at settings.db_path and owned by
    the app; a store passed in stays open even when reconciliation fails.
    Reconciliation errors (CorruptionError, StoreError) propagate so the
    caller never starts serving.
    """
    settings = settings or Settings()
    owned = store is None
    if owned:
        logger.info("opening db", extra={"file": settings.db_path})
        store = CounterStore(KVStore.open(settings.db_path), MetricsMirror())

    reconciler = Reconciler(store, store.mirror)
    try:
        reconciler.run()
    except Exception:
        if owned:
            store.close()
        raise

    app = Flask(__name__)
    app.extensions["insight.store"] = store
    app.extensions["insight.mirror"] = store.mirror
    app.extensions["insight.settings"] = settings
    app.register_blueprint(bp)
    return app

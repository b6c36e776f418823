"""Startup replay of durable totals into the metrics mirror."""
from __future__ import annotations

import logging
import time

from .counter_store import CounterStore
from .errors import CorruptionError
from .mirror import MetricsMirror

logger = logging.getLogger(__name__)


class Reconciler:
    """Adds every stored total to the mirror, once.

    Must run before the HTTP server accepts traffic; a second run would
    double every mirror value, so it is refused.
    """

    def __init__(self, store: CounterStore, mirror: MetricsMirror):
        self.store = store
        self.mirror = mirror

    @property
    def done(self) -> bool:
        return self.mirror.reconciled

    def run(self) -> int:
        with self.mirror.reconcile_lock:
            if self.mirror.reconciled:
                raise RuntimeError("reconciliation already ran for this mirror")
            logger.info("loading previous metrics", extra={"file": self.store.kv.path})
            started = time.monotonic()
            try:
                # decode everything before touching the mirror
                totals = list(self.store.read_all())
            except CorruptionError as e:
                logger.error(
                    "conversion error",
                    extra={"app": e.app, "type": e.type, "error": str(e)},
                )
                raise
            for entry in totals:
                self.mirror.add(entry.app, entry.type, entry.total)
            self.mirror.reconciled = True
            logger.info(
                "loaded previous metrics",
                extra={"counters": len(totals), "took": round(time.monotonic() - started, 6)},
            )
            return len(totals)

"""In-memory Prometheus view of the durable counters.

Each mirror owns its CollectorRegistry so several instances (tests, embedded
apps) never share samples.
"""
from __future__ import annotations

import threading
from typing import Dict, Optional, Tuple

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, generate_latest

METRIC_NAMESPACE = "infinity"
METRIC_SUBSYSTEM = "insight"
METRIC_NAME = "calls_sum"
LABELS = ("type", "app")


class MetricsMirror:
    CONTENT_TYPE = CONTENT_TYPE_LATEST

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()
        self._counter = Counter(
            METRIC_NAME,
            "total count of calls",
            list(LABELS),
            namespace=METRIC_NAMESPACE,
            subsystem=METRIC_SUBSYSTEM,
            registry=self.registry,
        )
        self.sample_name = f"{METRIC_NAMESPACE}_{METRIC_SUBSYSTEM}_{METRIC_NAME}_total"
        # set once stored totals have been replayed into this mirror
        self.reconcile_lock = threading.Lock()
        self.reconciled = False

    def add(self, app: str, ctype: str, delta: float = 1) -> None:
        if delta < 0:
            raise ValueError("mirror counters only increase")
        self._counter.labels(type=ctype, app=app).inc(delta)

    def value(self, app: str, ctype: str) -> float:
        sample = self.registry.get_sample_value(self.sample_name, {"type": ctype, "app": app})
        return sample or 0.0

    def snapshot(self) -> Dict[Tuple[str, str], float]:
        """Return {(app, type): value} for every entry currently in the mirror."""
        out: Dict[Tuple[str, str], float] = {}
        for metric in self.registry.collect():
            for sample in metric.samples:
                if sample.name == self.sample_name:
                    out[(sample.labels["app"], sample.labels["type"])] = sample.value
        return out

    def export(self) -> bytes:
        return generate_latest(self.registry)

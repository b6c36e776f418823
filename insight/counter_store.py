from __future__ import annotations

import logging
import sqlite3
from typing import Iterator, NamedTuple

from .codec import decode_total, encode_total
from .errors import CorruptionError, StoreError, ValidationError
from .kv import KVStore
from .mirror import MetricsMirror

logger = logging.getLogger(__name__)


class CounterTotal(NamedTuple):
    app: str
    type: str
    total: int


def validate_identity(app: str, ctype: str) -> None:
    if not isinstance(app, str) or not app:
        raise ValidationError("missing key: app")
    if not isinstance(ctype, str) or not ctype:
        raise ValidationError("missing key: type")


def _decode_name(raw: bytes, app: str | None = None) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CorruptionError(raw, app=app) from e


class CounterStore:
    """Durable (app, type) -> total counters, mirrored into a MetricsMirror.

    The store owns its KVStore handle; close() releases it.
    """

    def __init__(self, kv: KVStore, mirror: MetricsMirror):
        self.kv = kv
        self.mirror = mirror

    def increment(self, app: str, ctype: str) -> int:
        """Add one to the durable total for (app, ctype) and return the new total.

        The mirror is only touched after the write transaction committed.
        Raises ValidationError, CorruptionError or StoreError.
        """
        validate_identity(app, ctype)
        try:
            with self.kv.update() as tx:
                bucket = tx.create_bucket_if_not_exists(app)
                raw = bucket.get(ctype)
                current = 0 if raw is None else decode_total(raw, app=app, ctype=ctype)
                total = current + 1
                bucket.put(ctype, encode_total(total))
        except CorruptionError:
            logger.error("count error: corrupt stored value", extra={"app": app, "type": ctype})
            raise
        except sqlite3.Error as e:
            logger.error("db put error", extra={"app": app, "type": ctype, "error": str(e)})
            raise StoreError(f"increment failed for app={app!r} type={ctype!r}: {e}") from e

        self.mirror.add(app, ctype, 1)
        logger.debug("incremented", extra={"app": app, "type": ctype, "total": total})
        return total

    def total(self, app: str, ctype: str) -> int:
        validate_identity(app, ctype)
        try:
            with self.kv.view() as tx:
                bucket = tx.bucket(app)
                raw = bucket.get(ctype) if bucket is not None else None
        except sqlite3.Error as e:
            raise StoreError(f"read failed for app={app!r} type={ctype!r}: {e}") from e
        return 0 if raw is None else decode_total(raw, app=app, ctype=ctype)

    def read_all(self) -> Iterator[CounterTotal]:
        """Yield every stored counter from one consistent read-only snapshot."""
        try:
            with self.kv.view() as tx:
                for name, bucket in tx.buckets():
                    app = _decode_name(name)
                    for key, value in bucket.items():
                        ctype = _decode_name(key, app=app)
                        yield CounterTotal(app, ctype, decode_total(value, app=app, ctype=ctype))
        except sqlite3.Error as e:
            raise StoreError(f"scan failed: {e}") from e

    def close(self) -> None:
        self.kv.close()

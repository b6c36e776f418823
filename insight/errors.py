from __future__ import annotations


class InsightError(Exception):
    """Base class for counter service errors."""


class ValidationError(InsightError):
    """Raised when a counter identity is missing or empty."""


class StoreError(InsightError):
    """Raised when a store transaction fails (I/O, locking, closed store)."""


class CorruptionError(InsightError):
    """Raised when a stored total is not a non-negative decimal integer."""

    def __init__(self, raw, app: str | None = None, ctype: str | None = None):
        self.raw = raw
        self.app = app
        self.type = ctype
        where = ""
        if app is not None or ctype is not None:
            where = f" for app={app!r} type={ctype!r}"
        super().__init__(f"stored value {raw!r}{where} is not a non-negative decimal integer")

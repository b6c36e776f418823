"""Command line and environment configuration for the counter service."""
from __future__ import annotations

import argparse
import os
from typing import Optional, Sequence

from . import __version__

DEFAULT_DB_PATH = "insight.db"
DEFAULT_HTTP_ADDR = ":8080"


def _env_bool(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def parse_http_addr(addr: str) -> tuple[str, int]:
    """Split "host:port" (host optional, as in ":8080") into (host, port)."""
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid http address {addr!r}, expected [host]:port")
    port_num = int(port)
    if not 0 < port_num < 65536:
        raise ValueError(f"port out of range in {addr!r}")
    host = host.strip("[]") or "0.0.0.0"
    return host, port_num


class Settings:
    def __init__(self, db_path: str = DEFAULT_DB_PATH, http_addr: str = DEFAULT_HTTP_ADDR,
                 threads: Optional[int] = None, debug: bool = False):
        self.db_path = db_path
        self.http_addr = http_addr
        self.host, self.port = parse_http_addr(http_addr)
        self.threads = threads or os.cpu_count() or 4
        self.debug = debug

    def __repr__(self) -> str:
        return (f"Settings(db_path={self.db_path!r}, http_addr={self.http_addr!r}, "
                f"threads={self.threads}, debug={self.debug})")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="insight", description="Durable event counter service")
    parser.add_argument("--db", dest="db_path",
                        default=os.environ.get("INSIGHT_DB_PATH", DEFAULT_DB_PATH),
                        help="path to the db file (env INSIGHT_DB_PATH)")
    parser.add_argument("--http-addr", dest="http_addr",
                        default=os.environ.get("INSIGHT_HTTP_ADDR", DEFAULT_HTTP_ADDR),
                        help="HTTP listen address (env INSIGHT_HTTP_ADDR)")
    # a string default goes through type=int, so a bad env value is a parser error
    parser.add_argument("--threads", type=int,
                        default=os.environ.get("INSIGHT_THREADS") or None,
                        help="request worker threads (env INSIGHT_THREADS, default: CPU count)")
    parser.add_argument("--debug", action="store_true", default=_env_bool("INSIGHT_DEBUG"),
                        help="debug logging (env INSIGHT_DEBUG)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_settings(argv: Optional[Sequence[str]] = None) -> Settings:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.threads is not None and args.threads < 1:
        parser.error("--threads must be >= 1")
    try:
        return Settings(db_path=args.db_path, http_addr=args.http_addr,
                        threads=args.threads, debug=args.debug)
    except ValueError as e:
        parser.error(str(e))
        raise  # pragma: no cover - parser.error exits

import logging

import insight.main as main_mod
from insight.kv import KVStore
from insight.observability import configure_logging

from conftest import seed


def test_corrupt_store_prevents_serving(tmp_path, monkeypatch):
    db = str(tmp_path / "bad.db")
    seed(KVStore.open(db), "svc", "start", b"abc")

    served = []
    monkeypatch.setattr(main_mod, "serve", lambda app, settings: served.append(app))
    monkeypatch.setattr(main_mod.signal, "signal", lambda signum, handler: None)
    assert main_mod.main(["--db", db]) == 1
    assert served == []


def test_main_serves_and_closes_store(tmp_path, monkeypatch):
    db = str(tmp_path / "ok.db")
    served = []
    monkeypatch.setattr(main_mod, "serve", lambda app, settings: served.append(app))
    monkeypatch.setattr(main_mod.signal, "signal", lambda signum, handler: None)

    assert main_mod.main(["--db", db, "--http-addr", "127.0.0.1:8089"]) == 0
    assert len(served) == 1
    assert served[0].extensions["insight.store"].kv.closed


def test_configure_logging_replaces_own_handler():
    root = logging.getLogger()
    configure_logging()
    configure_logging(debug=True)
    ours = [h for h in root.handlers if getattr(h, "_insight", False)]
    assert len(ours) == 1
    assert root.level == logging.DEBUG
    configure_logging()


def test_oversized_stored_value_prevents_serving(tmp_path, monkeypatch):
    db = str(tmp_path / "huge.db")
    seed(KVStore.open(db), "svc", "start", b"9" * 5000)

    served = []
    monkeypatch.setattr(main_mod, "serve", lambda app, settings: served.append(app))
    monkeypatch.setattr(main_mod.signal, "signal", lambda signum, handler: None)
    assert main_mod.main(["--db", db]) == 1
    assert served == []

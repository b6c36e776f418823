import pytest

from insight.config import Settings, load_settings, parse_http_addr


def test_parse_http_addr():
    assert parse_http_addr(":8080") == ("0.0.0.0", 8080)
    assert parse_http_addr("127.0.0.1:9000") == ("127.0.0.1", 9000)
    assert parse_http_addr("[::1]:9000") == ("::1", 9000)


@pytest.mark.parametrize("addr", ["8080", "host:", "host:http", ":0", ":70000"])
def test_parse_http_addr_rejects(addr):
    with pytest.raises(ValueError):
        parse_http_addr(addr)


def test_defaults(monkeypatch):
    for name in ("INSIGHT_DB_PATH", "INSIGHT_HTTP_ADDR", "INSIGHT_THREADS", "INSIGHT_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings([])
    assert settings.db_path == "insight.db"
    assert settings.port == 8080
    assert settings.threads >= 1
    assert settings.debug is False


def test_environment_then_flags(monkeypatch):
    monkeypatch.setenv("INSIGHT_DB_PATH", "/tmp/env.db")
    monkeypatch.setenv("INSIGHT_HTTP_ADDR", "127.0.0.1:9999")
    monkeypatch.setenv("INSIGHT_THREADS", "3")
    monkeypatch.setenv("INSIGHT_DEBUG", "true")
    settings = load_settings([])
    assert (settings.db_path, settings.host, settings.port, settings.threads, settings.debug) == (
        "/tmp/env.db", "127.0.0.1", 9999, 3, True)

    settings = load_settings(["--db", "flag.db", "--http-addr", ":1234", "--threads", "2"])
    assert (settings.db_path, settings.port, settings.threads) == ("flag.db", 1234, 2)


def test_bad_address_exits(monkeypatch):
    monkeypatch.delenv("INSIGHT_HTTP_ADDR", raising=False)
    with pytest.raises(SystemExit):
        load_settings(["--http-addr", "nope"])


def test_settings_repr():
    assert "db_path='x.db'" in repr(Settings(db_path="x.db"))


def test_non_numeric_threads_env_exits(monkeypatch):
    monkeypatch.setenv("INSIGHT_THREADS", "many")
    with pytest.raises(SystemExit):
        load_settings([])

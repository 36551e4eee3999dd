import logging
from logging.handlers import RotatingFileHandler

import pytest

from querycraft.logging import (
    QueryLogger,
    QueryLoggerConfig,
    close_query_logger,
    create_query_logger,
    get_query_logger,
    initialise_query_logger,
)
from querycraft.protocols import QuerySink


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / "logs" / "queries.log"


@pytest.fixture
def file_config(log_path):
    return QueryLoggerConfig(
        enabled=True,
        log_to_file=True,
        log_to_console=False,
        log_file_path=str(log_path),
        slow_query_threshold=100,
        max_file_size=2048,
        backup_count=2,
    )


@pytest.fixture(autouse=True)
def reset_default_logger():
    yield
    close_query_logger()


def test_disabled_logger_attaches_no_handlers(log_path):
    sink = QueryLogger(QueryLoggerConfig(enabled=False, log_file_path=str(log_path)))

    sink.log_query("SELECT 1", [], 3)
    sink.close()

    assert sink.handlers == []
    assert not log_path.exists()


def test_query_lines_and_slow_query_level(file_config, log_path):
    sink = QueryLogger(file_config)

    sink.log_query("SELECT * FROM `users` WHERE `id` = ?", [1], 5)
    sink.log_query("SELECT SLEEPY_VIEW", [], 250)
    sink.close()

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert "[INFO] [5.00ms] SELECT * FROM `users` WHERE `id` = ? | Values: [1]" in lines[0]
    assert "[WARNING] [250.00ms] SELECT SLEEPY_VIEW" in lines[1]
    assert "Values" not in lines[1]

    stats = sink.get_stats()
    assert stats["queries_logged"] == 2
    assert stats["slow_queries"] == 1


def test_error_lines_include_message(file_config, log_path):
    sink = QueryLogger(file_config)

    sink.log_error("DELETE FROM `t`", ValueError("boom"), ["x"])
    sink.close()

    content = log_path.read_text(encoding="utf-8")
    assert '[ERROR] DELETE FROM `t` | Values: ["x"] | Error: boom' in content
    assert "ValueError: boom" in content
    assert sink.get_stats()["errors_logged"] == 1


def test_rotation_is_configured(file_config):
    sink = QueryLogger(file_config)

    handler = sink.handlers[0]
    assert isinstance(handler, RotatingFileHandler)
    assert handler.maxBytes == 2048
    assert handler.backupCount == 2
    sink.close()


def test_plain_file_handler_without_rotation(file_config):
    sink = QueryLogger(file_config, rotate_on_size=False)

    assert type(sink.handlers[0]) is logging.FileHandler
    sink.close()


def test_console_output(log_path, capsys):
    sink = QueryLogger(QueryLoggerConfig(enabled=True, log_to_file=False, log_to_console=True))

    sink.log_debug("pool warmed")
    sink.log_warning("pool exhausted")
    sink.close()

    out = capsys.readouterr().out
    assert "[DEBUG] pool warmed" in out
    assert "[WARNING] pool exhausted" in out


def test_update_config_rebuilds_handlers(file_config, log_path):
    sink = QueryLogger(file_config)

    sink.update_config(enabled=False)
    assert sink.handlers == []
    assert sink.get_stats()["enabled"] is False

    sink.update_config(enabled=True)
    assert len(sink.handlers) == 1
    sink.close()


def test_get_config_returns_a_copy(file_config):
    sink = QueryLogger(file_config)

    config = sink.get_config()
    config.enabled = False

    assert sink.get_config().enabled is True
    sink.close()


def test_satisfies_sink_protocol(file_config):
    sink = create_query_logger(file_config)

    assert isinstance(sink, QuerySink)
    sink.close()


def test_default_logger_singleton(file_config):
    first = initialise_query_logger(file_config)

    assert get_query_logger() is first

    second = initialise_query_logger(file_config, slow_query_threshold=5)
    assert second is not first
    assert first.handlers == []
    assert get_query_logger().get_config().slow_query_threshold == 5

    close_query_logger()
    assert second.handlers == []


def test_config_from_settings(monkeypatch, tmp_path):
    from querycraft.settings import _reload_settings
    from querycraft.settings import main as settings_main

    monkeypatch.setenv("QUERY_LOGGING_ENABLED", "true")
    monkeypatch.setenv("SLOW_QUERY_THRESHOLD", "50")
    monkeypatch.setenv("QUERY_LOG_PATH", str(tmp_path / "q.log"))
    monkeypatch.setenv("APP_ENV", "development")
    monkeypatch.delenv("QUERY_LOG_TO_CONSOLE", raising=False)
    try:
        config = QueryLoggerConfig.from_settings(_reload_settings())
    finally:
        settings_main._settings = None

    assert config.enabled is True
    assert config.slow_query_threshold == 50
    assert config.log_file_path == str(tmp_path / "q.log")
    assert config.log_to_console is True

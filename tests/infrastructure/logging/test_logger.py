"""Tests for the logging helpers."""

import logging
from unittest.mock import MagicMock

from balanze_ledger.infrastructure.logging import logger as logger_module


def test_logger_builder_writes_into_dated_subdir(tmp_path, monkeypatch):
    """LoggerBuilder should place the log file under logs/<subdir>."""
    monkeypatch.setattr(logger_module, "get_project_root", lambda: tmp_path)
    monkeypatch.setattr(
        logger_module.LoggerBuilder,
        "_today_stamp",
        staticmethod(lambda: "20240301"),
    )

    builder = (
        logger_module.LoggerBuilder()
        .name("balanze_ledger.test_dps")
        .subdir("dps")
        .prefix("dps_logs")
        .console(False)
        .level(logging.WARNING)
    )
    dps_logger = builder.build()

    assert dps_logger.level == logging.WARNING
    assert dps_logger.propagate is False
    assert len(dps_logger.handlers) == 1
    expected = tmp_path / "logs" / "dps" / "20240301_dps_logs.log"
    assert dps_logger.handlers[0].baseFilename == str(expected)
    assert builder.build() is dps_logger
    for handler in list(dps_logger.handlers):
        handler.close()
        dps_logger.removeHandler(handler)


def test_custom_handler_factories_are_used(tmp_path, monkeypatch):
    monkeypatch.setattr(logger_module, "get_project_root", lambda: tmp_path)
    file_factory = MagicMock(return_value=logging.NullHandler())
    console_factory = MagicMock(return_value=logging.NullHandler())
    fmt = logging.Formatter("%(message)s")

    built = (
        logger_module.LoggerBuilder()
        .name("balanze_ledger.test_factories")
        .formatter(lambda: fmt)
        .file_handler(file_factory)
        .console_handler(console_factory)
        .build()
    )

    path, used_fmt = file_factory.call_args.args
    assert path.parent == tmp_path / "logs" / "app"
    assert used_fmt is fmt
    console_factory.assert_called_once_with(fmt)
    assert len(built.handlers) == 2
    built.handlers.clear()


def test_default_handlers_use_formatter(tmp_path):
    fmt = logger_module.LoggerBuilder._default_formatter()
    file_handler = logger_module.LoggerBuilder._default_file_handler(
        tmp_path / "ledger.log",
        fmt,
    )
    console_handler = logger_module.LoggerBuilder._default_console_handler(fmt)

    assert file_handler.level == logging.INFO
    assert file_handler.formatter is fmt
    assert isinstance(console_handler, logging.StreamHandler)
    assert console_handler.formatter is fmt
    file_handler.close()


def test_logger_wrapper_delegates_levels(monkeypatch):
    fake_logger = MagicMock()
    monkeypatch.setattr(
        logger_module.LoggerBuilder,
        "build",
        lambda self: fake_logger,
    )
    monkeypatch.setattr(logger_module.Logger, "_instance", None)

    wrapper = logger_module.Logger("ledger")
    wrapper.info("saga started")
    wrapper.warning("balance drift")
    wrapper.error("credit failed")
    wrapper.debug("positions")
    wrapper.critical("store down")

    fake_logger.info.assert_called_with("saga started")
    fake_logger.warning.assert_called_with("balance drift")
    fake_logger.error.assert_called_with("credit failed")
    fake_logger.debug.assert_called_with("positions")
    fake_logger.critical.assert_called_with("store down")
    assert logger_module.Logger("ledger") is wrapper


def test_app_and_usage_loggers_are_distinct_singletons(monkeypatch):
    """Usage events land in their own logger, separate from the app log."""
    subdirs = []

    def _fake_build(self):
        subdirs.append(self._subdir)
        return MagicMock()

    monkeypatch.setattr(logger_module.LoggerBuilder, "build", _fake_build)
    monkeypatch.setattr(logger_module.AppLogger, "_instance", None)
    monkeypatch.setattr(logger_module.UsageLogger, "_instance", None)

    app_logger = logger_module.get_app_logger()
    usage_logger = logger_module.get_usage_logger()

    assert logger_module.get_app_logger() is app_logger
    assert logger_module.get_usage_logger() is usage_logger
    assert app_logger is not usage_logger
    assert subdirs == ["app", "usage"]

import logging

import pytest

from querybridge.packages.common.querybridge_common.logging import get_root_logger, setup_logging
from querybridge.packages.common.querybridge_common.logging import logger as logger_module


@pytest.fixture
def fresh_root(monkeypatch: pytest.MonkeyPatch):
    root = get_root_logger()
    handlers, level = list(root.handlers), root.level
    monkeypatch.setattr(logger_module, "_initialized", False)
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_file_logging_when_otel_disabled(fresh_root: logging.Logger, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OTEL_SDK_DISABLED", "true")

    setup_logging(level="DEBUG", log_dir=str(tmp_path), log_file="qb.log", with_console=False)
    logging.getLogger("querybridge.test").info("worker pool ready")
    for handler in fresh_root.handlers:
        handler.flush()

    assert fresh_root.level == logging.DEBUG
    assert "worker pool ready" in (tmp_path / "qb.log").read_text(encoding="utf-8")


def test_handlers_attached_once(fresh_root: logging.Logger, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OTEL_SDK_DISABLED", "1")

    setup_logging(log_dir=str(tmp_path))
    count = len(fresh_root.handlers)
    setup_logging(level="WARNING", log_dir=str(tmp_path))

    assert len(fresh_root.handlers) == count
    assert fresh_root.level == logging.WARNING

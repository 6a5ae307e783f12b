import importlib
import json
import logging
from contextlib import contextmanager
from unittest.mock import patch

import core.logging


@contextmanager
def isolated_root_logger():
    """Give the root logger a private handler list and level for the block."""
    root = logging.getLogger()
    level = root.level
    with patch.object(root, "handlers", []):
        try:
            yield root
        finally:
            for handler in root.handlers:
                handler.close()
            root.setLevel(level)


def test_import_leaves_host_logging_alone():
    with isolated_root_logger() as root:
        host_handler = logging.StreamHandler()
        root.addHandler(host_handler)
        root.setLevel(logging.ERROR)

        importlib.reload(core.logging)
        importlib.import_module("ai")

        assert root.handlers == [host_handler]
        assert root.level == logging.ERROR


def test_library_logger_is_named():
    assert core.logging.logger.name == "jadwa"
    assert any(isinstance(h, logging.NullHandler) for h in core.logging.logger.handlers)


def test_records_reach_host_handlers(caplog):
    with caplog.at_level(logging.WARNING, logger="jadwa"):
        core.logging.logger.warning("تنبيه")
    assert "تنبيه" in caplog.text


def test_setup_logging_writes_json(tmp_path):
    with isolated_root_logger():
        root = core.logging.setup_logging("INFO", log_dir=tmp_path)

        core.logging.logger.info("مرحبا")
        for handler in root.handlers:
            handler.flush()

    line = (tmp_path / "app.log").read_text(encoding="utf-8").strip().splitlines()[-1]
    record = json.loads(line)
    assert record["name"] == "jadwa"
    assert record["message"] == "مرحبا"
    assert logging.getLogger("httpx").level == logging.WARNING

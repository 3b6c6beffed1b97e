import importlib
import logging

from rxcalc import config
from rxcalc.logging_conf import OperationFilter, configure_logging


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("RX_DEFAULT_VERTEX_MM", "13.5")
    monkeypatch.setenv("RX_VERTEX_THRESHOLD_D", "3")
    try:
        reloaded = importlib.reload(config)
        assert reloaded.settings.default_vertex_distance_mm == 13.5
        assert reloaded.settings.vertex_compensation_threshold_d == 3.0
    finally:
        monkeypatch.delenv("RX_DEFAULT_VERTEX_MM")
        monkeypatch.delenv("RX_VERTEX_THRESHOLD_D")
        importlib.reload(config)


def test_operation_filter_defaults_field():
    record = logging.LogRecord("rxcalc", logging.INFO, __file__, 1, "msg", None, None)
    assert OperationFilter().filter(record) is True
    assert record.operation == "-"


def test_configure_logging_installs_handler():
    root = logging.getLogger()
    level = root.level
    handler = configure_logging("debug")
    try:
        assert handler in root.handlers
        assert root.level == logging.DEBUG
    finally:
        root.removeHandler(handler)
        root.setLevel(level)

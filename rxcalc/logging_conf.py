"""
Logging setup for applications embedding rxcalc.

The library only creates module loggers; call configure_logging() once from
the host application's entry point. Records carry an `operation` field
(e.g. "convert_to_toric") set through `extra=`.
"""
import logging, sys

from .config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(operation)s] %(message)s"

class OperationFilter(logging.Filter):
    def filter(self, record):
        if not hasattr(record, "operation"):
            record.operation = "-"
        return True

def configure_logging(level: str | None = None):
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(OperationFilter())
    root = logging.getLogger()
    root.setLevel((level or settings.log_level).upper())
    root.addHandler(handler)
    return handler

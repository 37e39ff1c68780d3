"""structlog loggers for mockstdin.

The controller's structlog logger carries its own processor chain and hands
JSON strings to the stdlib ``logging`` module, so importing mockstdin leaves
the application's structlog configuration alone and nothing is printed onto
the ``sys.stdout`` that visible feeds echo to.
"""
from __future__ import annotations

import logging
from typing import TextIO

import structlog

_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.add_log_level,
    structlog.processors.JSONRenderer(),
]


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
    )


def configure_logging(
    level: int = logging.INFO, stream: TextIO | None = None
) -> logging.Handler:
    """Send mockstdin's records to *stream* (stderr by default) at *level*.

    Meant for an application's entry point; the library never calls it.
    """
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger = logging.getLogger("mockstdin")
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler

"""Logging setup for the package."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime

LOGGER_NAME = "simpleoneapi"

_JSON_MODES = frozenset({"prodj", "prodjson", "productionjson"})
_PROD_MODES = frozenset({"prod", "production"}) | _JSON_MODES
_DEV_MODES = frozenset({"dev", "development"})


class _JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "level": record.levelname.lower(),
            "timestamp": datetime.fromtimestamp(record.created).astimezone().isoformat(
                timespec="milliseconds"
            ),
            "caller": f"{record.filename}:{record.lineno}",
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _level_for(mode: str) -> int:
    if mode in _PROD_MODES:
        return logging.WARNING
    if mode in _DEV_MODES:
        return logging.INFO
    if mode == "debug":
        return logging.DEBUG
    return logging.WARNING


def init_log(mode: str) -> logging.Logger:
    """Configure the package logger for a mode and return it.

    Production modes log warnings and above, development modes info, and
    ``debug`` everything; unknown modes behave like production. The
    ``prodj``/``prodjson``/``productionjson`` modes write JSON lines, the
    others plain text. Output goes to standard output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    if mode in _JSON_MODES:
        handler.setFormatter(_JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s\t%(levelname)s\t%(filename)s:%(lineno)d\t%(message)s"
            )
        )
    level = _level_for(mode)
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
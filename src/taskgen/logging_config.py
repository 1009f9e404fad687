"""Logging setup for taskgen.

Library modules only create loggers under the "taskgen" namespace; this
module is for applications and the command line that want output.
"""

from __future__ import annotations

import json
import logging as std_logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union


class JsonFormatter(std_logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: std_logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logging(
    log_level: Union[str, int] = std_logging.INFO,
    log_file: Optional[Path] = None,
    json_format: bool = False,
) -> std_logging.Logger:
    """Configure the "taskgen" logger with a console handler and optional JSON file."""
    logger = std_logging.getLogger("taskgen")
    logger.setLevel(log_level)
    logger.handlers.clear()

    detailed_formatter = std_logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = std_logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(JsonFormatter() if json_format else detailed_formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = std_logging.FileHandler(log_file)
        file_handler.setLevel(std_logging.DEBUG)
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)

    return logger

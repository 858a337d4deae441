"""
Logging configuration for pipeline entry points.

Library modules only create module-level loggers; handlers are installed
here, once, by whatever process embeds the pipeline.
"""

from __future__ import annotations

import logging

import json_log_formatter

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", fmt: str = "text") -> None:
    """Install a single stream handler on the root logger.

    Args:
        level: Level name (DEBUG, INFO, ...); unknown names fall back to INFO
        fmt: "text" or "json"
    """
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    if fmt == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)
    root_logger.handlers = [handler]

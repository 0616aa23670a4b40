from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "crit": logging.CRITICAL,
    "critical": logging.CRITICAL,
}

# HTTP stack loggers used by the DoH transport; set to library_level.
HTTP_LIBRARY_LOGGERS = ("urllib3", "requests")

LOG_FORMAT = "%(asctime)s %(level_tag)s %(name)s: %(message)s"


def resolve_level(value: Any, default: int = logging.INFO) -> int:
    """
    Brief: Map a level name such as 'warn' or 'debug' to a logging constant.

    Inputs:
      - value: Level name (case-insensitive) or None.
      - default: Level returned for None or an unknown name.

    Outputs:
      - int logging level.
    """
    if value is None:
        return default
    return _LEVELS.get(str(value).strip().lower(), default)


class BracketLevelFormatter(logging.Formatter):
    """Formatter that adds bracketed lowercase level tags and UTC timestamps."""

    _TAGS = {
        logging.DEBUG: "[debug]",
        logging.INFO: "[info]",
        logging.WARNING: "[warn]",
        logging.ERROR: "[error]",
        logging.CRITICAL: "[crit]",
    }

    def formatTime(self, record, datefmt=None):
        return datetime.fromtimestamp(record.created, timezone.utc).strftime(
            "%Y-%m-%dT%H:%M:%SZ"
        )

    def format(self, record):
        record.level_tag = self._TAGS.get(record.levelno, f"[lvl{record.levelno}]")
        return super().format(record)


def init_logging(cfg: Optional[Dict[str, Any]]) -> None:
    """
    Initialize logging for the dnsolve CLI.

    Args:
        cfg: Logging configuration dictionary with optional keys:
            - level: level for dnsolve's own loggers (default: info)
            - library_level: level for the urllib3/requests loggers used by
              the DoH transport (default: warning)
            - stderr: boolean to log to stderr (default: True)
            - file: string path to log file (optional)

    Example config:
        {
            "level": "debug",
            "library_level": "warning",
            "file": "./dnsolve.log",
        }
    """
    cfg = cfg or {}

    level = resolve_level(cfg.get("level"))
    library_level = resolve_level(cfg.get("library_level"), logging.WARNING)
    formatter = BracketLevelFormatter(fmt=LOG_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)

    for name in HTTP_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    if cfg.get("stderr", True):
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(formatter)
        root.addHandler(stderr_handler)

    file_path = cfg.get("file")
    if isinstance(file_path, str) and file_path.strip():
        path = os.path.abspath(os.path.expanduser(file_path.strip()))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    logging.captureWarnings(True)

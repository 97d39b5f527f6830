from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

LOGGER_NAME = "artmap"
_LOG_FORMAT = "ts=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s"

_CONFIGURED = False


def configure_logging(
    base_dir: Optional[Path] = None,
    level: int = logging.INFO,
    *,
    attach_modules: bool = True,
) -> Dict[str, str]:
    """Attach a key-value file handler to the application logger.

    With ``attach_modules`` the module loggers (``viewport_core.*``,
    ``viewer_ui.*``, ``gallery_store.*``, ``runtime_bus.*``) are routed to the
    same handler, once per process. Without it only an isolated
    ``artmap.test`` logger is configured.
    """
    global _CONFIGURED
    root = base_dir or Path("data/roaming")
    log_dir = root / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "artmap.log"

    logger_name = LOGGER_NAME if attach_modules else f"{LOGGER_NAME}.test"
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False

    if attach_modules and not _CONFIGURED:
        handler = _file_handler(log_path)
        logger.addHandler(handler)
        _attach_module_loggers(handler, level)
        _CONFIGURED = True
    elif not attach_modules and not logger.handlers:
        logger.addHandler(_file_handler(log_path))

    return {
        "log_path": str(log_path),
        "format": "kv",
        "handlers": "file",
        "logger_name": logger_name,
    }


def _file_handler(log_path: Path) -> logging.Handler:
    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    return handler


def _attach_module_loggers(handler: logging.Handler, level: int) -> None:
    for name in ("viewport_core", "viewer_ui", "gallery_store", "runtime_bus"):
        module_logger = logging.getLogger(name)
        module_logger.setLevel(level)
        if handler not in module_logger.handlers:
            module_logger.addHandler(handler)

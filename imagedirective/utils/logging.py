"""Logging helpers."""

from __future__ import annotations

import logging
from pathlib import Path

from imagedirective.config.settings import AppConfig

# Pillow's decoders log every chunk at DEBUG.
_NOISY_LOGGERS = ("PIL", "httpx", "gradio")


def setup_logging(config: AppConfig) -> logging.Logger:
    """Configure root handlers once and return the package logger."""
    level = logging.getLevelName(config.log_level)
    if not isinstance(level, int):
        level = logging.INFO

    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_dir / "imagedirective.log", encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    return logging.getLogger("imagedirective")

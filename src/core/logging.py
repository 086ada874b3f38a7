"""Configuración de logging (loguru).

Un único sink a stderr; el formato humano o serializado se decide por config.
Los servicios piden un logger con contexto vía `bind_context`.
"""

from __future__ import annotations

import sys
from typing import Any

from loguru import logger

_HUMAN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level> | {extra}"
)


def configure_logging(level: str = "INFO", *, json: bool = False) -> None:
    """Reemplaza el sink por defecto de loguru."""

    logger.remove()
    if json:
        logger.add(sys.stderr, level=level.upper(), serialize=True)
    else:
        logger.add(sys.stderr, level=level.upper(), format=_HUMAN_FORMAT)


def bind_context(**kwargs: Any):
    """Return a logger with bound contextual fields (request/coords/partida)."""
    return logger.bind(**{k: v for k, v in kwargs.items() if v is not None})

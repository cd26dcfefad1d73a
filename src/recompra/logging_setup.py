"""
@file logging_setup.py
@brief Configurazione centralizzata del logging per il pacchetto recompra.
@ingroup infra_module

@details
- configure_logging(): aggancia un solo StreamHandler al logger radice
  "recompra". Va chiamata una volta dagli entrypoint (CLI, API).
- get_logger(): logger per modulo; se nessuno ha configurato il logging,
  il logger radice riceve un NullHandler.

I moduli di libreria non aggiungono handler propri.
"""

from __future__ import annotations
import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "recompra"
_CONFIGURED = False

DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _level_from_string(value: str) -> int | None:
    value = value.strip().upper()
    if value.isdigit():
        return int(value)
    numeric = getattr(logging, value, None)
    return numeric if isinstance(numeric, int) else None


def _parse_level(level: int | str | None) -> int:
    """Livello esplicito, poi RECOMPRA_LOG_LEVEL, poi INFO (nomi non validi -> INFO)."""
    if isinstance(level, int):
        return level
    if level is None:
        level = os.getenv("RECOMPRA_LOG_LEVEL")
    if isinstance(level, str):
        numeric = _level_from_string(level)
        if numeric is not None:
            return numeric
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """
    @brief Configura il logger radice del pacchetto (una sola volta).
    @param level Livello (int o nome, es. "DEBUG"). Se None usa
    RECOMPRA_LOG_LEVEL, altrimenti INFO.
    @param fmt Formato opzionale (default DEFAULT_FORMAT).
    @param stream Stream di output (default stderr).
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Logger per modulo, silenzioso finché l'applicazione non configura handler."""
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)

"""Logging setup shared by the server entry point and the app factory."""

from __future__ import annotations

import logging
import os
from typing import Iterable

from pond.exceptions import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

SERVER_LOGGER = "pond.server"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _resolve_level(raw: str | None, variable: str, default: str = "INFO") -> str:
    name = (raw or default).strip().upper()
    if not isinstance(logging.getLevelName(name), int):
        raise ConfigurationError(f"{variable} must be a logging level name, got {raw!r}")
    return name


def configure_logging(
    *,
    level: str | None = None,
    engine_level: str | None = None,
    include_uvicorn: bool = True,
    extra_loggers: Iterable[str] | None = None,
) -> logging.Logger:
    """Configure logging for the pond server.

    ``pond`` (simulation, protocol, renderer model) and ``pond_server``
    log at ``level``. The engine's per-tick lines can be tuned
    separately: ``engine_level`` lets a DEBUG server keep tick chatter
    quiet, or the reverse.

    Args:
        level: Log level name. Falls back to ``POND_LOG_LEVEL`` or INFO.
        engine_level: Level for ``pond.engine``. Falls back to
            ``POND_ENGINE_LOG_LEVEL`` or ``level``.
        include_uvicorn: Align uvicorn's loggers with ``level``.
        extra_loggers: Additional logger names to align with ``level``.

    Returns:
        The ``pond.server`` logger.

    Raises:
        ConfigurationError: if a level name is not recognised
    """
    if level is None:
        level = os.getenv("POND_LOG_LEVEL")
    resolved = _resolve_level(level, "POND_LOG_LEVEL")
    if engine_level is None:
        engine_level = os.getenv("POND_ENGINE_LOG_LEVEL")
    resolved_engine = _resolve_level(engine_level, "POND_ENGINE_LOG_LEVEL", default=resolved)

    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt=LOG_DATEFMT)

    names = ["pond", "pond_server", SERVER_LOGGER]
    if include_uvicorn:
        names.extend(UVICORN_LOGGERS)
    names.extend(extra_loggers or ())
    for name in names:
        logging.getLogger(name).setLevel(resolved)
    logging.getLogger("pond.engine").setLevel(resolved_engine)

    server_logger = logging.getLogger(SERVER_LOGGER)
    server_logger.debug("Logging configured at %s (engine %s)", resolved, resolved_engine)
    return server_logger

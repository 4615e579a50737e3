"""Application factory and context for the pond server.

All runtime state lives in an ``AppContext`` instead of module globals, so
each test can build an app around its own engine and session.

Usage:
    # Production (settings from environment)
    app = create_app()

    # Testing
    context = AppContext(session=PondSession(SimulationEngine(seed=1)))
    app = create_app(context=context)
"""

import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pond.config.server import (
    DEFAULT_API_PORT,
    DEFAULT_MAX_WS_PER_IP,
    DEFAULT_TICK_PERIOD,
    OUTBOX_MAXSIZE,
)
from pond.config.simulation_config import PondConfig
from pond.engine import SimulationEngine
from pond.exceptions import ConfigurationError
from pond_server.logging_config import configure_logging
from pond_server.security import WebSocketLimiter, setup_security_middleware
from pond_server.session import PondSession


def _env_number(name: str, default: float, cast=float):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def _env_seed() -> Optional[int]:
    raw = os.getenv("POND_SEED")
    if raw is None or raw.strip() == "":
        return None
    return _env_number("POND_SEED", 0, int)


@dataclass
class AppContext:
    """Runtime context holding all application state."""

    # Configuration
    api_port: int = field(default_factory=lambda: _env_number("POND_API_PORT", DEFAULT_API_PORT, int))
    tick_period: float = field(
        default_factory=lambda: _env_number("POND_TICK_PERIOD", DEFAULT_TICK_PERIOD)
    )
    seed: Optional[int] = field(default_factory=_env_seed)
    production_mode: bool = field(
        default_factory=lambda: os.getenv("PRODUCTION", "false").lower() == "true"
    )
    allowed_origins: list = field(
        default_factory=lambda: os.getenv("ALLOWED_ORIGINS", "*").split(",")
    )
    max_ws_per_ip: int = field(
        default_factory=lambda: _env_number("POND_MAX_WS_PER_IP", DEFAULT_MAX_WS_PER_IP, int)
    )
    outbox_maxsize: int = OUTBOX_MAXSIZE

    # Runtime state
    session: Optional[PondSession] = None
    websocket_limiter: Optional[WebSocketLimiter] = None

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("pond.server"))

    def __post_init__(self) -> None:
        if self.tick_period <= 0:
            raise ConfigurationError(f"Tick period must be positive, got {self.tick_period}")
        if self.session is None:
            engine = SimulationEngine(PondConfig(tick_period=self.tick_period), seed=self.seed)
            self.session = PondSession(engine, tick_period=self.tick_period)
        if self.websocket_limiter is None:
            self.websocket_limiter = WebSocketLimiter(max_connections_per_ip=self.max_ws_per_ip)


def create_app(
    *,
    production_mode: Optional[bool] = None,
    context: Optional[AppContext] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        production_mode: Override production mode (default: PRODUCTION env var)
        context: Pre-configured AppContext (for testing)

    Returns:
        Configured app with the context attached as ``app.state.context``
    """
    logger = configure_logging()

    if context is None:
        context = AppContext()
    if production_mode is not None:
        context.production_mode = production_mode
    context.logger = logger

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ctx = app.state.context
        ctx.logger.info("Pond server starting (tick period %.3fs)", ctx.tick_period)
        try:
            yield
        finally:
            ctx.logger.info("Pond server shutting down")
            ctx.session.shutdown()

    app = FastAPI(
        title="Frog Pond Simulation",
        lifespan=lifespan,
        docs_url=None if context.production_mode else "/docs",
        redoc_url=None,
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=context.allowed_origins if context.production_mode else ["*"],
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )
    setup_security_middleware(app)

    _setup_routers(app, context)
    return app


def _setup_routers(app: FastAPI, ctx: AppContext) -> None:
    from pond_server.routers import health, websocket

    app.include_router(health.setup_router(ctx.session))
    app.include_router(websocket.setup_router(ctx.session, ctx.websocket_limiter, ctx.outbox_maxsize))
    ctx.logger.info("Routers configured")

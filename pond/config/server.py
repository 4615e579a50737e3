"""Server configuration constants."""

DEFAULT_API_PORT = 8000  # Default port for FastAPI backend
DEFAULT_TICK_PERIOD = 1.0  # Seconds between authoritative ticks
DEFAULT_MAX_WS_PER_IP = 5  # WebSocket connections allowed per client IP
OUTBOX_MAXSIZE = 2000  # Queued outbound messages per socket before it is dropped as too slow

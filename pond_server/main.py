"""Pond server entry point for uvicorn."""

import uvicorn

from pond_server.app_factory import create_app

# Module-level app for ``uvicorn pond_server.main:app``
app = create_app()


def main() -> None:
    """Serve the pond on ``POND_API_PORT``."""
    context = app.state.context
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=context.api_port,
        log_level=None,  # keep the levels set by configure_logging
    )


if __name__ == "__main__":
    main()

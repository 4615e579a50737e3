"""Frog pond ecosystem simulation core.

This package holds the server-authoritative simulation (resources, frogs,
mating, the tick engine) and the renderer-side mirror used by clients. It
has no web framework dependencies; see ``pond_server`` for the FastAPI app.
"""

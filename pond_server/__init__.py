"""FastAPI server for the frog pond simulation.

Hosts one pond session and relays it to any number of renderers over
WebSockets.
"""

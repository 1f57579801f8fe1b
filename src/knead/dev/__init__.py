"""Dev mode — a local server that rebuilds on every request."""

from knead.dev.server import DevResponse, DevServer, ensure_port_available

__all__ = ["DevResponse", "DevServer", "ensure_port_available"]

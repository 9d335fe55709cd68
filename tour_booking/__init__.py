"""Tour booking client - session provider, service clients and tour card."""

__version__ = "0.1.0"

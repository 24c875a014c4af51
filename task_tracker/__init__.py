"""Per-user task tracker REST API."""

__version__ = "1.0.0"

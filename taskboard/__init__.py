"""Personal task manager: REST backend and async API client."""

__version__ = "0.1.0"

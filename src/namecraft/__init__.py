"""namecraft-server: FastAPI proxy for an external name generation API."""

__version__ = "1.0.0"

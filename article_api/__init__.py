"""HTTP API for creating, listing and updating articles."""

__version__ = "1.0.0"

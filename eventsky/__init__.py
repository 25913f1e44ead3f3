"""EventSky package."""

__all__ = ["core", "config", "routes", "console"]

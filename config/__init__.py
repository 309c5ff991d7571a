"""Configuration package for the async patterns service."""
from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]

"""Core app configuration, errors and database."""

from app.core.config import get_settings, settings

__all__ = ["get_settings", "settings"]

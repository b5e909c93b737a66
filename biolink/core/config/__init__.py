"""Configuration: settings and system constants."""

from biolink.core.config.settings import Settings, get_settings, reload_settings

__all__ = ["Settings", "get_settings", "reload_settings"]

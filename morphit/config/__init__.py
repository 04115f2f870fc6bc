"""Configuration module for morphit."""

from morphit.config.settings import MorphitSettings, get_settings, reload_settings

__all__ = ["MorphitSettings", "get_settings", "reload_settings"]

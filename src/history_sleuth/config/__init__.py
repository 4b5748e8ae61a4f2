"""Configuration management for history_sleuth package."""

from .settings import Settings, settings, APISettings, APIUrls, RPCSettings

__all__ = [
    "Settings",
    "settings",
    "APISettings",
    "APIUrls",
    "RPCSettings",
]

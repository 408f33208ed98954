"""Application configuration."""

from .settings import (
    Settings,
    ExportSettings,
    MonitorSettings,
    CacheSettings,
    SecuritySettings,
    get_settings,
)

__all__ = [
    "Settings",
    "ExportSettings",
    "MonitorSettings",
    "CacheSettings",
    "SecuritySettings",
    "get_settings",
]

"""Persisted client settings (custom endpoint URL)."""

from .models import DEFAULT_ENDPOINT_URL, ClientSettings
from .store import SettingsStore, default_settings_path

__all__ = [
    "DEFAULT_ENDPOINT_URL",
    "ClientSettings",
    "SettingsStore",
    "default_settings_path",
]

"""JSON file store for client settings.

Hides where and how settings are persisted. A missing or unreadable file
yields defaults instead of an error.
"""

import logging
import os
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from .models import DEFAULT_ENDPOINT_URL, ClientSettings

logger = logging.getLogger(__name__)


def default_settings_path() -> Path:
    """Settings file location.

    Environment variables:
        STREAMCHAT_SETTINGS_PATH: Explicit file path
            (default: ~/.config/streamchat/settings.json)
    """
    override = os.getenv("STREAMCHAT_SETTINGS_PATH")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "streamchat" / "settings.json"


class SettingsStore:
    """Loads and saves ClientSettings as JSON."""

    def __init__(self, path: str | Path | None = None):
        self._path = Path(path) if path is not None else default_settings_path()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ClientSettings:
        """Read settings, falling back to defaults when absent or invalid."""
        if not self._path.exists():
            return ClientSettings()
        try:
            return ClientSettings.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", self._path, e)
            return ClientSettings()

    def save(self, settings: ClientSettings) -> ClientSettings:
        """Persist settings, stamping ``updated_at``."""
        stamped = settings.model_copy(update={"updated_at": datetime.now()})
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(stamped.model_dump_json(indent=2), encoding="utf-8")
        logger.info("Saved settings to %s", self._path)
        return stamped

    def get_endpoint_url(self) -> str:
        return self.load().endpoint_url

    def set_endpoint_url(self, url: str) -> ClientSettings:
        """Save a new endpoint URL. Blank input is rejected."""
        url = url.strip()
        if not url:
            raise ValueError("Endpoint URL must not be empty")
        return self.save(self.load().model_copy(update={"endpoint_url": url}))

    def reset(self) -> ClientSettings:
        """Restore and persist the default endpoint URL."""
        return self.save(self.load().model_copy(update={"endpoint_url": DEFAULT_ENDPOINT_URL}))

"""Factory functions for CLI.

Centralizes creation of the relay config, transport and settings store from
environment variables. Hides configuration details from command implementations.
"""

import os

import typer
from pydantic import ValidationError
from rich.console import Console

from ..client.http import DEFAULT_RELAY_URL, HttpChatTransport
from ..relay.config import RelayConfig
from ..settings.store import SettingsStore

# Default console for output
_console = Console()


def get_relay_config(
    host: str | None = None,
    port: int | None = None,
    console: Console | None = None,
) -> RelayConfig:
    """Create relay configuration from environment variables.

    Args:
        host: Overrides RELAY_HOST when given
        port: Overrides RELAY_PORT when given
        console: Optional Rich console for output

    Raises:
        SystemExit: If the environment holds invalid values

    Environment variables:
        PROVIDER_API_KEY: Provider API key (a warning is printed when unset)
        PROVIDER_BASE_URL, PROVIDER_NAME, RELAY_TIMEOUT, RELAY_HOST, RELAY_PORT
    """
    con = console or _console
    try:
        config = RelayConfig.from_env()
        overrides = {k: v for k, v in (("host", host), ("port", port)) if v is not None}
        if overrides:
            config = RelayConfig(**{**config.model_dump(), **overrides})
    except (ValidationError, ValueError) as e:
        con.print(f"[red]Error: invalid relay configuration: {e}[/red]")
        raise typer.Exit(code=1)

    if not config.provider_api_key:
        con.print("[yellow]Warning: PROVIDER_API_KEY not set, provider calls will be unauthenticated[/yellow]")
    return config


def get_relay_url(relay_url: str | None = None) -> str:
    """Resolve the relay base URL.

    Environment variables:
        STREAMCHAT_RELAY_URL: Relay base URL (default: http://127.0.0.1:8000)
    """
    return relay_url or os.getenv("STREAMCHAT_RELAY_URL", DEFAULT_RELAY_URL)


def get_transport(relay_url: str | None = None, timeout: float | None = None) -> HttpChatTransport:
    """Create the HTTP transport pointed at the relay."""
    kwargs = {}
    if timeout is not None:
        kwargs["read_timeout"] = timeout
    return HttpChatTransport(get_relay_url(relay_url), **kwargs)


def get_settings_store() -> SettingsStore:
    """Create the client settings store.

    Environment variables:
        STREAMCHAT_SETTINGS_PATH: Settings file (default: ~/.config/streamchat/settings.json)
    """
    return SettingsStore()

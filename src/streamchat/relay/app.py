"""Relay application factory and server entry point."""

import logging

from hypercorn.asyncio import serve as hypercorn_serve
from hypercorn.config import Config as HypercornConfig
from quart import Quart

from .config import RelayConfig
from .routes import ProviderFactory, chat_bp

logger = logging.getLogger(__name__)


def create_app(
    config: RelayConfig | None = None,
    provider_factory: ProviderFactory | None = None,
) -> Quart:
    """Create the relay app.

    Args:
        config: Relay settings (read from the environment if omitted)
        provider_factory: Builds the provider per request; tests inject fakes

    Returns:
        Configured Quart application
    """
    app = Quart(__name__)
    app.config["RELAY_CONFIG"] = config or RelayConfig.from_env()
    # Streams are bounded by the relay's own timeout instead
    app.config["RESPONSE_TIMEOUT"] = None
    if provider_factory is not None:
        app.config["PROVIDER_FACTORY"] = provider_factory
    app.register_blueprint(chat_bp)
    return app


async def serve(config: RelayConfig, debug: bool = False) -> None:
    """Run the relay with Hypercorn until cancelled."""
    app = create_app(config)

    hypercorn_config = HypercornConfig()
    hypercorn_config.bind = [f"{config.host}:{config.port}"]
    # Keep-alive must outlast the longest stream
    hypercorn_config.keep_alive_timeout = config.timeout + 5
    hypercorn_config.graceful_timeout = 5
    if debug:
        hypercorn_config.loglevel = "DEBUG"
        hypercorn_config.accesslog = "-"
        hypercorn_config.errorlog = "-"

    logger.info("Relay listening on %s:%s (provider %s)",
                config.host, config.port, config.provider_base_url)
    await hypercorn_serve(app, hypercorn_config)

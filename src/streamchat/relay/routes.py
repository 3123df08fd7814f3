"""Chat relay routes."""

import logging
from collections.abc import Callable
from typing import Any

from quart import Blueprint, Response, current_app, jsonify, request

from ..llm import LLMProvider, create_llm_provider
from ..stream.protocol import STREAM_HEADERS
from .config import RelayConfig
from .conversion import filter_messages, to_provider_messages
from .streaming import stream_ui_messages

logger = logging.getLogger(__name__)

chat_bp = Blueprint("chat", __name__)

ProviderFactory = Callable[[RelayConfig, str | None], LLMProvider]


def default_provider_factory(config: RelayConfig, endpoint_url: str | None) -> LLMProvider:
    """Build the provider for one request, honouring an endpoint override."""
    return create_llm_provider(
        "openai-compatible",
        api_key=config.provider_api_key,
        base_url=endpoint_url or config.provider_base_url,
        model=config.default_model,
        name=config.provider_name,
    )


def get_relay_config() -> RelayConfig:
    return current_app.config["RELAY_CONFIG"]


def get_provider_factory() -> ProviderFactory:
    return current_app.config.get("PROVIDER_FACTORY", default_provider_factory)


def error_response(details: str, status: int = 400) -> tuple[Response, int]:
    return jsonify({"error": "Failed to process request", "details": details}), status


@chat_bp.route("/api/chat", methods=["POST"])
async def chat() -> Any:
    """Relay a chat request to the provider and stream the reply."""
    config = get_relay_config()
    try:
        body = await request.get_json(force=True)
        if not isinstance(body, dict):
            raise ValueError("Request body must be a JSON object")

        messages = to_provider_messages(filter_messages(body.get("messages", [])))
        model = str(body.get("model") or config.default_model)
        system = body.get("system")
        provider_options = body.get("providerOptions")
        if provider_options is not None and not isinstance(provider_options, dict):
            raise ValueError("providerOptions must be an object")
        endpoint_url = body.get("endpointUrl") or None

        provider = get_provider_factory()(config, endpoint_url)
    except Exception as e:
        logger.error("POST /api/chat error: %s", e)
        return error_response(str(e))

    logger.info("Relaying %d message(s) to model %s", len(messages), model)
    return Response(
        stream_ui_messages(
            provider,
            messages,
            model=model,
            system=system if isinstance(system, str) else None,
            provider_options=provider_options,
            timeout=config.timeout,
        ),
        mimetype="text/event-stream",
        headers=STREAM_HEADERS,
    )


@chat_bp.route("/health", methods=["GET"])
async def health() -> Any:
    return jsonify({"status": "ok"})

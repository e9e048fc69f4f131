"""Thin OpenAI-compatible LLM client.

Wraps the openai Python SDK with a configurable base_url so it works
against any OpenAI-compatible endpoint (OpenAI, an AI gateway, vLLM, ...).

The SDK's built-in retries are disabled: a decision makes exactly one
completion call, and upstream failures are translated into the typed
errors from ``fairlend.core.errors`` so callers can tell rate limiting and
exhausted credit apart from everything else.
"""

import logging
from typing import Any

import openai
from openai import AsyncOpenAI

from ..core.errors import UpstreamGenericFailure, UpstreamPaymentRequired, UpstreamRateLimited
from .config import DECISION_TIER, get_model_config

logger = logging.getLogger(__name__)

# Per-tier client cache (avoids re-creating HTTP connections)
_clients: dict[str, AsyncOpenAI] = {}


def _get_client(tier: str) -> AsyncOpenAI:
    """Return a cached AsyncOpenAI client for the given model tier."""
    if tier not in _clients:
        model_cfg = get_model_config(tier)
        _clients[tier] = AsyncOpenAI(
            base_url=model_cfg["endpoint"],
            api_key=model_cfg["api_key"],
            timeout=float(model_cfg.get("timeout_seconds", 60)),
            max_retries=0,
        )
    return _clients[tier]


def clear_client_cache() -> None:
    """Clear cached clients (useful after config reload)."""
    _clients.clear()


def _classify_status_error(exc: openai.APIStatusError) -> Exception:
    """Map an upstream HTTP error onto the error kind the caller reacts to."""
    code = exc.status_code
    if code == 429:
        return UpstreamRateLimited(
            "Rate limit exceeded. Please try again later.", upstream_status=code
        )
    if code == 402:
        return UpstreamPaymentRequired(
            "Payment required. Please add credits to the AI workspace.", upstream_status=code
        )
    return UpstreamGenericFailure(f"AI gateway error (status {code})", upstream_status=code)


async def get_completion(
    messages: list[dict[str, str]],
    tier: str = DECISION_TIER,
    **kwargs: Any,
) -> str:
    """Get a non-streaming completion from the specified model tier.

    Raises:
        ConfigurationError: the tier has no endpoint, model or API key.
        UpstreamRateLimited: the endpoint answered 429.
        UpstreamPaymentRequired: the endpoint answered 402.
        UpstreamGenericFailure: any other HTTP error, timeout or connection failure.
    """
    model_cfg = get_model_config(tier)
    client = _get_client(tier)

    try:
        response = await client.chat.completions.create(
            model=model_cfg["model_name"],
            messages=messages,
            **kwargs,
        )
    except openai.APIStatusError as exc:
        logger.error("AI gateway error: status=%s body=%s", exc.status_code, exc.body)
        raise _classify_status_error(exc) from exc
    except openai.APIError as exc:
        logger.error("AI gateway request failed: %s", exc)
        raise UpstreamGenericFailure(f"AI gateway request failed: {exc}") from exc

    if not response.choices:
        raise UpstreamGenericFailure("AI gateway returned no choices")
    return response.choices[0].message.content or ""

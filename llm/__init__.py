"""LLM requesters producing analysis results."""

import logging
from typing import Any, Dict

from .base import AnalysisRequester
from .gemini import GeminiRequester
from .ollama import OllamaRequester

logger = logging.getLogger(__name__)


def get_requester(config: Dict[str, Any]) -> AnalysisRequester:
    """
    Factory function to get the configured analysis requester.

    Args:
        config: Configuration dictionary from config.json

    Returns:
        Requester instance (GeminiRequester or OllamaRequester)

    Raises:
        ValueError: If the provider is not supported

    Example:
        >>> config = {"llm_settings": {"provider": "ollama", "model": "qwen3:8b"}}
        >>> requester = get_requester(config)
        >>> print(requester.get_provider_name())
        "ollama"
    """
    llm_config = config.get("llm_settings", {})
    provider = llm_config.get("provider", "gemini").lower()

    common = {
        "timeout": llm_config.get("timeout", AnalysisRequester.DEFAULT_TIMEOUT),
        "detailed_visits": llm_config.get("detailed_visits", False),
        "diagnostic_logging": llm_config.get("diagnostics_enabled", False),
    }

    if provider == "gemini":
        logger.info("Initializing Gemini requester")
        return GeminiRequester(
            model=llm_config.get("model", GeminiRequester.DEFAULT_MODEL),
            base_url=llm_config.get("base_url", GeminiRequester.DEFAULT_BASE_URL),
            thinking_budget=llm_config.get(
                "thinking_budget", GeminiRequester.DEFAULT_THINKING_BUDGET
            ),
            temperature=llm_config.get("temperature"),
            **common,
        )

    elif provider == "ollama":
        logger.info("Initializing Ollama requester")
        return OllamaRequester(
            model=llm_config.get("model", OllamaRequester.DEFAULT_MODEL),
            base_url=llm_config.get("base_url", OllamaRequester.DEFAULT_BASE_URL),
            temperature=llm_config.get("temperature", 0.2),
            **common,
        )

    else:
        raise ValueError(
            f"Unsupported LLM provider: {provider}. "
            f"Supported providers: 'gemini', 'ollama'"
        )


__all__ = [
    "get_requester",
    "AnalysisRequester",
    "GeminiRequester",
    "OllamaRequester",
]

"""
infrastructure.llm.llm_builder - Tool-calling chat model construction.

Every agent talks to the same chat model; which one is decided by
LLM_PROVIDER. Provider packages are imported lazily so only the selected
one has to be installed (anthropic ships by default, the others are extras).

    anthropic → langchain_anthropic.ChatAnthropic
    openai    → langchain_openai.ChatOpenAI
    groq      → langchain_groq.ChatGroq
    ollama    → langchain_ollama.ChatOllama
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from langchain_core.language_models import BaseChatModel

from cosmo_agents.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Groq rejects requests without an explicit output limit on some models.
GROQ_DEFAULT_MAX_TOKENS = 1024


def _anthropic(common: Dict[str, Any], api_key: str, **_: Any) -> BaseChatModel:
    from langchain_anthropic import ChatAnthropic

    return ChatAnthropic(api_key=api_key, **common)


def _openai(common: Dict[str, Any], api_key: str, **_: Any) -> BaseChatModel:
    from langchain_openai import ChatOpenAI

    return ChatOpenAI(api_key=api_key, **common)


def _groq(common: Dict[str, Any], api_key: str, **_: Any) -> BaseChatModel:
    from langchain_groq import ChatGroq

    common.setdefault("max_tokens", GROQ_DEFAULT_MAX_TOKENS)
    common.pop("timeout", None)
    return ChatGroq(api_key=api_key, **common)


def _ollama(common: Dict[str, Any], base_url: str, **_: Any) -> BaseChatModel:
    from langchain_ollama import ChatOllama

    # ChatOllama names the output limit num_predict.
    max_tokens = common.pop("max_tokens", None)
    common.pop("timeout", None)
    if max_tokens is not None:
        common["num_predict"] = max_tokens
    return ChatOllama(base_url=base_url, **common)


# provider -> (builder, env var holding its key, or None when keyless)
_BUILDERS: Dict[str, tuple[Callable[..., BaseChatModel], Optional[str]]] = {
    "anthropic": (_anthropic, "ANTHROPIC_API_KEY"),
    "openai": (_openai, "OPENAI_API_KEY"),
    "groq": (_groq, "GROQ_API_KEY"),
    "ollama": (_ollama, None),
}

SUPPORTED_PROVIDERS = tuple(_BUILDERS)


def build_llm(
    *,
    provider: str,
    model: str,
    temperature: float = 0,
    max_tokens: Optional[int] = 4096,
    timeout: Optional[float] = None,
    anthropic_api_key: str = "",
    openai_api_key: str = "",
    groq_api_key: str = "",
    ollama_base_url: str = "http://localhost:11434/",
) -> BaseChatModel:
    """Build the chat model the agents bind their tools to.

    Args:
        provider:   One of SUPPORTED_PROVIDERS (case-insensitive).
        model:      Model name understood by that provider.
        max_tokens: Output limit per call; None leaves the provider default.
        timeout:    Client-side request timeout, where the provider has one.

    Raises:
        ConfigurationError: Unknown provider, or its API key is missing.
    """
    name = provider.lower().strip()
    if name not in _BUILDERS:
        raise ConfigurationError(
            f"Unsupported LLM_PROVIDER: '{provider}'. "
            f"Must be one of: {', '.join(SUPPORTED_PROVIDERS)}."
        )
    builder, key_var = _BUILDERS[name]

    api_key = {
        "anthropic": anthropic_api_key,
        "openai": openai_api_key,
        "groq": groq_api_key,
    }.get(name, "")
    if key_var and not api_key:
        raise ConfigurationError(f"{key_var} is required when LLM_PROVIDER='{name}'")

    common: Dict[str, Any] = {"model": model, "temperature": temperature}
    if max_tokens is not None:
        common["max_tokens"] = max_tokens
    if timeout is not None:
        common["timeout"] = timeout

    logger.info("Building %s chat model (model=%s)", name, model)
    return builder(common, api_key=api_key, base_url=ollama_base_url)

"""
LLM Provider Abstraction Layer

Unified chat-completion interface for the providers that can generate
study sources:
    - OpenAI: default source generator (openai SDK)
    - Anthropic (Claude): alternative generator (raw HTTP)

Usage:
    from orayata.services.llm_service import get_best_available_client

    llm = get_best_available_client()
    if llm:
        text = llm.chat_completion(
            messages=[
                {"role": "system", "content": "You are a Torah study expert."},
                {"role": "user", "content": "Suggest a source on Shabbat."},
            ],
            temperature=0.7,
        )

Providers raise RuntimeError on any failure; callers treat that as
"generator unavailable".
"""

import os
import requests
from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional

from dotenv import load_dotenv

load_dotenv()


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    def chat_completion(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        **kwargs: Any,
    ) -> str:
        """
        Send a chat completion request and return the assistant's response text.

        Args:
            messages: List of message dicts with 'role' and 'content' keys.
            model: Model identifier (provider-specific). Uses default if None.
            **kwargs: temperature, max_tokens, timeout

        Returns:
            The assistant's response content as a string.
        """
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """Return True if this provider is properly configured."""
        pass


class OpenAIProvider(LLMProvider):
    """OpenAI API provider implementation."""

    DEFAULT_TIMEOUT = 60  # seconds

    def __init__(self, api_key: Optional[str] = None):
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")
        self._client = None

    def _get_client(self):
        if self._client is None:
            from openai import OpenAI
            self._client = OpenAI(api_key=self._api_key)
        return self._client

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def chat_completion(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        **kwargs: Any,
    ) -> str:
        if not self.is_configured():
            raise RuntimeError("OpenAI API key not configured (OPENAI_API_KEY)")

        from openai import OpenAIError

        params = {
            key: kwargs[key]
            for key in ("temperature", "max_tokens")
            if key in kwargs
        }

        try:
            completion = self._get_client().chat.completions.create(
                model=model or get_model_name(),
                messages=messages,
                timeout=kwargs.get("timeout", self.DEFAULT_TIMEOUT),
                **params,
            )
        except OpenAIError as e:
            raise RuntimeError(f"OpenAI request failed: {e}")

        if not completion.choices:
            raise RuntimeError("OpenAI returned no choices in response")

        return completion.choices[0].message.content or ""


class AnthropicProvider(LLMProvider):
    """
    Anthropic (Claude) API provider implementation.

    Note: Anthropic API has a different format than OpenAI:
    - System prompt goes in top-level "system" parameter, not in messages
    - Response content is a list of blocks, not a string
    """

    ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
    ANTHROPIC_VERSION = "2023-06-01"
    DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
    DEFAULT_TIMEOUT = 60  # seconds
    DEFAULT_MAX_TOKENS = 2000

    def __init__(self, api_key: Optional[str] = None):
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY")

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def chat_completion(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        **kwargs: Any,
    ) -> str:
        if not self.is_configured():
            raise RuntimeError("Anthropic API key not configured (ANTHROPIC_API_KEY)")

        system_parts = [m.get("content", "") for m in messages if m.get("role") == "system"]
        chat_messages = [
            {"role": m["role"], "content": m.get("content", "")}
            for m in messages
            if m.get("role") in ("user", "assistant")
        ]

        payload = {
            "model": model or os.getenv("ANTHROPIC_MODEL", self.DEFAULT_MODEL),
            "messages": chat_messages,
            "max_tokens": kwargs.get("max_tokens", self.DEFAULT_MAX_TOKENS),
        }
        if system_parts:
            payload["system"] = "\n\n".join(system_parts)
        if "temperature" in kwargs:
            payload["temperature"] = kwargs["temperature"]

        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": self.ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }

        timeout = kwargs.get("timeout", self.DEFAULT_TIMEOUT)

        try:
            response = requests.post(
                self.ANTHROPIC_API_URL,
                json=payload,
                headers=headers,
                timeout=timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.Timeout:
            raise RuntimeError(f"Anthropic request timed out after {timeout}s")
        except requests.HTTPError as e:
            try:
                error_msg = e.response.json().get("error", {}).get("message", str(e))
            except ValueError:
                error_msg = str(e)
            raise RuntimeError(f"Anthropic API error: {error_msg}")
        except requests.RequestException as e:
            raise RuntimeError(f"Anthropic request failed: {e}")

        # Content is a LIST of blocks
        text_parts = [
            block.get("text", "")
            for block in data.get("content", [])
            if block.get("type") == "text"
        ]
        if not text_parts:
            raise RuntimeError("Anthropic returned no text content in response")

        return "".join(text_parts)


# ---------------------------------------------------------------------------
# Provider access
# ---------------------------------------------------------------------------

_openai_instance: Optional[OpenAIProvider] = None
_anthropic_instance: Optional[AnthropicProvider] = None


def get_llm_client() -> Optional[OpenAIProvider]:
    """
    Get the OpenAI provider instance.

    Returns OpenAIProvider if configured, None otherwise.
    """
    global _openai_instance

    if _openai_instance is None:
        provider = OpenAIProvider()
        if provider.is_configured():
            _openai_instance = provider

    return _openai_instance


def get_anthropic_client() -> Optional[AnthropicProvider]:
    """
    Get the Anthropic (Claude) provider instance.

    Returns AnthropicProvider if configured, None otherwise.
    """
    global _anthropic_instance

    if _anthropic_instance is None:
        provider = AnthropicProvider()
        if provider.is_configured():
            _anthropic_instance = provider

    return _anthropic_instance


def get_model_name() -> str:
    """Get the configured OpenAI model name."""
    return os.getenv("OPENAI_MODEL", "gpt-4.1-mini")


def get_best_available_client() -> Optional[LLMProvider]:
    """
    Get the best available LLM client.

    Honors SOURCE_GENERATOR_PROVIDER ("openai" or "anthropic") when set,
    otherwise prefers OpenAI and falls back to Anthropic.

    Returns:
        The best available provider, or None if none configured.
    """
    preferred = os.getenv("SOURCE_GENERATOR_PROVIDER", "").lower()
    if preferred == "anthropic":
        return get_anthropic_client() or get_llm_client()
    return get_llm_client() or get_anthropic_client()

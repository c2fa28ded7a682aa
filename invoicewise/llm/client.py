"""
Multi-provider LLM client for line item suggestions.

Supports:
- Ollama (local)
- LM Studio (local)
- Deepseek (cloud)

Each request goes to exactly one provider. There is no retry or fallback:
a failed call is reported to the caller as-is.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import requests

from invoicewise.config import (
    AppConfig,
    DeepseekConfig,
    LLMProvider,
    LMStudioConfig,
    OllamaConfig,
    get_config,
)
from invoicewise.llm.prompts import get_suggestion_prompt

logger = logging.getLogger(__name__)


class LLMClientError(Exception):
    """Base exception for LLM client errors."""
    pass


class LLMConnectionError(LLMClientError):
    """Error connecting to LLM service."""
    pass


class LLMResponseError(LLMClientError):
    """Error in LLM response."""
    pass


def _chat_content(response: requests.Response, provider_name: str) -> str:
    """Pull the message text out of an OpenAI-style chat completion."""
    try:
        result = response.json()
        return result["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise LLMResponseError(f"{provider_name} returned an unexpected response body: {e}") from e


class BaseLLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Send a prompt and return the raw reply text."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the LLM service is available."""
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """Get the provider name."""
        pass


class OllamaClient(BaseLLMClient):
    """Client for Ollama local LLM."""

    def __init__(self, config: Optional[OllamaConfig] = None):
        """Initialize Ollama client."""
        self.config = config or get_config().ollama
        self.base_url = self.config.base_url.rstrip("/")

    def get_provider_name(self) -> str:
        return "Ollama"

    def is_available(self) -> bool:
        """Check if Ollama is running and model is available."""
        try:
            response = requests.get(
                f"{self.base_url}/api/tags",
                timeout=5,
            )
            if response.status_code == 200:
                models = response.json().get("models", [])
                model_names = [m.get("name", "") for m in models]
                # Check if our configured model is available
                return any(
                    self.config.model in name or name in self.config.model
                    for name in model_names
                )
            return False
        except Exception as e:
            logger.debug(f"Ollama not available: {e}")
            return False

    def generate(self, prompt: str) -> str:
        """Generate a reply using Ollama."""
        try:
            response = requests.post(
                f"{self.base_url}/api/generate",
                json={
                    "model": self.config.model,
                    "prompt": prompt,
                    "stream": False,
                    "format": "json",
                    "options": {
                        "temperature": self.config.temperature,
                    },
                },
                timeout=self.config.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            raise LLMConnectionError(f"Failed to connect to Ollama: {e}") from e
        except requests.exceptions.Timeout as e:
            raise LLMConnectionError("Ollama request timed out") from e

        if response.status_code != 200:
            raise LLMResponseError(f"Ollama returned status {response.status_code}: {response.text}")

        try:
            result = response.json()
        except ValueError as e:
            raise LLMResponseError(f"Ollama returned invalid JSON: {e}") from e
        return result.get("response", "")


class LMStudioClient(BaseLLMClient):
    """Client for LM Studio local server."""

    def __init__(self, config: Optional[LMStudioConfig] = None):
        """Initialize LM Studio client."""
        self.config = config or get_config().lm_studio
        self.base_url = self.config.base_url.rstrip("/")

    def get_provider_name(self) -> str:
        return "LM Studio"

    def is_available(self) -> bool:
        """Check if LM Studio server is running."""
        try:
            response = requests.get(
                f"{self.base_url}/models",
                timeout=5,
            )
            return response.status_code == 200
        except Exception as e:
            logger.debug(f"LM Studio not available: {e}")
            return False

    def generate(self, prompt: str) -> str:
        """Generate a reply using LM Studio."""
        try:
            response = requests.post(
                f"{self.base_url}/chat/completions",
                json={
                    "model": self.config.model or "local-model",
                    "messages": [
                        {"role": "user", "content": prompt}
                    ],
                    "temperature": self.config.temperature,
                    "max_tokens": self.config.max_tokens,
                },
                timeout=self.config.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            raise LLMConnectionError(f"Failed to connect to LM Studio: {e}") from e
        except requests.exceptions.Timeout as e:
            raise LLMConnectionError("LM Studio request timed out") from e

        if response.status_code != 200:
            raise LLMResponseError(f"LM Studio returned status {response.status_code}: {response.text}")

        return _chat_content(response, "LM Studio")


class DeepseekClient(BaseLLMClient):
    """Client for Deepseek cloud API."""

    def __init__(self, config: Optional[DeepseekConfig] = None):
        """Initialize Deepseek client."""
        self.config = config or get_config().deepseek
        self.base_url = self.config.base_url.rstrip("/")

    def get_provider_name(self) -> str:
        return "Deepseek"

    def is_available(self) -> bool:
        """Check if Deepseek API key is configured."""
        return bool(self.config.api_key)

    def _get_headers(self) -> dict:
        """Get request headers with authentication."""
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def generate(self, prompt: str) -> str:
        """Generate a reply using Deepseek."""
        if not self.config.api_key:
            raise LLMClientError("Deepseek API key not set")

        try:
            response = requests.post(
                f"{self.base_url}/chat/completions",
                headers=self._get_headers(),
                json={
                    "model": self.config.model,
                    "messages": [
                        {"role": "user", "content": prompt}
                    ],
                    "temperature": self.config.temperature,
                    "max_tokens": self.config.max_tokens,
                    "response_format": {"type": "json_object"},
                },
                timeout=self.config.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            raise LLMConnectionError(f"Failed to connect to Deepseek: {e}") from e
        except requests.exceptions.Timeout as e:
            raise LLMConnectionError("Deepseek request timed out") from e

        if response.status_code == 401:
            raise LLMClientError("Invalid Deepseek API key")
        elif response.status_code == 429:
            raise LLMConnectionError("Deepseek rate limit exceeded")
        elif response.status_code != 200:
            raise LLMResponseError(f"Deepseek returned status {response.status_code}: {response.text}")

        return _chat_content(response, "Deepseek")


class LLMClient:
    """
    Unified LLM client bound to a single provider.

    The provider is either passed explicitly or taken from the
    configured default.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        preferred_provider: Optional[LLMProvider] = None,
    ):
        """
        Initialize the unified LLM client.

        Args:
            config: Application configuration
            preferred_provider: Provider to send requests to
        """
        self.config = config or get_config()
        self.preferred_provider = preferred_provider or self.config.default_llm_provider

        # Initialize clients
        self.clients: dict[LLMProvider, BaseLLMClient] = {
            LLMProvider.OLLAMA: OllamaClient(self.config.ollama),
            LLMProvider.LM_STUDIO: LMStudioClient(self.config.lm_studio),
            LLMProvider.DEEPSEEK: DeepseekClient(self.config.deepseek),
        }

        self._last_used_provider: Optional[LLMProvider] = None

    def get_available_providers(self) -> list[LLMProvider]:
        """Get list of currently available providers."""
        available = []
        for provider, client in self.clients.items():
            if client.is_available():
                available.append(provider)
        return available

    @property
    def last_used_provider(self) -> Optional[LLMProvider]:
        """Get the last provider that was successfully used."""
        return self._last_used_provider

    def suggest_items(
        self,
        keywords: str,
        provider: Optional[LLMProvider] = None,
    ) -> tuple[str, LLMProvider]:
        """
        Ask the model for line item suggestions.

        Args:
            keywords: Keywords describing the product or service
            provider: Specific provider to use (optional)

        Returns:
            Tuple of (raw reply text, provider used)

        Raises:
            LLMClientError: If the provider call fails
        """
        prov = provider or self.preferred_provider
        client = self.clients[prov]
        prompt = get_suggestion_prompt(keywords)

        logger.info(f"Requesting suggestions from {prov.value}")
        result = client.generate(prompt)
        self._last_used_provider = prov
        return result, prov


def create_client(
    provider: Optional[LLMProvider] = None,
    config: Optional[AppConfig] = None,
) -> LLMClient:
    """
    Create an LLM client.

    Args:
        provider: Preferred provider
        config: Application configuration

    Returns:
        Configured LLMClient instance
    """
    return LLMClient(config=config, preferred_provider=provider)

"""
Configuration module for InvoiceWise.

Handles settings for LLM providers, API keys, invoice defaults,
and application-wide settings with validation.
"""

import copy
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import requests
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class LLMProvider(Enum):
    """Supported LLM providers for line item suggestions."""
    OLLAMA = "ollama"
    LM_STUDIO = "lm_studio"
    DEEPSEEK = "deepseek"


@dataclass
class OllamaConfig:
    """Configuration for Ollama local LLM."""
    base_url: str = field(default_factory=lambda: os.getenv("OLLAMA_BASE_URL", "http://localhost:11434"))
    model: str = field(default_factory=lambda: os.getenv("OLLAMA_MODEL", "llama3.2"))
    temperature: float = 0.7  # Some variety between the three suggestions
    timeout: int = 60  # Seconds

    @staticmethod
    def validate_connection(base_url: str = "http://localhost:11434") -> tuple[bool, str]:
        """Validate Ollama is running and accessible."""
        try:
            response = requests.get(f"{base_url}/api/tags", timeout=5)
            if response.status_code == 200:
                models = response.json().get("models", [])
                model_names = [m.get("name", "unknown") for m in models]
                return True, f"Ollama connected. Available models: {', '.join(model_names[:5])}"
            return False, f"Ollama returned status {response.status_code}"
        except requests.exceptions.ConnectionError:
            return False, (
                "Cannot connect to Ollama. Ensure Ollama is running:\n"
                "• Start Ollama: ollama serve\n"
                "• Pull a model: ollama pull llama3.2"
            )
        except Exception as e:
            return False, f"Error connecting to Ollama: {str(e)}"


@dataclass
class LMStudioConfig:
    """Configuration for LM Studio (OpenAI-compatible API)."""
    base_url: str = field(default_factory=lambda: os.getenv("LM_STUDIO_BASE_URL", "http://localhost:1234/v1"))
    model: str = field(default_factory=lambda: os.getenv("LM_STUDIO_MODEL", ""))
    api_key: str = "not-needed"  # LM Studio doesn't require API key
    temperature: float = 0.7
    timeout: int = 60
    max_tokens: int = 1024

    @staticmethod
    def validate_connection(base_url: str = "http://localhost:1234/v1") -> tuple[bool, str, list]:
        """Validate LM Studio is running and accessible.

        Returns:
            Tuple of (is_valid, message, loaded_models)
        """
        try:
            response = requests.get(f"{base_url}/models", timeout=5)
            if response.status_code == 200:
                data = response.json()
                models = [m.get("id", "unknown") for m in data.get("data", [])]
                model_str = ", ".join(models) if models else "no models listed"
                return True, f"LM Studio connected. Loaded models: {model_str}", models
            return False, f"LM Studio returned status {response.status_code}", []
        except requests.exceptions.ConnectionError:
            return False, (
                "Cannot connect to LM Studio. Ensure LM Studio is running:\n"
                "• Open LM Studio application\n"
                "• Load a model\n"
                "• Start the local server (Developer tab)"
            ), []
        except Exception as e:
            return False, f"Error connecting to LM Studio: {str(e)}", []


@dataclass
class DeepseekConfig:
    """Configuration for Deepseek cloud API."""
    base_url: str = "https://api.deepseek.com/v1"
    model: str = field(default_factory=lambda: os.getenv("DEEPSEEK_MODEL", "deepseek-chat"))
    api_key: str = field(default_factory=lambda: os.getenv("DEEPSEEK_API_KEY", ""))
    temperature: float = 0.7
    timeout: int = 60
    max_tokens: int = 1024

    def validate_api_key(self) -> tuple[bool, str]:
        """Validate Deepseek API key is set."""
        if not self.api_key:
            return False, (
                "Deepseek API key not set.\n"
                "Set it via environment variable: DEEPSEEK_API_KEY=your_key\n"
                "Or enter it in the settings panel."
            )
        if len(self.api_key) < 20:
            return False, "Deepseek API key appears to be invalid (too short)"
        return True, "Deepseek API key is configured"


@dataclass
class InvoiceDefaults:
    """Values a fresh invoice draft starts with."""
    from_address: str = "Your Company\n123 Main St\nAnytown, USA 12345"
    to_address: str = "Client Company\n456 Oak Ave\nOtherville, USA 54321"
    invoice_number: str = "001"
    payment_terms_days: int = 30
    notes: str = "Thank you for your business!"
    tax_rate: float = 8.0  # Percent
    sample_items: list[tuple[float, str, float]] = field(default_factory=lambda: [
        (1, "Web Design Services", 1500.0),
        (10, "Hosting (12 months)", 25.0),
    ])


def _provider_from_env() -> LLMProvider:
    value = os.getenv("INVOICEWISE_LLM_PROVIDER", LLMProvider.OLLAMA.value)
    try:
        return LLMProvider(value.strip().lower())
    except ValueError:
        return LLMProvider.OLLAMA


@dataclass
class AppConfig:
    """Main application configuration."""
    # LLM Settings
    default_llm_provider: LLMProvider = field(default_factory=_provider_from_env)

    # Provider-specific configs
    ollama: OllamaConfig = field(default_factory=OllamaConfig)
    lm_studio: LMStudioConfig = field(default_factory=LMStudioConfig)
    deepseek: DeepseekConfig = field(default_factory=DeepseekConfig)

    # Invoice form
    invoice: InvoiceDefaults = field(default_factory=InvoiceDefaults)

    # Suggestion settings
    max_suggestions: int = 3
    max_logo_size_px: int = 320
    max_logo_file_size_mb: int = 5


def validate_system_requirements(config: Optional["AppConfig"] = None) -> dict:
    """
    Check which suggestion providers can be reached.

    Returns:
        Dictionary with validation results for each provider.
    """
    config = config or get_config()
    results = {}

    ollama_available, ollama_message = OllamaConfig.validate_connection(config.ollama.base_url)
    ollama_models = []
    if ollama_available:
        try:
            response = requests.get(f"{config.ollama.base_url}/api/tags", timeout=5)
            ollama_models = [m.get("name", "") for m in response.json().get("models", [])]
        except (requests.exceptions.RequestException, ValueError):
            pass

    results["ollama"] = {
        "available": ollama_available,
        "message": ollama_message,
        "models": ollama_models,
    }

    lm_studio_available, lm_studio_message, lm_studio_models = LMStudioConfig.validate_connection(
        config.lm_studio.base_url
    )
    results["lm_studio"] = {
        "available": lm_studio_available,
        "message": lm_studio_message,
        "models": lm_studio_models,
    }

    deepseek_configured, deepseek_message = config.deepseek.validate_api_key()
    results["deepseek"] = {
        "configured": deepseek_configured,
        "message": deepseek_message,
    }

    return results


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config


def session_config() -> AppConfig:
    """Private copy of the global configuration for one UI session."""
    return copy.deepcopy(get_config())


def update_config(**kwargs) -> AppConfig:
    """Update configuration with new values."""
    global _config
    config = get_config()
    for key, value in kwargs.items():
        if hasattr(config, key):
            setattr(config, key, value)
    return config


def reset_config() -> None:
    """Drop the global configuration so the next get_config() re-reads the environment."""
    global _config
    _config = None

"""Shared fixtures for InvoiceWise tests."""

import json
from datetime import date
from unittest.mock import MagicMock

import pytest

from invoicewise.config import (
    AppConfig,
    DeepseekConfig,
    LLMProvider,
    LMStudioConfig,
    OllamaConfig,
)
from invoicewise.models.invoice import Invoice


@pytest.fixture
def config():
    """Configuration that never depends on the developer's .env."""
    return AppConfig(
        default_llm_provider=LLMProvider.OLLAMA,
        ollama=OllamaConfig(base_url="http://ollama.test:11434", model="llama3.2"),
        lm_studio=LMStudioConfig(base_url="http://lmstudio.test:1234/v1", model="qwen"),
        deepseek=DeepseekConfig(model="deepseek-chat", api_key="sk-test-0123456789abcdefghij"),
    )


@pytest.fixture
def suggestions_json():
    return json.dumps({
        "suggestions": [
            {"description": "Logo design - 3 concepts", "amount": 450},
            {"description": "Brand identity package", "amount": 1200.5},
            {"description": "Logo refresh", "amount": 275.999},
        ]
    })


@pytest.fixture
def invoice():
    return Invoice.new(today=date(2026, 10, 18))


@pytest.fixture
def make_response():
    """Factory for stand-ins of requests.Response."""

    def _make(status_code=200, json_data=None, text=""):
        response = MagicMock()
        response.status_code = status_code
        response.text = text or (json.dumps(json_data) if json_data is not None else "")
        if json_data is None:
            response.json.side_effect = ValueError("No JSON object could be decoded")
        else:
            response.json.return_value = json_data
        return response

    return _make

"""Tests for the provider clients and the unified LLM client."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from invoicewise.config import LLMProvider
from invoicewise.llm.client import (
    DeepseekClient,
    LLMClient,
    LLMClientError,
    LLMConnectionError,
    LLMResponseError,
    LMStudioClient,
    OllamaClient,
    create_client,
)
from invoicewise.llm.prompts import get_suggestion_prompt


class TestPrompt:

    def test_keywords_substituted(self):
        prompt = get_suggestion_prompt("logo design")
        assert "Keywords: logo design" in prompt
        assert "three different descriptions and amounts" in prompt
        assert "2 decimal places" in prompt

    def test_braces_in_keywords_kept_verbatim(self):
        prompt = get_suggestion_prompt("{weird} keywords")
        assert "Keywords: {weird} keywords" in prompt

    def test_schema_rendered_with_single_braces(self):
        prompt = get_suggestion_prompt("x", include_few_shot=False)
        assert '{"description": "string", "amount": number}' in prompt
        assert "{{" not in prompt
        assert "Example:" not in prompt

    def test_few_shot_included_by_default(self):
        assert "Example:" in get_suggestion_prompt("x")


class TestOllamaClient:

    def test_generate_posts_prompt(self, config, make_response):
        client = OllamaClient(config.ollama)
        with patch("invoicewise.llm.client.requests.post") as mock_post:
            mock_post.return_value = make_response(json_data={"response": '{"suggestions": []}'})
            result = client.generate("hello")

        assert result == '{"suggestions": []}'
        url = mock_post.call_args.args[0]
        body = mock_post.call_args.kwargs["json"]
        assert url == "http://ollama.test:11434/api/generate"
        assert body["model"] == "llama3.2"
        assert body["prompt"] == "hello"
        assert body["stream"] is False
        assert body["format"] == "json"
        assert mock_post.call_args.kwargs["timeout"] == config.ollama.timeout

    def test_error_status(self, config, make_response):
        client = OllamaClient(config.ollama)
        with patch("invoicewise.llm.client.requests.post") as mock_post:
            mock_post.return_value = make_response(status_code=500, text="model not found")
            with pytest.raises(LLMResponseError, match="status 500"):
                client.generate("hello")

    def test_connection_error(self, config):
        client = OllamaClient(config.ollama)
        with patch("invoicewise.llm.client.requests.post") as mock_post:
            mock_post.side_effect = requests.exceptions.ConnectionError("refused")
            with pytest.raises(LLMConnectionError, match="Failed to connect to Ollama"):
                client.generate("hello")

    def test_timeout(self, config):
        client = OllamaClient(config.ollama)
        with patch("invoicewise.llm.client.requests.post") as mock_post:
            mock_post.side_effect = requests.exceptions.Timeout()
            with pytest.raises(LLMConnectionError, match="timed out"):
                client.generate("hello")

    def test_not_json_body(self, config, make_response):
        client = OllamaClient(config.ollama)
        with patch("invoicewise.llm.client.requests.post") as mock_post:
            mock_post.return_value = make_response(text="<html>")
            with pytest.raises(LLMResponseError):
                client.generate("hello")

    def test_is_available_matches_model(self, config, make_response):
        client = OllamaClient(config.ollama)
        with patch("invoicewise.llm.client.requests.get") as mock_get:
            mock_get.return_value = make_response(json_data={"models": [{"name": "llama3.2:latest"}]})
            assert client.is_available()

            mock_get.return_value = make_response(json_data={"models": [{"name": "mistral"}]})
            assert not client.is_available()

    def test_is_available_when_down(self, config):
        client = OllamaClient(config.ollama)
        with patch("invoicewise.llm.client.requests.get") as mock_get:
            mock_get.side_effect = requests.exceptions.ConnectionError()
            assert not client.is_available()


class TestLMStudioClient:

    def test_generate_reads_chat_content(self, config, make_response):
        client = LMStudioClient(config.lm_studio)
        payload = {"choices": [{"message": {"content": "reply"}}]}
        with patch("invoicewise.llm.client.requests.post") as mock_post:
            mock_post.return_value = make_response(json_data=payload)
            assert client.generate("hello") == "reply"

        assert mock_post.call_args.args[0] == "http://lmstudio.test:1234/v1/chat/completions"
        body = mock_post.call_args.kwargs["json"]
        assert body["messages"] == [{"role": "user", "content": "hello"}]
        assert body["model"] == "qwen"

    def test_empty_model_uses_placeholder(self, config, make_response):
        config.lm_studio.model = ""
        client = LMStudioClient(config.lm_studio)
        payload = {"choices": [{"message": {"content": "reply"}}]}
        with patch("invoicewise.llm.client.requests.post") as mock_post:
            mock_post.return_value = make_response(json_data=payload)
            client.generate("hello")
        assert mock_post.call_args.kwargs["json"]["model"] == "local-model"

    def test_malformed_envelope(self, config, make_response):
        client = LMStudioClient(config.lm_studio)
        with patch("invoicewise.llm.client.requests.post") as mock_post:
            mock_post.return_value = make_response(json_data={"choices": []})
            with pytest.raises(LLMResponseError, match="unexpected response body"):
                client.generate("hello")


class TestDeepseekClient:

    def test_sends_bearer_token(self, config, make_response):
        client = DeepseekClient(config.deepseek)
        payload = {"choices": [{"message": {"content": "reply"}}]}
        with patch("invoicewise.llm.client.requests.post") as mock_post:
            mock_post.return_value = make_response(json_data=payload)
            assert client.generate("hello") == "reply"

        headers = mock_post.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer sk-test-0123456789abcdefghij"
        assert mock_post.call_args.kwargs["json"]["response_format"] == {"type": "json_object"}

    def test_invalid_key(self, config, make_response):
        client = DeepseekClient(config.deepseek)
        with patch("invoicewise.llm.client.requests.post") as mock_post:
            mock_post.return_value = make_response(status_code=401, text="unauthorized")
            with pytest.raises(LLMClientError, match="Invalid Deepseek API key"):
                client.generate("hello")

    def test_rate_limited(self, config, make_response):
        client = DeepseekClient(config.deepseek)
        with patch("invoicewise.llm.client.requests.post") as mock_post:
            mock_post.return_value = make_response(status_code=429, text="slow down")
            with pytest.raises(LLMConnectionError, match="rate limit"):
                client.generate("hello")

    def test_missing_key_makes_no_request(self, config):
        config.deepseek.api_key = ""
        client = DeepseekClient(config.deepseek)
        assert not client.is_available()
        with patch("invoicewise.llm.client.requests.post") as mock_post:
            with pytest.raises(LLMClientError, match="API key not set"):
                client.generate("hello")
        mock_post.assert_not_called()


class TestLLMClient:

    def test_uses_configured_default_provider(self, config):
        client = LLMClient(config=config)
        assert client.preferred_provider == LLMProvider.OLLAMA

    def test_suggest_items_calls_single_provider(self, config):
        client = LLMClient(config=config, preferred_provider=LLMProvider.LM_STUDIO)
        for provider, sub_client in client.clients.items():
            client.clients[provider] = MagicMock(wraps=sub_client)
        client.clients[LLMProvider.LM_STUDIO].generate.return_value = "raw reply"

        raw, provider = client.suggest_items("logo design")

        assert raw == "raw reply"
        assert provider == LLMProvider.LM_STUDIO
        assert client.last_used_provider == LLMProvider.LM_STUDIO
        prompt = client.clients[LLMProvider.LM_STUDIO].generate.call_args.args[0]
        assert "Keywords: logo design" in prompt
        client.clients[LLMProvider.OLLAMA].generate.assert_not_called()
        client.clients[LLMProvider.DEEPSEEK].generate.assert_not_called()

    def test_explicit_provider_overrides_preference(self, config):
        client = LLMClient(config=config)
        client.clients[LLMProvider.DEEPSEEK] = MagicMock()
        client.clients[LLMProvider.DEEPSEEK].generate.return_value = "reply"

        _, provider = client.suggest_items("hosting", provider=LLMProvider.DEEPSEEK)
        assert provider == LLMProvider.DEEPSEEK

    def test_failure_is_not_retried_or_rerouted(self, config):
        client = LLMClient(config=config)
        for provider in list(client.clients):
            client.clients[provider] = MagicMock()
        client.clients[LLMProvider.OLLAMA].generate.side_effect = LLMConnectionError("down")

        with pytest.raises(LLMConnectionError):
            client.suggest_items("logo design")

        assert client.clients[LLMProvider.OLLAMA].generate.call_count == 1
        client.clients[LLMProvider.LM_STUDIO].generate.assert_not_called()
        client.clients[LLMProvider.DEEPSEEK].generate.assert_not_called()
        assert client.last_used_provider is None

    def test_get_available_providers(self, config):
        client = LLMClient(config=config)
        for provider in list(client.clients):
            client.clients[provider] = MagicMock()
            client.clients[provider].is_available.return_value = provider != LLMProvider.LM_STUDIO

        assert client.get_available_providers() == [LLMProvider.OLLAMA, LLMProvider.DEEPSEEK]

    def test_create_client(self, config):
        client = create_client(provider=LLMProvider.DEEPSEEK, config=config)
        assert client.preferred_provider == LLMProvider.DEEPSEEK

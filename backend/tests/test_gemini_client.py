"""
test_gemini_client.py: Tests for the generateContent client.

Tests cover:
  - Request shape (endpoint, key parameter, contents, safetySettings)
  - Safety blocks reported as a notice, never as an error
  - Missing content reported as the incomplete notice
  - Non-2xx responses mapped to GenerationError with the upstream message
  - Missing API key rejected before any network call
"""

import asyncio

import httpx
import pytest

from hr_dashboard.config import DashboardSettings
from hr_dashboard.services.errors import ConfigurationError, GenerationError, NetworkError
from hr_dashboard.services.gemini_client import (
    INCOMPLETE_NOTICE,
    SAFETY_BLOCK_NOTICE,
    SAFETY_SETTINGS,
    GeminiClient,
    build_request_body,
    extract_text,
)

from conftest import gemini_response, gemini_transport, request_json


def _generate(settings, transport, prompt="Resuma."):
    client = GeminiClient(settings, http_client=httpx.AsyncClient(transport=transport))
    return asyncio.run(client.generate(prompt))


class TestRequest:

    def test_body(self):
        body = build_request_body("Olá")
        assert body["contents"] == [{"parts": [{"text": "Olá"}]}]
        assert body["safetySettings"] == SAFETY_SETTINGS

    def test_safety_categories(self):
        categories = {s["category"] for s in SAFETY_SETTINGS}
        assert categories == {
            "HARM_CATEGORY_HARASSMENT",
            "HARM_CATEGORY_HATE_SPEECH",
            "HARM_CATEGORY_SEXUALLY_EXPLICIT",
            "HARM_CATEGORY_DANGEROUS_CONTENT",
        }
        assert {s["threshold"] for s in SAFETY_SETTINGS} == {"BLOCK_MEDIUM_AND_ABOVE"}

    def test_sent_once_with_key(self, settings):
        calls = []
        text = _generate(settings, gemini_transport(calls=calls), prompt="Resuma isto.")
        assert text == "Resumo gerado."
        assert len(calls) == 1
        request = calls[0]
        assert request.method == "POST"
        assert request.url.params["key"] == "gemini-key"
        assert request.url.path.endswith("/models/gemini-1.5-pro-latest:generateContent")
        assert request_json(request)["contents"][0]["parts"][0]["text"] == "Resuma isto."

    def test_model_is_configurable(self):
        settings = DashboardSettings(gemini_api_key="k", gemini_model="gemini-2.0-flash")
        assert GeminiClient(settings).endpoint.endswith("/gemini-2.0-flash:generateContent")


class TestResponseHandling:

    def test_safety_finish_reason(self, settings):
        body = gemini_response(text=None, finish_reason="SAFETY")
        assert _generate(settings, gemini_transport(body=body)) == SAFETY_BLOCK_NOTICE

    def test_safety_wins_over_partial_text(self):
        assert extract_text(gemini_response(text="parcial", finish_reason="SAFETY")) == SAFETY_BLOCK_NOTICE

    def test_prompt_block_reason(self):
        assert extract_text({"promptFeedback": {"blockReason": "SAFETY"}}) == SAFETY_BLOCK_NOTICE

    @pytest.mark.parametrize("body", [{}, {"candidates": []}, gemini_response(text=None), gemini_response(text="")])
    def test_no_content_is_incomplete(self, body):
        assert extract_text(body) == INCOMPLETE_NOTICE

    def test_error_status(self, settings):
        body = {"error": {"code": 400, "message": "API key not valid."}}
        with pytest.raises(GenerationError) as exc_info:
            _generate(settings, gemini_transport(status=400, body=body))
        assert exc_info.value.status_code == 400
        assert str(exc_info.value) == "Erro da API Gemini (400): API key not valid."

    def test_error_without_message(self, settings):
        with pytest.raises(GenerationError) as exc_info:
            _generate(settings, httpx.MockTransport(lambda request: httpx.Response(503, text="unavailable")))
        assert exc_info.value.message == "Ocorreu um erro desconhecido."

    def test_transport_failure(self, settings):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(NetworkError):
            _generate(settings, httpx.MockTransport(handler))

    def test_missing_key(self):
        calls = []
        with pytest.raises(ConfigurationError, match="Gemini"):
            _generate(DashboardSettings(), gemini_transport(calls=calls))
        assert calls == []


class TestMalformedResponses:

    def test_error_as_plain_string(self, settings):
        with pytest.raises(GenerationError) as exc_info:
            _generate(settings, gemini_transport(status=429, body={"error": "quota exceeded"}))
        assert exc_info.value.status_code == 429
        assert exc_info.value.message == "quota exceeded"

    @pytest.mark.parametrize("body", [{"error": None}, {"error": ["x"]}, {"error": {"code": 500}}])
    def test_error_without_usable_message(self, settings, body):
        with pytest.raises(GenerationError) as exc_info:
            _generate(settings, gemini_transport(status=500, body=body))
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Ocorreu um erro desconhecido."

    def test_error_body_not_an_object(self, settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(502, json=["bad gateway"]))
        with pytest.raises(GenerationError) as exc_info:
            _generate(settings, transport)
        assert exc_info.value.status_code == 502

    @pytest.mark.parametrize("body", [
        {"candidates": [None]},
        {"candidates": ["texto"]},
        {"candidates": {"0": {}}},
        {"candidates": [{"content": "texto"}]},
        {"candidates": [{"content": {"parts": [None]}}]},
        {"candidates": [{"content": {"parts": "texto"}}]},
        {"candidates": [{"content": {"parts": [{"text": 42}]}}]},
        {"promptFeedback": "blocked"},
    ])
    def test_unexpected_shapes_are_incomplete(self, settings, body):
        assert _generate(settings, gemini_transport(body=body)) == INCOMPLETE_NOTICE

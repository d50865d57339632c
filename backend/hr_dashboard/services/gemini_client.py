"""
Gemini generative-language client.
Single entry point for the AI summaries of performance feedback and training
effectiveness notes. One request/response round trip per call: no retry,
no streaming, no cancellation.
"""
import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from hr_dashboard.config import DashboardSettings
from hr_dashboard.services.errors import ConfigurationError, GenerationError, NetworkError

logger = logging.getLogger("hr-dashboard.gemini")

SAFETY_SETTINGS: List[Dict[str, str]] = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
]

SAFETY_BLOCK_NOTICE = (
    "A análise foi bloqueada devido às políticas de segurança do Gemini. "
    "Tente reformular as notas."
)
INCOMPLETE_NOTICE = (
    "A análise não pôde ser concluída. A resposta pode ter sido bloqueada "
    "ou o modelo pode estar indisponível no momento."
)


def build_request_body(prompt: str) -> Dict[str, Any]:
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "safetySettings": SAFETY_SETTINGS,
    }


def _field(obj: Any, key: str) -> Any:
    """``obj[key]`` when ``obj`` is a JSON object, else None."""
    return obj.get(key) if isinstance(obj, dict) else None


def _first(items: Any) -> Any:
    return items[0] if isinstance(items, list) and items else None


def error_message(data: Any) -> str:
    """Upstream ``error.message``; a bare string ``error`` is used as-is."""
    error = _field(data, "error")
    message = error if isinstance(error, str) else _field(error, "message")
    return str(message) if message else "Ocorreu um erro desconhecido."


def extract_text(data: Dict[str, Any]) -> str:
    """
    Pick the generated text out of a generateContent response.

    Returns SAFETY_BLOCK_NOTICE when the safety filter withheld the output,
    even if a partial text came back, and INCOMPLETE_NOTICE when there is no
    usable text at all. Unexpected shapes count as no usable text.
    """
    if _field(_field(data, "promptFeedback"), "blockReason"):
        return SAFETY_BLOCK_NOTICE

    candidate = _first(_field(data, "candidates"))
    if _field(candidate, "finishReason") == "SAFETY":
        return SAFETY_BLOCK_NOTICE

    text = _field(_first(_field(_field(candidate, "content"), "parts")), "text")
    if not text or not isinstance(text, str):
        logger.warning("Gemini response without usable content")
        return INCOMPLETE_NOTICE
    return text


class GeminiClient:
    def __init__(self, settings: DashboardSettings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._http = http_client

    @property
    def endpoint(self) -> str:
        return f"{self.settings.gemini_base_url}/{self.settings.gemini_model}:generateContent"

    async def generate(self, prompt: str) -> str:
        if not self.settings.gemini_api_key:
            raise ConfigurationError("Erro: Chave de API do Gemini não configurada.")

        params = {"key": self.settings.gemini_api_key}
        body = build_request_body(prompt)
        start = time.perf_counter()
        try:
            if self._http is not None:
                response = await self._http.post(self.endpoint, params=params, json=body)
            else:
                # Generations routinely run past httpx's 5s default
                async with httpx.AsyncClient(timeout=None) as client:
                    response = await client.post(self.endpoint, params=params, json=body)
        except httpx.RequestError as e:
            logger.error(f"Gemini request failed: {type(e).__name__}: {e}")
            raise NetworkError(f"Erro de rede na chamada para o Gemini: {e}") from e

        duration_ms = round((time.perf_counter() - start) * 1000, 2)

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.is_success:
            message = error_message(data)
            logger.error(
                f"Gemini API error {response.status_code}: {message}",
                extra={"duration_ms": duration_ms},
            )
            raise GenerationError(response.status_code, message)

        logger.info("Gemini analysis completed", extra={"duration_ms": duration_ms})
        return extract_text(data)

"""Analysis requester backed by the Google Gemini REST API."""

import logging
import os
from typing import Any, Dict, Optional

import httpx

from llm.base import AnalysisRequester
from llm.schema import to_gemini_schema
from models.errors import AnalysisFailure

logger = logging.getLogger(__name__)

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")


def api_key_from_env() -> Optional[str]:
    """Return the first API key found in the environment."""
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None


class GeminiRequester(AnalysisRequester):
    """Requests structured JSON output from Gemini ``generateContent``."""

    DEFAULT_MODEL = "gemini-3-pro-preview"
    DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
    DEFAULT_THINKING_BUDGET = 15000

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        thinking_budget: Optional[int] = DEFAULT_THINKING_BUDGET,
        temperature: Optional[float] = None,
        **kwargs: Any,
    ):
        """
        Initialize the Gemini requester.

        Args:
            api_key: API key; read from GEMINI_API_KEY / API_KEY when omitted
            model: Gemini model name
            base_url: API base URL
            thinking_budget: Thinking token budget (None to omit)
            temperature: Sampling temperature (None for the model default)
            **kwargs: Passed to AnalysisRequester
        """
        super().__init__(model=model, base_url=base_url, **kwargs)
        self.api_key = api_key or api_key_from_env()
        self.thinking_budget = thinking_budget
        self.temperature = temperature

    def get_provider_name(self) -> str:
        return "gemini"

    def _build_payload(self, prompt: str, schema: Dict[str, Any]) -> Dict[str, Any]:
        generation_config: Dict[str, Any] = {
            "responseMimeType": "application/json",
            "responseSchema": to_gemini_schema(schema),
        }
        if self.thinking_budget is not None:
            generation_config["thinkingConfig"] = {"thinkingBudget": self.thinking_budget}
        if self.temperature is not None:
            generation_config["temperature"] = self.temperature

        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }

    async def _generate(self, prompt: str, schema: Dict[str, Any]) -> str:
        if not self.api_key:
            raise AnalysisFailure(
                f"Gemini API key not configured (set one of {', '.join(API_KEY_ENV_VARS)})"
            )

        url = f"{self.base_url}/v1beta/models/{self.model}:generateContent"
        async with self._client() as client:
            response = await client.post(
                url,
                headers={"x-goog-api-key": self.api_key},
                json=self._build_payload(prompt, schema),
            )

        if response.status_code != 200:
            raise AnalysisFailure(
                f"Gemini request failed: status={response.status_code}: "
                f"{self._error_message(response)}"
            )

        return self._extract_text(response.json())

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Best-effort error text from a failed response."""
        try:
            body = response.json()
        except ValueError:
            return response.text[:300]
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        return response.text[:300]

    def _extract_text(self, body: Any) -> str:
        """Join the non-thought text parts of the first candidate."""
        if not isinstance(body, dict):
            raise AnalysisFailure(
                f"Gemini response is not an object: {type(body).__name__}"
            )

        candidates = body.get("candidates") or []
        if not isinstance(candidates, list):
            raise AnalysisFailure("Gemini response has malformed candidates")
        if not candidates:
            feedback = body.get("promptFeedback", {})
            raise AnalysisFailure(f"Gemini returned no candidates: {feedback}")

        candidate = candidates[0]
        content = candidate.get("content") if isinstance(candidate, dict) else None
        if not isinstance(content, dict):
            raise AnalysisFailure("Gemini candidate has no content")

        parts = content.get("parts") or []
        if not isinstance(parts, list):
            raise AnalysisFailure("Gemini candidate has malformed parts")
        text = "".join(
            part["text"]
            for part in parts
            if isinstance(part, dict)
            and isinstance(part.get("text"), str)
            and not part.get("thought", False)
        )
        if not text:
            logger.warning(
                f"Gemini candidate without text (finishReason={candidate.get('finishReason')})"
            )
        return text

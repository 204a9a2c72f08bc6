"""Analysis requester backed by a local Ollama server."""

import logging
from typing import Any, Dict, List

import httpx

from llm.base import AnalysisRequester
from models.errors import AnalysisFailure

logger = logging.getLogger(__name__)


class OllamaRequester(AnalysisRequester):
    """Requests schema-constrained JSON output from Ollama ``/api/generate``."""

    DEFAULT_MODEL = "qwen3:8b"
    DEFAULT_BASE_URL = "http://localhost:11434"
    PROBE_TIMEOUT = 5.0

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        temperature: float = 0.2,
        num_predict: int = 8000,
        **kwargs: Any,
    ):
        super().__init__(model=model, base_url=base_url, **kwargs)
        self.temperature = temperature
        self.num_predict = num_predict

    def get_provider_name(self) -> str:
        return "ollama"

    async def list_models(self) -> List[str]:
        """
        Return the names of the models pulled on the server.

        Raises:
            httpx.HTTPError: If the server cannot be reached or answers with an error status
            AnalysisFailure: If the tag listing is malformed
        """
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.PROBE_TIMEOUT), transport=self.transport
        ) as client:
            response = await client.get(f"{self.base_url}/api/tags")
            response.raise_for_status()
            body = response.json()

        entries = body.get("models") if isinstance(body, dict) else None
        if not isinstance(entries, list):
            raise AnalysisFailure("Ollama tag listing has no model list")
        return [
            entry["name"]
            for entry in entries
            if isinstance(entry, dict) and isinstance(entry.get("name"), str)
        ]

    def _matches_model(self, name: str) -> bool:
        # An untagged model name refers to the ":latest" tag
        wanted = self.model if ":" in self.model else f"{self.model}:latest"
        return name == wanted

    async def check_availability(self) -> bool:
        """
        Check that the server is reachable and the configured model is pulled.

        Returns:
            True if the analysis request can be sent, False otherwise
        """
        try:
            models = await self.list_models()
        except (httpx.HTTPError, ValueError, AnalysisFailure) as e:
            logger.warning(f"Ollama at {self.base_url} unavailable: {e}")
            return False

        if not any(self._matches_model(name) for name in models):
            logger.warning(f"Model {self.model} is not pulled on {self.base_url} (found: {models})")
            return False

        logger.info(f"Ollama ready at {self.base_url} with {self.model}")
        return True

    async def _generate(self, prompt: str, schema: Dict[str, Any]) -> str:
        async with self._client() as client:
            response = await client.post(
                f"{self.base_url}/api/generate",
                json={
                    "model": self.model,
                    "prompt": prompt,
                    "stream": False,
                    "format": schema,
                    "options": {
                        "temperature": self.temperature,
                        "num_predict": self.num_predict,
                    },
                },
            )

        if response.status_code != 200:
            raise AnalysisFailure(
                f"Ollama request failed: status={response.status_code}: {response.text[:300]}"
            )

        body = response.json()
        if not isinstance(body, dict):
            raise AnalysisFailure(f"Ollama response is not an object: {type(body).__name__}")
        if body.get("error"):
            raise AnalysisFailure(f"Ollama error: {body['error']}")

        text = body.get("response", "")
        if not isinstance(text, str):
            raise AnalysisFailure("Ollama response text is not a string")
        return text

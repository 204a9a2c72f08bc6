"""Abstract base class for analysis requesters."""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from llm.prompts import build_analysis_prompt
from llm.schema import build_response_schema
from models.analysis import AnalysisResult
from models.errors import AnalysisDecodeError, AnalysisFailure
from models.site import SiteRecord

logger = logging.getLogger(__name__)


class AnalysisRequester(ABC):
    """
    Base class for language-model backends that produce an analysis result.

    Each backend (Gemini, Ollama) implements the transport in ``_generate``.
    Prompt construction, reply parsing and strict decoding are shared here.

    A requester is stateless between calls and makes exactly one attempt per
    ``request_analysis`` call. Every failure surfaces as ``AnalysisFailure``.
    """

    DEFAULT_TIMEOUT = 180.0

    def __init__(
        self,
        model: str,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        detailed_visits: bool = False,
        diagnostic_logging: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the requester.

        Args:
            model: Model name to use
            base_url: API base URL
            timeout: Request timeout in seconds
            detailed_visits: Ask for structured visit objects instead of names
            diagnostic_logging: Log raw model replies
            transport: Optional httpx transport (used by tests)
        """
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.detailed_visits = detailed_visits
        self.diagnostic_logging = diagnostic_logging
        self.transport = transport

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the provider identifier (e.g. "gemini", "ollama")."""

    @abstractmethod
    async def _generate(self, prompt: str, schema: Dict[str, Any]) -> str:
        """
        Send the prompt to the model and return the raw reply text.

        Implementations raise ``httpx.HTTPError`` or ``AnalysisFailure``.
        """

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=10.0, pool=5.0),
            transport=self.transport,
        )

    async def request_analysis(
        self, address: str, sites: List[SiteRecord]
    ) -> AnalysisResult:
        """
        Request a monthly visit plan for the given home address and sites.

        Args:
            address: Current home address (non-empty, checked by the caller)
            sites: Sites to schedule (non-empty, checked by the caller)

        Returns:
            Fully decoded analysis result

        Raises:
            AnalysisFailure: On transport, provider or decode errors
        """
        prompt = build_analysis_prompt(address, sites, self.detailed_visits)
        schema = build_response_schema(self.detailed_visits)

        logger.info(
            f"Requesting analysis from {self.get_provider_name()} "
            f"(model {self.model}, {len(sites)} sites)"
        )

        try:
            text = await self._generate(prompt, schema)
        except httpx.TimeoutException as e:
            raise AnalysisFailure(f"Timeout after {self.timeout}s: {e}") from e
        except httpx.HTTPError as e:
            raise AnalysisFailure(f"HTTP error: {e}") from e
        except (ValueError, AttributeError, TypeError, KeyError) as e:
            # Provider envelope was not JSON or not of the expected shape
            raise AnalysisFailure(f"Invalid provider response: {e}") from e

        data = self._parse_json_response(text)
        if data is None:
            raise AnalysisFailure("Model reply is empty or not valid JSON")

        try:
            result = AnalysisResult.from_dict(data)
        except AnalysisDecodeError as e:
            raise AnalysisFailure(f"Model reply does not match the result schema: {e}") from e

        logger.info(
            f"Analysis decoded: {len(result.clusters)} clusters, "
            f"{len(result.monthly_agenda)} agenda weeks"
        )
        return result

    def _parse_json_response(self, text: str) -> Optional[Dict[str, Any]]:
        """
        Parse the JSON object from a model reply.

        Strategies (in order):
        1. Direct JSON parse
        2. Extract from markdown code block
        3. Extract the outermost JSON object from text

        Anything else is rejected; partial data is never recovered.
        """
        if not text or not text.strip():
            return None

        if self.diagnostic_logging:
            logger.debug(f"LLM raw response ({len(text)} chars): {text[:500]}...")

        candidates = [text]
        block_match = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text)
        if block_match:
            candidates.append(block_match.group(1))
        object_match = re.search(r"\{[\s\S]*\}", text)
        if object_match:
            candidates.append(object_match.group(0))

        for strategy, candidate in enumerate(candidates, 1):
            try:
                result = json.loads(candidate)
            except json.JSONDecodeError:
                continue
            if isinstance(result, dict):
                if self.diagnostic_logging:
                    logger.debug(f"JSON parsed (strategy {strategy})")
                return result

        logger.warning(f"Could not parse JSON from LLM response. Response: {text[:200]}...")
        return None

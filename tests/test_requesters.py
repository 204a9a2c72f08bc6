"""Unit tests for the Gemini and Ollama analysis requesters."""

import asyncio
import json
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx
import pytest
from llm import get_requester
from llm.gemini import GeminiRequester
from llm.ollama import OllamaRequester
from llm.prompts import build_analysis_prompt
from llm.schema import build_response_schema, to_gemini_schema
from models.analysis import AnalysisResult
from models.errors import AnalysisFailure
from models.site import SiteRecord

FIXTURES = Path(__file__).parent / "fixtures"

SITES = [
    SiteRecord("Acme", "Rio Madeira", "Rua Vergueiro, 1000", "Setor A", "São Paulo", "SP", "01504-000"),
    SiteRecord("Beta", "Rio Negro", "Rua Dr. Deodato, 300", "Setor D", "Mogi das Cruzes", "SP", ""),
]


@pytest.fixture
def payload():
    with open(FIXTURES / "sample_analysis.json", "r", encoding="utf-8") as f:
        return json.load(f)


class Recorder:
    """Mock transport handler that records requests and replays one response."""

    def __init__(self, response):
        self.response = response
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def gemini_body(text: str) -> dict:
    return {
        "candidates": [
            {
                "content": {
                    "role": "model",
                    "parts": [
                        {"text": "thinking about routes", "thought": True},
                        {"text": text},
                    ],
                },
                "finishReason": "STOP",
            }
        ]
    }


def make_gemini(handler, **kwargs) -> GeminiRequester:
    return GeminiRequester(
        api_key="test-key", transport=httpx.MockTransport(handler), **kwargs
    )


class TestPromptAndSchema:
    """Test prompt construction and the response schema."""

    def test_prompt_embeds_address_and_sites(self):
        """Test the address and every serialized site appear in the prompt."""
        prompt = build_analysis_prompt("Vila Mariana, SP", SITES)

        assert "Moradia: Vila Mariana, SP" in prompt
        assert '"nomeObra": "Rio Madeira"' in prompt
        assert '"cidade": "Mogi das Cruzes"' in prompt
        assert "exatamente 1 vez" in prompt

    def test_detailed_prompt_mentions_visit_fields(self):
        """Test the richer contract adds visit instructions."""
        assert "fullShift" in build_analysis_prompt("x", SITES, detailed_visits=True)
        assert "fullShift" not in build_analysis_prompt("x", SITES)

    def test_schema_requires_all_sections(self):
        """Test the schema lists every result section as required."""
        schema = build_response_schema()

        assert set(schema["required"]) == {
            "diagnosis",
            "currentEvaluation",
            "housingRecommendation",
            "clusters",
            "weeklyRoute",
            "monthlyAgenda",
            "timeSavingsSummary",
        }

    def test_schedule_has_five_weekday_slots(self):
        """Test the schedule sub-schema is a fixed five-key object."""
        schedule = build_response_schema()["properties"]["monthlyAgenda"]["items"][
            "properties"
        ]["schedule"]

        assert list(schedule["properties"]) == ["Segunda", "Terça", "Quarta", "Quinta", "Sexta"]

    def test_detailed_schema_uses_visit_objects(self):
        """Test structured visits in the richer schema."""
        visits = build_response_schema(detailed_visits=True)["properties"]["weeklyRoute"][
            "items"
        ]["properties"]["visits"]

        assert visits["items"]["properties"]["fullShift"] == {"type": "boolean"}

    def test_gemini_schema_upper_case_types(self):
        """Test conversion to Gemini type names."""
        converted = to_gemini_schema(build_response_schema())

        assert converted["type"] == "OBJECT"
        assert converted["properties"]["clusters"]["type"] == "ARRAY"
        assert converted["properties"]["clusters"]["items"]["properties"]["name"] == {
            "type": "STRING"
        }
        assert converted["properties"]["currentEvaluation"]["properties"]["efficiency"][
            "enum"
        ] == ["Alta", "Média", "Baixa"]


class TestGeminiRequester:
    """Test the Gemini transport."""

    def test_successful_request(self, payload):
        """Test a valid reply decodes into an AnalysisResult."""
        recorder = Recorder(httpx.Response(200, json=gemini_body(json.dumps(payload))))
        requester = make_gemini(recorder)

        result = asyncio.run(requester.request_analysis("Vila Mariana", SITES))

        assert result == AnalysisResult.from_dict(payload)
        assert len(recorder.requests) == 1

        request = recorder.requests[0]
        assert request.url.path == "/v1beta/models/gemini-3-pro-preview:generateContent"
        assert request.headers["x-goog-api-key"] == "test-key"

        body = json.loads(request.content)
        config = body["generationConfig"]
        assert config["responseMimeType"] == "application/json"
        assert config["responseSchema"]["type"] == "OBJECT"
        assert config["thinkingConfig"] == {"thinkingBudget": 15000}
        assert "Vila Mariana" in body["contents"][0]["parts"][0]["text"]

    def test_thought_parts_ignored(self):
        """Test thought parts are not mixed into the JSON text."""
        requester = GeminiRequester(api_key="test-key")

        assert requester._extract_text(gemini_body("{}")) == "{}"

    def test_reply_in_code_block(self, payload):
        """Test a reply wrapped in a markdown code block."""
        text = f"```json\n{json.dumps(payload)}\n```"
        requester = make_gemini(Recorder(httpx.Response(200, json=gemini_body(text))))

        result = asyncio.run(requester.request_analysis("Vila Mariana", SITES))
        assert result.diagnosis == payload["diagnosis"]

    def test_http_error_status(self):
        """Test a non-200 status surfaces as AnalysisFailure."""
        recorder = Recorder(
            httpx.Response(429, json={"error": {"message": "Resource exhausted"}})
        )
        requester = make_gemini(recorder)

        with pytest.raises(AnalysisFailure, match="Resource exhausted"):
            asyncio.run(requester.request_analysis("Vila Mariana", SITES))
        assert len(recorder.requests) == 1

    def test_transport_error(self):
        """Test connection errors surface as AnalysisFailure without retry."""
        recorder = Recorder(httpx.ConnectError("connection refused"))
        requester = make_gemini(recorder)

        with pytest.raises(AnalysisFailure):
            asyncio.run(requester.request_analysis("Vila Mariana", SITES))
        assert len(recorder.requests) == 1

    def test_timeout(self):
        """Test timeouts surface as AnalysisFailure."""
        requester = make_gemini(Recorder(httpx.ReadTimeout("too slow")))

        with pytest.raises(AnalysisFailure, match="Timeout"):
            asyncio.run(requester.request_analysis("Vila Mariana", SITES))

    @pytest.mark.parametrize("text", ["", "   ", "not json at all", "[1, 2, 3]"])
    def test_unparseable_reply(self, text):
        """Test empty or non-object replies fail closed."""
        requester = make_gemini(Recorder(httpx.Response(200, json=gemini_body(text))))

        with pytest.raises(AnalysisFailure):
            asyncio.run(requester.request_analysis("Vila Mariana", SITES))

    def test_schema_mismatch(self, payload):
        """Test a reply missing a section fails closed."""
        del payload["monthlyAgenda"]
        requester = make_gemini(
            Recorder(httpx.Response(200, json=gemini_body(json.dumps(payload))))
        )

        with pytest.raises(AnalysisFailure, match="monthlyAgenda"):
            asyncio.run(requester.request_analysis("Vila Mariana", SITES))

    def test_no_candidates(self):
        """Test a blocked prompt without candidates."""
        requester = make_gemini(
            Recorder(httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}}))
        )

        with pytest.raises(AnalysisFailure, match="no candidates"):
            asyncio.run(requester.request_analysis("Vila Mariana", SITES))

    def test_non_json_envelope(self):
        """Test a 200 response that is not JSON."""
        requester = make_gemini(Recorder(httpx.Response(200, text="<html>proxy</html>")))

        with pytest.raises(AnalysisFailure):
            asyncio.run(requester.request_analysis("Vila Mariana", SITES))

    @pytest.mark.parametrize(
        "status, body",
        [
            (200, {"candidates": [{"content": None}]}),
            (200, ["not", "an", "object"]),
            (200, {"candidates": "none"}),
            (200, {"candidates": [{"content": {"parts": [{"text": 42}]}}]}),
            (500, ["boom"]),
            (500, {"error": "internal"}),
        ],
    )
    def test_malformed_envelope(self, status, body):
        """Test JSON envelopes of the wrong shape surface as AnalysisFailure."""
        requester = make_gemini(Recorder(httpx.Response(status, json=body)))

        with pytest.raises(AnalysisFailure):
            asyncio.run(requester.request_analysis("Vila Mariana", SITES))

    def test_missing_api_key(self, monkeypatch):
        """Test a missing credential fails before any request."""
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("API_KEY", raising=False)
        recorder = Recorder(httpx.Response(200, json={}))
        requester = GeminiRequester(transport=httpx.MockTransport(recorder))

        with pytest.raises(AnalysisFailure, match="API key"):
            asyncio.run(requester.request_analysis("Vila Mariana", SITES))
        assert recorder.requests == []

    def test_api_key_from_env(self, monkeypatch):
        """Test the API_KEY fallback variable."""
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("API_KEY", "env-key")

        assert GeminiRequester().api_key == "env-key"


class TestOllamaRequester:
    """Test the Ollama transport."""

    def test_successful_request(self, payload):
        """Test schema-constrained generation through /api/generate."""
        recorder = Recorder(
            httpx.Response(200, json={"model": "qwen3:8b", "response": json.dumps(payload), "done": True})
        )
        requester = OllamaRequester(transport=httpx.MockTransport(recorder))

        result = asyncio.run(requester.request_analysis("Vila Mariana", SITES))

        assert result.time_savings_summary == payload["timeSavingsSummary"]
        request = recorder.requests[0]
        assert request.url.path == "/api/generate"
        body = json.loads(request.content)
        assert body["stream"] is False
        assert body["format"]["type"] == "object"
        assert body["model"] == "qwen3:8b"

    def test_error_payload(self):
        """Test an Ollama error message surfaces as AnalysisFailure."""
        recorder = Recorder(httpx.Response(404, json={"error": "model not found"}))
        requester = OllamaRequester(transport=httpx.MockTransport(recorder))

        with pytest.raises(AnalysisFailure, match="404"):
            asyncio.run(requester.request_analysis("Vila Mariana", SITES))

    @pytest.mark.parametrize(
        "body",
        [["not", "an", "object"], {"response": None}, {"response": {"diagnosis": "x"}}],
    )
    def test_malformed_envelope(self, body):
        """Test JSON envelopes of the wrong shape surface as AnalysisFailure."""
        recorder = Recorder(httpx.Response(200, json=body))
        requester = OllamaRequester(transport=httpx.MockTransport(recorder))

        with pytest.raises(AnalysisFailure):
            asyncio.run(requester.request_analysis("Vila Mariana", SITES))

    def test_list_models(self):
        """Test model names are read from the tag listing."""
        recorder = Recorder(
            httpx.Response(200, json={"models": [{"name": "qwen3:8b"}, {"size": 1}, "junk"]})
        )
        requester = OllamaRequester(transport=httpx.MockTransport(recorder))

        assert asyncio.run(requester.list_models()) == ["qwen3:8b"]

    def test_untagged_model_matches_latest(self):
        """Test a model configured without a tag matches its latest tag only."""
        recorder = Recorder(httpx.Response(200, json={"models": [{"name": "qwen3:latest"}]}))

        assert asyncio.run(
            OllamaRequester(model="qwen3", transport=httpx.MockTransport(recorder)).check_availability()
        ) is True
        assert asyncio.run(
            OllamaRequester(model="qwen3:8b", transport=httpx.MockTransport(recorder)).check_availability()
        ) is False

    @pytest.mark.parametrize(
        "response",
        [httpx.Response(503, text="starting"), httpx.Response(200, json=["qwen3:8b"])],
    )
    def test_availability_bad_listing(self, response):
        """Test error statuses and malformed listings are reported as unavailable."""
        requester = OllamaRequester(transport=httpx.MockTransport(Recorder(response)))

        assert asyncio.run(requester.check_availability()) is False

    def test_availability_check(self):
        """Test the model lookup against /api/tags."""
        recorder = Recorder(httpx.Response(200, json={"models": [{"name": "qwen3:8b"}]}))
        requester = OllamaRequester(transport=httpx.MockTransport(recorder))

        assert asyncio.run(requester.check_availability()) is True
        assert recorder.requests[0].url.path == "/api/tags"

    def test_availability_missing_model(self):
        """Test an unavailable model is reported."""
        recorder = Recorder(httpx.Response(200, json={"models": [{"name": "llama3:8b"}]}))
        requester = OllamaRequester(transport=httpx.MockTransport(recorder))

        assert asyncio.run(requester.check_availability()) is False

    def test_availability_connect_error(self):
        """Test a stopped server is reported as unavailable."""
        recorder = Recorder(httpx.ConnectError("refused"))
        requester = OllamaRequester(transport=httpx.MockTransport(recorder))

        assert asyncio.run(requester.check_availability()) is False


class TestRequesterFactory:
    """Test provider selection from configuration."""

    def test_default_is_gemini(self):
        """Test Gemini is used when no provider is configured."""
        requester = get_requester({})

        assert isinstance(requester, GeminiRequester)
        assert requester.get_provider_name() == "gemini"

    def test_ollama_settings(self):
        """Test Ollama settings are passed through."""
        config = {
            "llm_settings": {
                "provider": "ollama",
                "model": "llama3:8b",
                "base_url": "http://ollama:11434/",
                "timeout": 30,
                "detailed_visits": True,
            }
        }
        requester = get_requester(config)

        assert isinstance(requester, OllamaRequester)
        assert requester.model == "llama3:8b"
        assert requester.base_url == "http://ollama:11434"
        assert requester.timeout == 30
        assert requester.detailed_visits is True

    def test_unsupported_provider(self):
        """Test unknown providers are rejected."""
        with pytest.raises(ValueError, match="Unsupported LLM provider"):
            get_requester({"llm_settings": {"provider": "openai"}})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""Unit tests for the TextGenerator boundary and the Gemini adapter."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import BaseModel

from relnotes.errors import ConfigurationError, GeneratorError, GeneratorTimeoutError, SchemaMismatchError
from relnotes.llm.base import _strip_fences
from relnotes.llm.gemini import GeminiGenerator, build_generator
from relnotes.models.run import Stage


class Answer(BaseModel):
    title: str
    count: int


class TestStripFences:
    def test_plain_json_untouched(self):
        assert _strip_fences('{"a": 1}') == '{"a": 1}'

    def test_json_fence(self):
        assert _strip_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert _strip_fences('```\n[1, 2]\n```\n') == "[1, 2]"


@pytest.mark.asyncio
class TestGenerateObject:
    async def test_valid_answer(self, scripted):
        gen = scripted(responses={"stage": [{"title": "x", "count": 2}]})
        answer = await gen.generate_object("stage", "prompt", Answer)
        assert answer == Answer(title="x", count=2)

    async def test_fenced_answer(self, scripted):
        gen = scripted(responses={"stage": ['```json\n{"title": "x", "count": 2}\n```']})
        answer = await gen.generate_object("stage", "prompt", Answer)
        assert answer.count == 2

    async def test_not_json(self, scripted):
        gen = scripted(responses={"stage": ["Sure! Here are your notes."]})
        with pytest.raises(SchemaMismatchError) as exc_info:
            await gen.generate_object("stage", "prompt", Answer)
        assert exc_info.value.errors[0].startswith("response is not valid JSON")

    async def test_wrong_shape(self, scripted):
        gen = scripted(responses={"stage": [{"title": "x"}]})
        with pytest.raises(SchemaMismatchError) as exc_info:
            await gen.generate_object("stage", "prompt", Answer)
        assert exc_info.value.errors[0].startswith("count:")

    async def test_transport_failure(self, scripted):
        gen = scripted(failures={"stage": ConnectionError()})
        with pytest.raises(GeneratorError) as exc_info:
            await gen.generate_object("stage", "prompt", Answer)
        assert "ConnectionError" in exc_info.value.message

    async def test_timeout(self, scripted):
        gen = scripted(responses={"stage": ["late"]}, delays={"stage": 1.0}, timeout=0.05)
        with pytest.raises(GeneratorTimeoutError) as exc_info:
            await gen.generate_text("stage", "prompt")
        assert exc_info.value.stage == "stage"

    async def test_generate_text_verbatim(self, scripted):
        gen = scripted(responses={"stage": ["## v2.1.0\n"]})
        assert await gen.generate_text("stage", "prompt") == "## v2.1.0\n"


def _response(text):
    return SimpleNamespace(
        text=text,
        usage_metadata=SimpleNamespace(prompt_token_count=120, candidates_token_count=40),
    )


@pytest.fixture
def fake_genai():
    with patch("relnotes.llm.gemini.genai") as genai:
        clients = {}

        def make_model(model_name):
            client = MagicMock(model_name=model_name)
            client.generate_content_async = AsyncMock(return_value=_response('{"title": "x", "count": 1}'))
            clients[model_name] = client
            return client

        genai.GenerativeModel.side_effect = make_model
        genai.clients = clients
        yield genai


@pytest.mark.asyncio
class TestGeminiGenerator:
    async def test_json_call_appends_schema(self, fake_genai):
        gen = GeminiGenerator(api_key="k", model="writer")
        answer = await gen.generate_object(Stage.DRAFT, "Write notes.", Answer)
        assert answer.title == "x"

        fake_genai.configure.assert_called_once_with(api_key="k")
        call = fake_genai.clients["writer"].generate_content_async.call_args
        prompt = call.args[0]
        assert prompt.startswith("Write notes.")
        assert "Return ONLY valid JSON" in prompt
        assert json.dumps(Answer.model_json_schema(), indent=2) in prompt
        assert call.kwargs["generation_config"].response_mime_type == "application/json"

    async def test_classifier_uses_stage_model(self, fake_genai):
        gen = GeminiGenerator(api_key="k", model="writer", stage_models={Stage.CLASSIFY: "lite"})
        await gen.complete_json(Stage.CLASSIFY, "Classify.", Answer)
        await gen.complete_json(Stage.DRAFT, "Draft.", Answer)
        assert set(fake_genai.clients) == {"lite", "writer"}

    async def test_clients_cached(self, fake_genai):
        gen = GeminiGenerator(api_key="k", model="writer")
        await gen.complete_text(Stage.REFINE, "one")
        await gen.complete_text(Stage.REFINE, "two")
        assert fake_genai.GenerativeModel.call_count == 1

    async def test_blocked_response_becomes_generator_error(self, fake_genai):
        gen = GeminiGenerator(api_key="k", model="writer")
        client = gen._client_for(Stage.REFINE)
        client.generate_content_async.side_effect = ValueError("response was blocked")
        with pytest.raises(GeneratorError) as exc_info:
            await gen.generate_text(Stage.REFINE, "Improve.")
        assert exc_info.value.code == "LLM_REFINE_NOTES_FAILED"


class TestBuildGenerator:
    def test_missing_key(self, test_config):
        from dataclasses import replace
        cfg = replace(test_config, llm=replace(test_config.llm, api_key=""))
        with pytest.raises(ConfigurationError) as exc_info:
            build_generator(cfg)
        assert exc_info.value.missing == ["GOOGLE_API_KEY"]

    def test_bad_release_date_fails_before_any_call(self, test_config, fake_genai):
        from dataclasses import replace
        with pytest.raises(ConfigurationError) as exc_info:
            build_generator(replace(test_config, release_date="12/2025"))
        assert exc_info.value.missing[0].startswith("RELEASE_DATE")
        fake_genai.configure.assert_not_called()

    def test_builds_from_config(self, test_config, fake_genai):
        gen = build_generator(test_config)
        assert gen.model == "gemini-2.0-flash"
        assert gen.stage_models == {Stage.CLASSIFY: "gemini-2.0-flash-lite"}
        assert gen.timeout == 5.0

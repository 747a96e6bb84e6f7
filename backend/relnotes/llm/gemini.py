"""
Release Notes Forge — Google Gemini implementation of TextGenerator.

Structured stages ask for a JSON response (response_mime_type) and get
the target JSON Schema appended to the prompt. The classifier runs on a
lighter model than the writing stages.
"""

from __future__ import annotations

import json

import google.generativeai as genai
from google.generativeai.types import GenerationConfig
from pydantic import BaseModel

from relnotes.core.config import AppConfig, validate_config
from relnotes.llm.base import TextGenerator
from relnotes.models.run import Stage
from relnotes.utils.logging import logger


class GeminiGenerator(TextGenerator):
    """Thin async wrapper around google-generativeai's GenerativeModel."""

    provider_name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        stage_models: dict[str, str] | None = None,
        temperature: float = 0.2,
        timeout: float = 60.0,
    ):
        super().__init__(timeout=timeout)
        genai.configure(api_key=api_key)
        self.model = model
        self.stage_models = stage_models or {}
        self.temperature = temperature
        self._clients: dict[str, genai.GenerativeModel] = {}

    def _client_for(self, stage: str) -> genai.GenerativeModel:
        name = self.stage_models.get(stage, self.model)
        if name not in self._clients:
            self._clients[name] = genai.GenerativeModel(model_name=name)
        return self._clients[name]

    async def _generate(self, stage: str, prompt: str, mime_type: str | None = None) -> str:
        config_kwargs: dict = {"temperature": self.temperature}
        if mime_type:
            config_kwargs["response_mime_type"] = mime_type

        client = self._client_for(stage)
        response = await client.generate_content_async(
            prompt,
            generation_config=GenerationConfig(**config_kwargs),
        )
        usage = getattr(response, "usage_metadata", None)
        if usage:
            logger.info(
                "  %s: model=%s tokens in=%d out=%d",
                stage, client.model_name,
                usage.prompt_token_count, usage.candidates_token_count,
            )
        # .text raises ValueError when the candidate was blocked; the base
        # class turns that into a GeneratorError for this stage.
        return response.text or ""

    async def complete_json(self, stage: str, prompt: str, schema: type[BaseModel]) -> str:
        full_prompt = (
            f"{prompt}\n\n"
            "OUTPUT FORMAT:\n"
            "Return ONLY valid JSON. No markdown backticks. No explanation.\n\n"
            f"JSON Schema:\n{json.dumps(schema.model_json_schema(), indent=2)}"
        )
        return await self._generate(stage, full_prompt, mime_type="application/json")

    async def complete_text(self, stage: str, prompt: str) -> str:
        return await self._generate(stage, prompt)


def build_generator(cfg: AppConfig) -> GeminiGenerator:
    """Create the production generator from configuration.

    Raises ConfigurationError when the API key is missing or the version
    and date settings are malformed.
    """
    validate_config(cfg)
    logger.info(
        "Creating Gemini generator: writer=%s classifier=%s timeout=%gs",
        cfg.llm.writer_model, cfg.llm.classify_model, cfg.llm.timeout,
    )
    return GeminiGenerator(
        api_key=cfg.llm.api_key,
        model=cfg.llm.writer_model,
        stage_models={Stage.CLASSIFY: cfg.llm.classify_model},
        temperature=cfg.llm.temperature,
        timeout=cfg.llm.timeout,
    )

"""
Release Notes Forge — Text-generation collaborator interface.

Pipeline stages never talk to a model provider directly. They call
generate_object() / generate_text() on a TextGenerator, which

  1. bounds every call with a timeout,
  2. maps provider failures onto GeneratorError / GeneratorTimeoutError,
  3. validates structured answers against a pydantic schema and raises
     SchemaMismatchError when they do not fit.

Concrete providers only implement complete_json() and complete_text().
Tests swap in a scripted subclass.
"""

from __future__ import annotations

import asyncio
import json
import re
from abc import ABC, abstractmethod
from typing import Any, Awaitable, TypeVar

from pydantic import BaseModel, ValidationError

from relnotes.errors import (
    GeneratorError,
    GeneratorTimeoutError,
    ReleaseNotesError,
    SchemaMismatchError,
)

T = TypeVar("T", bound=BaseModel)

_FENCE = re.compile(r"^\s*```(?:json)?\s*|\s*```\s*$", re.IGNORECASE)


def _strip_fences(text: str) -> str:
    """Models sometimes wrap JSON in ```json fences despite being told not to."""
    return _FENCE.sub("", text).strip()


def _format_validation_errors(exc: ValidationError) -> list[str]:
    errors: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "<root>"
        errors.append(f"{loc}: {err['msg']}")
    return errors


class TextGenerator(ABC):
    """Abstract boundary around a non-deterministic text generator."""

    provider_name = "abstract"

    def __init__(self, timeout: float = 60.0):
        self.timeout = timeout

    @abstractmethod
    async def complete_json(self, stage: str, prompt: str, schema: type[BaseModel]) -> str:
        """Return raw model output that should be a JSON document for `schema`."""

    @abstractmethod
    async def complete_text(self, stage: str, prompt: str) -> str:
        """Return raw free-text model output."""

    async def generate_object(self, stage: str, prompt: str, schema: type[T]) -> T:
        raw = await self._bounded(stage, self.complete_json(stage, prompt, schema))
        try:
            data: Any = json.loads(_strip_fences(raw or ""))
        except json.JSONDecodeError as exc:
            raise SchemaMismatchError(stage, [f"response is not valid JSON: {exc.msg}"]) from exc
        try:
            return schema.model_validate(data)
        except ValidationError as exc:
            raise SchemaMismatchError(stage, _format_validation_errors(exc)) from exc

    async def generate_text(self, stage: str, prompt: str) -> str:
        return await self._bounded(stage, self.complete_text(stage, prompt))

    async def _bounded(self, stage: str, call: Awaitable[str]) -> str:
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise GeneratorTimeoutError(stage, self.timeout) from None
        except ReleaseNotesError:
            raise
        except Exception as exc:
            raise GeneratorError(stage, str(exc) or type(exc).__name__) from exc

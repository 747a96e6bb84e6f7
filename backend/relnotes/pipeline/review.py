"""
Release Notes Forge — Quality gate, refiner, pass-through and finalizer.

The gate runs once per draft and routes to exactly one continuation:

  is_complete = False → refine_notes   (one model call, no second review)
  is_complete = True  → pass_through   (no model call)

Both continuations return a member of the GateOutcome union, which
finalize() turns into the API payload.
"""

from __future__ import annotations

from typing import Literal

from relnotes.errors import SchemaMismatchError, UnreachableBranchError
from relnotes.llm.base import TextGenerator
from relnotes.llm.prompts import refine_prompt
from relnotes.models.notes import Draft, FinalResult, GateOutcome, PassedThroughNotes, RefinedNotes
from relnotes.models.run import Stage
from relnotes.pipeline.draft import pin_heading
from relnotes.utils.logging import logger

GateDecision = Literal["refine", "pass_through"]


def quality_gate(draft: Draft) -> GateDecision:
    return "pass_through" if draft.is_complete else "refine"


def pass_through(draft: Draft) -> PassedThroughNotes:
    return PassedThroughNotes(markdown=draft.markdown, version=draft.version)


async def refine_notes(generator: TextGenerator, draft: Draft) -> RefinedNotes:
    text = await generator.generate_text(Stage.REFINE, refine_prompt(draft.markdown, draft.suggestions))
    text = text.strip()
    if not text:
        raise SchemaMismatchError(Stage.REFINE, ["model returned no text"])
    return RefinedNotes(markdown=pin_heading(Stage.REFINE, text, draft.version), version=draft.version)


def finalize(outcome: GateOutcome) -> FinalResult:
    if isinstance(outcome, RefinedNotes):
        return FinalResult(result=outcome.markdown, version=outcome.version, refined=True)
    if isinstance(outcome, PassedThroughNotes):
        return FinalResult(result=outcome.markdown, version=outcome.version, refined=False)
    logger.critical("%s: received %r instead of a gate outcome", Stage.FINALIZE, outcome)
    raise UnreachableBranchError(outcome)

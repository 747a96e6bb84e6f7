"""
Release Notes Forge — Drafter.

Assembles enriched entries into one Markdown document and asks the
model to judge its own completeness. The model's verdict is normalised
before it reaches the quality gate:

  - the version is pinned to the categorizer's suggestion, in the
    version field and in the document heading
  - a "complete" draft that still lists suggestions loses them
  - an "incomplete" draft without suggestions is a schema failure
"""

from __future__ import annotations

import re
from datetime import date, datetime

from pydantic import BaseModel, Field

from relnotes.errors import ConfigurationError, SchemaMismatchError
from relnotes.llm.base import TextGenerator
from relnotes.llm.prompts import draft_prompt
from relnotes.models.commit import CategorizedBatch, EnrichedNotes
from relnotes.models.notes import Draft
from relnotes.models.run import Stage
from relnotes.utils.logging import logger

# "## v2.1.0 — December 2025"; a plain or en dash is accepted and normalised.
HEADING_PATTERN = re.compile(r"^##\s+(\S+)\s+[—–-]\s+(\S.*?)\s*$")


class DraftResponse(BaseModel):
    markdown: str = Field(min_length=1, description="Complete Markdown release notes")
    version: str = Field(default="", description="Version string, e.g. v2.1.0")
    is_complete: bool = Field(description="True if the notes are comprehensive and well-written")
    suggestions: list[str] = Field(
        default_factory=list, description="Improvement suggestions if is_complete is false",
    )


def release_month(release_date: str = "", today: date | None = None) -> str:
    """'December 2025' for RELEASE_DATE=2025-12 / 2025-12-04, else the current month."""
    if not release_date:
        return (today or date.today()).strftime("%B %Y")
    for fmt in ("%Y-%m-%d", "%Y-%m"):
        try:
            return datetime.strptime(release_date, fmt).strftime("%B %Y")
        except ValueError:
            continue
    raise ConfigurationError([f"RELEASE_DATE (expected YYYY-MM or YYYY-MM-DD, got {release_date!r})"])


def pin_heading(stage: str, markdown: str, version: str) -> str:
    """
    Force the document's "## <version> — <Month Year>" heading to `version`.

    Consumers split the result on this heading, so a document without one
    is a schema failure for `stage`.
    """
    first, _, rest = markdown.strip().partition("\n")
    match = HEADING_PATTERN.match(first)
    if not match:
        raise SchemaMismatchError(stage, [f"markdown: expected '## {version} — <Month Year>' heading, got {first[:80]!r}"])
    if match.group(1) != version:
        logger.warning("  %s: heading named %s, rewriting to %s", stage, match.group(1), version)
    heading = f"## {version} — {match.group(2)}"
    return f"{heading}\n{rest}" if rest else heading


def to_draft(response: DraftResponse, version: str) -> Draft:
    if not response.markdown.strip():
        raise SchemaMismatchError(Stage.DRAFT, ["markdown: empty document"])
    if response.version and response.version != version:
        logger.warning(
            "  %s: model proposed version %s, keeping %s", Stage.DRAFT, response.version, version,
        )

    suggestions = [s.strip() for s in response.suggestions if s.strip()]
    if response.is_complete and suggestions:
        logger.warning("  %s: complete draft carried %d suggestions, dropping them", Stage.DRAFT, len(suggestions))
        suggestions = []
    if not response.is_complete and not suggestions:
        raise SchemaMismatchError(Stage.DRAFT, ["draft marked incomplete without any suggestions"])

    return Draft(
        markdown=pin_heading(Stage.DRAFT, response.markdown, version),
        version=version,
        is_complete=response.is_complete,
        suggestions=suggestions,
    )


async def draft_release_notes(
    generator: TextGenerator,
    batch: CategorizedBatch,
    enriched: EnrichedNotes,
    request_text: str,
    product_context: str,
    release_date: str = "",
) -> Draft:
    prompt = draft_prompt(
        product_context=product_context,
        version=batch.suggested_version,
        release_month=release_month(release_date),
        request_text=request_text,
        instructions=batch.instructions,
        features=enriched.features,
        fixes=enriched.fixes,
        performance=enriched.performance,
        maintenance=enriched.maintenance,
    )
    response = await generator.generate_object(Stage.DRAFT, prompt, DraftResponse)
    return to_draft(response, batch.suggested_version)

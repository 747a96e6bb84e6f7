"""
Release Notes Forge — Enrichment branches.

Rewrites terse commit messages into title/description pairs. Two
independent branches, run concurrently by the orchestrator:

  enrich_features — feature commits
  enrich_fixes    — fixes, performance and maintenance in one call

Neither branch calls the model when it has nothing to enrich. Output is
rebuilt from the input buckets by sha, so bucket membership and order
never depend on where the model put an entry.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from relnotes.errors import SchemaMismatchError
from relnotes.llm.base import TextGenerator
from relnotes.llm.prompts import enrich_features_prompt, enrich_fixes_prompt
from relnotes.models.commit import CategorizedBatch, ClassifiedCommit, EnrichedCommit
from relnotes.models.run import Stage
from relnotes.utils.logging import logger


class EnrichedEntry(BaseModel):
    sha: str
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)


class FeatureEnrichment(BaseModel):
    features: list[EnrichedEntry] = Field(default_factory=list)


class FixEnrichment(BaseModel):
    fixes: list[EnrichedEntry] = Field(default_factory=list)
    performance: list[EnrichedEntry] = Field(default_factory=list)
    maintenance: list[EnrichedEntry] = Field(default_factory=list)


def _index_entries(stage: str, entries: list[EnrichedEntry], wanted: set[str]) -> dict[str, EnrichedEntry]:
    by_sha: dict[str, EnrichedEntry] = {}
    for entry in entries:
        by_sha.setdefault(entry.sha, entry)
    extra = sorted(set(by_sha) - wanted)
    if extra:
        logger.warning("  %s: ignoring unknown shas %s", stage, ", ".join(extra))
    return by_sha


def _rebuild_bucket(
    stage: str,
    bucket: list[ClassifiedCommit],
    by_sha: dict[str, EnrichedEntry],
) -> list[EnrichedCommit]:
    missing = [c.sha for c in bucket if c.sha not in by_sha]
    if missing:
        raise SchemaMismatchError(stage, [f"no entry for commit {sha}" for sha in missing])
    return [
        EnrichedCommit(
            sha=c.sha,
            type=c.type,
            title=by_sha[c.sha].title.strip(),
            description=by_sha[c.sha].description.strip(),
            breaking=c.breaking,
        )
        for c in bucket
    ]


async def enrich_features(
    generator: TextGenerator,
    batch: CategorizedBatch,
    product_context: str,
) -> list[EnrichedCommit]:
    if not batch.features:
        return []

    response = await generator.generate_object(
        Stage.ENRICH_FEATURES,
        enrich_features_prompt(product_context, batch.features, batch.instructions),
        FeatureEnrichment,
    )
    by_sha = _index_entries(Stage.ENRICH_FEATURES, response.features, {c.sha for c in batch.features})
    return _rebuild_bucket(Stage.ENRICH_FEATURES, batch.features, by_sha)


async def enrich_fixes(
    generator: TextGenerator,
    batch: CategorizedBatch,
    product_context: str,
) -> tuple[list[EnrichedCommit], list[EnrichedCommit], list[EnrichedCommit]]:
    """Returns (fixes, performance, maintenance)."""
    if not (batch.fixes or batch.performance or batch.maintenance):
        return [], [], []

    response = await generator.generate_object(
        Stage.ENRICH_FIXES,
        enrich_fixes_prompt(
            product_context, batch.fixes, batch.performance, batch.maintenance, batch.instructions,
        ),
        FixEnrichment,
    )
    wanted = {c.sha for c in (*batch.fixes, *batch.performance, *batch.maintenance)}
    by_sha = _index_entries(
        Stage.ENRICH_FIXES,
        [*response.fixes, *response.performance, *response.maintenance],
        wanted,
    )
    return (
        _rebuild_bucket(Stage.ENRICH_FIXES, batch.fixes, by_sha),
        _rebuild_bucket(Stage.ENRICH_FIXES, batch.performance, by_sha),
        _rebuild_bucket(Stage.ENRICH_FIXES, batch.maintenance, by_sha),
    )

"""
Release Notes Forge — Run state and traceability records.

Every pipeline run produces a RunReport with per-stage timings,
logged when the run ends (successfully or not).
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field

from relnotes.models.notes import FinalResult


class Stage:
    """Stage ids, used in logs, timings and error codes."""

    PARSE = "parse-commits"
    COLLECT = "collect-commits"
    CLASSIFY = "classify-commits"
    CATEGORIZE = "categorize-commits"
    ENRICH_FEATURES = "enrich-features"
    ENRICH_FIXES = "enrich-fixes"
    DRAFT = "draft-release-notes"
    REFINE = "refine-notes"
    PASS_THROUGH = "pass-through"
    FINALIZE = "finalize-output"


class RunState(str, enum.Enum):
    RECEIVED = "RECEIVED"
    PARSED = "PARSED"
    CLASSIFIED = "CLASSIFIED"
    CATEGORIZED = "CATEGORIZED"
    ENRICHED = "ENRICHED"
    DRAFTED = "DRAFTED"
    REVIEWED = "REVIEWED"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"


class StepTiming(BaseModel):
    step: str
    duration_ms: int
    status: str = "ok"  # ok | skipped | failed
    detail: str = ""


class RunReport(BaseModel):
    run_id: str
    state: RunState
    timings: list[StepTiming] = Field(default_factory=list)
    result: FinalResult | None = None
    # Wall clock for the whole run; the enrichment branches overlap so
    # this is less than the sum of step timings.
    total_ms: int = 0

"""
Release Notes Forge — Run orchestrator.

Runs the release-notes pipeline as a state machine:

  RECEIVED → PARSED → CLASSIFIED → CATEGORIZED → ENRICHED
  → DRAFTED → REVIEWED → DELIVERED

Each step is timed, logged, and recorded in the RunReport. The two
enrichment branches run as concurrent tasks and are joined before
drafting; if one fails, the other is cancelled. Any failure moves the
run to FAILED and propagates: there is no partial result.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from typing import Awaitable, TypeVar

from relnotes.core.config import AppConfig, settings
from relnotes.errors import CommitSourceError
from relnotes.llm.base import TextGenerator
from relnotes.models.commit import (
    CategorizedBatch,
    ClassifiedCommit,
    CommitQuery,
    EnrichedNotes,
    RawCommit,
)
from relnotes.models.notes import Draft, FinalResult, GateOutcome
from relnotes.models.run import RunReport, RunState, Stage, StepTiming
from relnotes.pipeline.categorize import categorize
from relnotes.pipeline.classify import classify_commits
from relnotes.pipeline.draft import draft_release_notes
from relnotes.pipeline.enrich import enrich_features, enrich_fixes
from relnotes.pipeline.parse import parse_commit_query
from relnotes.pipeline.review import finalize, pass_through, quality_gate, refine_notes
from relnotes.pipeline.sources import CommitSource
from relnotes.utils.logging import run_logger, step_timer

T = TypeVar("T")


class RunContext:
    """Mutable context passed through pipeline steps."""

    def __init__(self, request_text: str):
        self.request_text = request_text
        self.query: CommitQuery | None = None
        self.raw_commits: list[RawCommit] = []
        self.classified: list[ClassifiedCommit] = []
        self.batch: CategorizedBatch | None = None
        self.enriched: EnrichedNotes | None = None
        self.draft: Draft | None = None
        self.outcome: GateOutcome | None = None
        self.result: FinalResult | None = None


class ReleaseNotesOrchestrator:
    """
    State-machine orchestrator for one release-notes run.

    The orchestrator owns no model or git logic; it sequences the stage
    functions and keeps timings. Instances are single-use.
    """

    def __init__(
        self,
        commit_log: str,
        generator: TextGenerator,
        commit_source: CommitSource,
        config: AppConfig = settings,
    ):
        self.run_id = uuid.uuid4().hex[:12]
        self.generator = generator
        self.commit_source = commit_source
        self.config = config
        self.state = RunState.RECEIVED
        self.ctx = RunContext(commit_log)
        self.timings: list[StepTiming] = []
        self.log = run_logger(self.run_id)
        self._active_step = Stage.PARSE
        self._step_start = time.perf_counter()
        self._started: float | None = None
        self._finished: float | None = None

    def _record_step(self, name: str, start: float, status: str = "ok", detail: str = ""):
        ms = int((time.perf_counter() - start) * 1000)
        self.timings.append(StepTiming(step=name, duration_ms=ms, status=status, detail=detail))
        symbol = "✓" if status == "ok" else ("⊘" if status == "skipped" else "✗")
        self.log.info("  %s %s — %dms %s", symbol, name, ms, detail)

    def _begin(self, step: str) -> float:
        self._active_step = step
        self._step_start = time.perf_counter()
        return self._step_start

    def report(self) -> RunReport:
        return RunReport(
            run_id=self.run_id,
            state=self.state,
            timings=list(self.timings),
            result=self.ctx.result,
            total_ms=self._elapsed_ms(),
        )

    def _elapsed_ms(self) -> int:
        if self._started is None:
            return 0
        end = self._finished if self._finished is not None else time.perf_counter()
        return int((end - self._started) * 1000)

    def _log_report(self):
        report = self.report()
        self.log.info(
            "Run report: state=%s total=%dms [%s]",
            report.state.value, report.total_ms,
            ", ".join(f"{t.step}={t.duration_ms}ms/{t.status}" for t in report.timings),
        )

    async def run(self) -> FinalResult:
        """Execute the full pipeline. Returns the API payload."""
        self.log.info("=" * 60)
        self.log.info(
            "Pipeline starting (source=%s, generator=%s)",
            self.commit_source.name, self.generator.provider_name,
        )
        self.log.info("=" * 60)
        self._started = time.perf_counter()

        try:
            await self._step_parse()
            await self._step_collect()
            await self._step_classify()
            await self._step_categorize()
            await self._step_enrich()
            await self._step_draft()
            await self._step_review()
            await self._step_finalize()
            self.state = RunState.DELIVERED
        except BaseException as exc:
            self.state = RunState.FAILED
            self._record_step(self._active_step, self._step_start, "failed", type(exc).__name__)
            self._finished = time.perf_counter()
            self.log.error("Pipeline failed in %s after %dms: %s", self._active_step, self._elapsed_ms(), exc)
            self._log_report()
            raise

        self._finished = time.perf_counter()
        self.log.info("=" * 60)
        self.log.info(
            "Pipeline complete — %s, refined=%s, %d chars, %dms",
            self.ctx.result.version, self.ctx.result.refined, len(self.ctx.result.result), self._elapsed_ms(),
        )
        self.log.info("=" * 60)
        self._log_report()
        return self.ctx.result

    async def _step_parse(self):
        t = self._begin(Stage.PARSE)
        self.ctx.query = parse_commit_query(self.ctx.request_text)
        self.state = RunState.PARSED
        q = self.ctx.query
        self._record_step(
            Stage.PARSE, t,
            detail=f"{q.from_ref}..{q.to_ref} instructions={'yes' if q.instructions else 'no'}",
        )

    async def _step_collect(self):
        t = self._begin(Stage.COLLECT)
        self.ctx.raw_commits = await self.commit_source.list_commits(self.ctx.query)
        if not self.ctx.raw_commits:
            q = self.ctx.query
            raise CommitSourceError(f"No commits found in range {q.from_ref}..{q.to_ref}")
        self._record_step(Stage.COLLECT, t, detail=f"{len(self.ctx.raw_commits)} commits")

    async def _step_classify(self):
        t = self._begin(Stage.CLASSIFY)
        with step_timer(Stage.CLASSIFY, self.log):
            self.ctx.classified = await classify_commits(
                self.generator, self.ctx.raw_commits, self.config.product_context,
            )
        self.state = RunState.CLASSIFIED
        self._record_step(Stage.CLASSIFY, t, detail=f"{len(self.ctx.classified)} classified")

    async def _step_categorize(self):
        t = self._begin(Stage.CATEGORIZE)
        batch = categorize(self.ctx.query, self.ctx.classified, self.config.current_version or None)
        self.ctx.batch = batch
        self.state = RunState.CATEGORIZED
        self._record_step(
            Stage.CATEGORIZE, t,
            detail=(
                f"feat={len(batch.features)} fix={len(batch.fixes)} perf={len(batch.performance)} "
                f"maint={len(batch.maintenance)} → {batch.version_bump.value} {batch.suggested_version}"
            ),
        )

    async def _timed_branch(self, stage: str, call: Awaitable[T], empty: bool) -> T:
        t = time.perf_counter()
        if empty:
            result = await call
            self._record_step(stage, t, "skipped", "no commits")
            return result
        with step_timer(stage, self.log):
            result = await call
        self._record_step(stage, t)
        return result

    async def _step_enrich(self):
        self._begin(f"{Stage.ENRICH_FEATURES} ∥ {Stage.ENRICH_FIXES}")
        batch = self.ctx.batch
        context = self.config.product_context

        tasks = [
            asyncio.create_task(
                self._timed_branch(
                    Stage.ENRICH_FEATURES,
                    enrich_features(self.generator, batch, context),
                    empty=not batch.features,
                )
            ),
            asyncio.create_task(
                self._timed_branch(
                    Stage.ENRICH_FIXES,
                    enrich_fixes(self.generator, batch, context),
                    empty=not (batch.fixes or batch.performance or batch.maintenance),
                )
            ),
        ]
        try:
            features, (fixes, performance, maintenance) = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        self.ctx.enriched = EnrichedNotes(
            features=features,
            fixes=fixes,
            performance=performance,
            maintenance=maintenance,
        )
        self.state = RunState.ENRICHED

    async def _step_draft(self):
        t = self._begin(Stage.DRAFT)
        with step_timer(Stage.DRAFT, self.log):
            self.ctx.draft = await draft_release_notes(
                self.generator,
                self.ctx.batch,
                self.ctx.enriched,
                request_text=self.ctx.request_text,
                product_context=self.config.product_context,
                release_date=self.config.release_date,
            )
        self.state = RunState.DRAFTED
        d = self.ctx.draft
        self._record_step(
            Stage.DRAFT, t,
            detail=f"complete={d.is_complete} suggestions={len(d.suggestions)} {len(d.markdown)} chars",
        )

    async def _step_review(self):
        draft = self.ctx.draft
        if quality_gate(draft) == "refine":
            t = self._begin(Stage.REFINE)
            with step_timer(Stage.REFINE, self.log):
                self.ctx.outcome = await refine_notes(self.generator, draft)
        else:
            t = self._begin(Stage.PASS_THROUGH)
            self.ctx.outcome = pass_through(draft)
        self.state = RunState.REVIEWED
        self._record_step(self._active_step, t, detail=f"outcome={self.ctx.outcome.kind}")

    async def _step_finalize(self):
        t = self._begin(Stage.FINALIZE)
        self.ctx.result = finalize(self.ctx.outcome)
        self._record_step(Stage.FINALIZE, t, detail=f"refined={self.ctx.result.refined}")


async def generate_release_notes(
    commit_log: str,
    generator: TextGenerator,
    commit_source: CommitSource,
    config: AppConfig = settings,
) -> FinalResult:
    """Convenience wrapper — run one pipeline and return just the payload."""
    orchestrator = ReleaseNotesOrchestrator(commit_log, generator, commit_source, config)
    return await orchestrator.run()

"""
Release Notes Forge — FastAPI Backend

Endpoints:
  POST /api/query   — commit log text → Markdown release notes
  GET  /health      — Health check
  GET  /            — Redirect to the interactive API docs
"""

import json
import time
from functools import lru_cache
from typing import Callable

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from relnotes.core.config import settings
from relnotes.errors import InputValidationError, ReleaseNotesError, UnreachableBranchError
from relnotes.llm.base import TextGenerator
from relnotes.llm.gemini import build_generator
from relnotes.models.notes import FinalResult
from relnotes.pipeline.orchestrator import ReleaseNotesOrchestrator
from relnotes.pipeline.sources import CommitSource, build_commit_source
from relnotes.utils.logging import logger

SERVICE_VERSION = "1.0.0"
WORKFLOW_FAILED = {"error": "Workflow execution failed"}


app = FastAPI(
    title="Release Notes Generator API",
    description=(
        "Runs the multi-step release notes workflow: parse → categorize → "
        "parallel enrich → draft → quality-branch → finalize. Pass a commit "
        "range and optional instructions; receive polished Markdown release notes."
    ),
    version=SERVICE_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-Id", "X-Pipeline-Duration-Ms"],
)


@app.on_event("startup")
async def _startup_banner():
    logger.info("")
    logger.info("╔══════════════════════════════════════════════════╗")
    logger.info("║        Release Notes Forge  ·  API Server        ║")
    logger.info("╠══════════════════════════════════════════════════╣")
    logger.info("║  POST /api/query  → Release notes (Markdown)     ║")
    logger.info("║  GET  /health     → Health check                 ║")
    logger.info("║  GET  /docs       → Swagger UI                   ║")
    logger.info("╠══════════════════════════════════════════════════╣")
    logger.info("║  Writer model : %-33s║", settings.llm.writer_model)
    logger.info("║  Classifier   : %-33s║", settings.llm.classify_model)
    logger.info("║  Commits from : %-33s║", settings.commits.kind)
    logger.info(
        "║  Credentials  : %-33s║",
        "✓ loaded" if settings.llm.api_key else "✗ GOOGLE_API_KEY missing",
    )
    logger.info("╚══════════════════════════════════════════════════╝")
    logger.info("")


# ──────────────────────────────────────────────────────────
# Dependencies
# ──────────────────────────────────────────────────────────

@lru_cache(maxsize=1)
def default_generator() -> TextGenerator:
    return build_generator(settings)


def get_generator_provider() -> Callable[[], TextGenerator]:
    """
    Hand out a provider instead of the generator itself, so a missing API
    key only surfaces once a valid request actually needs the model.
    """
    return default_generator


def get_commit_source() -> CommitSource:
    return build_commit_source(settings)


async def _read_commit_log(request: Request) -> str:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InputValidationError()
    if not isinstance(body, dict):
        raise InputValidationError()
    commit_log = body.get("commitLog")
    if not commit_log or not isinstance(commit_log, str):
        raise InputValidationError()
    return commit_log


# ──────────────────────────────────────────────────────────
# Endpoints
# ──────────────────────────────────────────────────────────

@app.get("/health")
async def health():
    return {"status": "ok", "service": "relnotes-api", "version": SERVICE_VERSION}


@app.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/docs")


@app.post(
    "/api/query",
    summary="Generate release notes",
    response_model=FinalResult,
    responses={
        200: {"description": "Release notes generated successfully"},
        400: {"description": "Missing or invalid commitLog field"},
        500: {"description": "Workflow execution failed"},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "schema": {
                        "type": "object",
                        "required": ["commitLog"],
                        "properties": {
                            "commitLog": {
                                "type": "string",
                                "description": "Commit range and optional instructions.",
                                "example": "commits f59ffed..9f130dd",
                            },
                        },
                    },
                },
            },
        },
    },
)
async def query(
    request: Request,
    generator_provider: Callable[[], TextGenerator] = Depends(get_generator_provider),
    commit_source: CommitSource = Depends(get_commit_source),
):
    """
    Run the release-notes workflow over the requested commit range.

    Any failure after input validation returns the same generic 500 body.
    The error code and failing stage only go to the log.
    """
    try:
        commit_log = await _read_commit_log(request)
    except InputValidationError as exc:
        logger.info("POST /api/query rejected: %s", exc.message)
        return JSONResponse(status_code=400, content={"error": exc.message})

    start = time.perf_counter()
    request_id = "-"
    try:
        orchestrator = ReleaseNotesOrchestrator(
            commit_log=commit_log,
            generator=generator_provider(),
            commit_source=commit_source,
        )
        request_id = orchestrator.run_id
        logger.info("[%s] POST /api/query — %d chars", request_id, len(commit_log))
        result = await orchestrator.run()
    except UnreachableBranchError as exc:
        logger.critical("[%s] Pipeline defect: %s", request_id, exc.to_dict())
        return JSONResponse(status_code=500, content=WORKFLOW_FAILED)
    except ReleaseNotesError as exc:
        logger.error("[%s] Workflow failed: %s", request_id, exc.to_dict())
        return JSONResponse(status_code=500, content=WORKFLOW_FAILED)
    except Exception:
        logger.exception("[%s] Workflow execution failed", request_id)
        return JSONResponse(status_code=500, content=WORKFLOW_FAILED)

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info("[%s] Complete — %s refined=%s in %.0f ms", request_id, result.version, result.refined, elapsed_ms)

    return JSONResponse(
        content=result.model_dump(),
        headers={
            "X-Request-Id": request_id,
            "X-Pipeline-Duration-Ms": f"{elapsed_ms:.0f}",
        },
    )

"""Shared test configuration and fixtures for the Release Notes Forge test suite."""

import asyncio
import json
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

# Add backend to Python path so imports work
backend_dir = str(Path(__file__).parent.parent / "backend")
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

from relnotes.core.config import AppConfig, CommitSourceConfig, LLMConfig  # noqa: E402
from relnotes.llm.base import TextGenerator  # noqa: E402
from relnotes.models.commit import RawCommit  # noqa: E402
from relnotes.models.run import Stage  # noqa: E402
from relnotes.pipeline.sources import SampleCommitSource  # noqa: E402


class ScriptedGenerator(TextGenerator):
    """
    TextGenerator that replays canned answers per stage.

    responses: stage → list of replies (dicts are JSON-encoded, strings are
    returned verbatim). failures: stage → exception to raise. delays:
    stage → seconds to sleep before answering.
    """

    provider_name = "scripted"

    def __init__(self, responses=None, failures=None, delays=None, timeout=5.0):
        super().__init__(timeout=timeout)
        self.responses = {stage: list(replies) for stage, replies in (responses or {}).items()}
        self.failures = failures or {}
        self.delays = delays or {}
        self.calls: list[tuple[str, str]] = []
        self.cancelled: list[str] = []

    @property
    def stages(self) -> list[str]:
        return [stage for stage, _ in self.calls]

    async def _reply(self, stage: str, prompt: str) -> str:
        self.calls.append((stage, prompt))
        try:
            if stage in self.delays:
                await asyncio.sleep(self.delays[stage])
        except asyncio.CancelledError:
            self.cancelled.append(stage)
            raise
        if stage in self.failures:
            raise self.failures[stage]
        queue = self.responses.get(stage)
        if not queue:
            raise RuntimeError(f"no scripted reply for stage {stage}")
        reply = queue.pop(0)
        return reply if isinstance(reply, str) else json.dumps(reply)

    async def complete_json(self, stage, prompt, schema):
        return await self._reply(stage, prompt)

    async def complete_text(self, stage, prompt):
        return await self._reply(stage, prompt)


# Five commits: one feature, one fix, one perf, two maintenance.
SPRINT = [
    RawCommit(sha="a23ebf4", raw_message="oauth implementation"),
    RawCommit(sha="c41a2b0", raw_message="fixed google oauth"),
    RawCommit(sha="cfab29e", raw_message="added new caching logic to optimize response time for chat experience"),
    RawCommit(sha="3583104", raw_message="new database migration added"),
    RawCommit(sha="dd8c5a2", raw_message="Add load tests for simulation module"),
]

CLASSIFIED = {
    "commits": [
        {"sha": "a23ebf4", "type": "feat", "message": "OAuth implementation", "breaking": False},
        {"sha": "c41a2b0", "type": "fix", "message": "Fixed Google OAuth", "breaking": False},
        {"sha": "cfab29e", "type": "perf", "message": "Caching for chat responses", "breaking": False},
        {"sha": "3583104", "type": "chore", "message": "New database migration", "breaking": False},
        {"sha": "dd8c5a2", "type": "test", "message": "Load tests for simulation module", "breaking": False},
    ]
}

FEATURES = {
    "features": [
        {"sha": "a23ebf4", "title": "OAuth Sign-In", "description": "Users can sign in with their Google account."},
    ]
}

FIXES = {
    "fixes": [
        {"sha": "c41a2b0", "title": "Google OAuth Callback", "description": "Sign-in no longer fails after consent."},
    ],
    "performance": [
        {"sha": "cfab29e", "title": "Faster Chat Responses", "description": "Chat replies are cached per session."},
    ],
    "maintenance": [
        {"sha": "3583104", "title": "Database Migration", "description": "Adds the notification tables."},
        {"sha": "dd8c5a2", "title": "Simulation Load Tests", "description": "Covers the simulation module."},
    ],
}

DRAFT_MARKDOWN = (
    "## v2.1.0 — December 2025\n\n"
    "### ✨ Features\n- **OAuth Sign-In**: Users can sign in with their Google account.\n\n"
    "### 🐛 Bug Fixes\n- **Google OAuth Callback**: Sign-in no longer fails after consent."
)

COMPLETE_DRAFT = {"markdown": DRAFT_MARKDOWN, "version": "v2.1.0", "is_complete": True, "suggestions": []}

INCOMPLETE_DRAFT = {
    "markdown": DRAFT_MARKDOWN,
    "version": "v2.1.0",
    "is_complete": False,
    "suggestions": ["Add the performance section", "Mention the migration"],
}

REFINED_MARKDOWN = DRAFT_MARKDOWN + "\n\n### ⚡ Performance\n- **Faster Chat Responses**: Chat replies are cached."


def sprint_responses(draft=COMPLETE_DRAFT, refined=REFINED_MARKDOWN) -> dict:
    return {
        Stage.CLASSIFY: [CLASSIFIED],
        Stage.ENRICH_FEATURES: [FEATURES],
        Stage.ENRICH_FIXES: [FIXES],
        Stage.DRAFT: [draft],
        Stage.REFINE: [refined],
    }


@pytest.fixture(scope="session")
def project_root():
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def schemas_dir(project_root):
    return project_root / "schemas"


@pytest.fixture
def test_config():
    return AppConfig(
        host="127.0.0.1",
        port=3001,
        debug=False,
        llm=LLMConfig(
            api_key="test-key",
            classify_model="gemini-2.0-flash-lite",
            writer_model="gemini-2.0-flash",
            timeout=5.0,
            temperature=0.2,
        ),
        commits=CommitSourceConfig(kind="sample", repo_path="."),
        product_context="n-aible, an AI-powered EdTech simulation platform",
        current_version="",
        release_date="2025-12",
    )


@pytest.fixture
def sprint_source():
    return SampleCommitSource(SPRINT)


@pytest.fixture
def scripted():
    """Factory: scripted(responses=..., failures=..., delays=...)."""
    return ScriptedGenerator


@pytest.fixture
def canned():
    """The five-commit sprint and the model replies that go with it."""
    return SimpleNamespace(
        sprint=SPRINT,
        classified=CLASSIFIED,
        features=FEATURES,
        fixes=FIXES,
        draft_markdown=DRAFT_MARKDOWN,
        complete_draft=COMPLETE_DRAFT,
        incomplete_draft=INCOMPLETE_DRAFT,
        refined_markdown=REFINED_MARKDOWN,
        responses=sprint_responses,
    )

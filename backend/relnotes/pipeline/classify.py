"""
Release Notes Forge — Commit classifier.

The only step that needs semantic judgment about raw commits. The model
assigns each commit a conventional type; this module then holds the
answer to the contract:

  - exactly one ClassifiedCommit per RawCommit, in input order
    (matched by sha; commits the model skipped are a schema failure,
    shas it invented are dropped)
  - no "type(scope):" prefix left in the message
  - commits explicitly marked breaking ("feat!:", "BREAKING CHANGE")
    stay breaking whatever the model said
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

from relnotes.errors import SchemaMismatchError
from relnotes.llm.base import TextGenerator
from relnotes.llm.prompts import classify_prompt
from relnotes.models.commit import ClassifiedCommit, RawCommit
from relnotes.models.run import Stage
from relnotes.utils.logging import logger

CONVENTIONAL_PREFIX = re.compile(
    r"^\s*(?:feat|fix|perf|chore|docs|refactor|test|build|ci|style|revert)(?:\([^)]*\))?(!)?:\s*",
    re.IGNORECASE,
)
BREAKING_TOKEN = re.compile(r"\bBREAKING[ -]CHANGE\b", re.IGNORECASE)


class ClassificationResponse(BaseModel):
    commits: list[ClassifiedCommit] = Field(default_factory=list)


def strip_type_prefix(message: str) -> str:
    cleaned = CONVENTIONAL_PREFIX.sub("", message, count=1).strip()
    return cleaned or message.strip()


def is_explicitly_breaking(raw_message: str) -> bool:
    match = CONVENTIONAL_PREFIX.match(raw_message)
    if match and match.group(1):
        return True
    return bool(BREAKING_TOKEN.search(raw_message))


def align_classifications(
    raw_commits: list[RawCommit],
    classified: list[ClassifiedCommit],
) -> list[ClassifiedCommit]:
    by_sha: dict[str, ClassifiedCommit] = {}
    for c in classified:
        by_sha.setdefault(c.sha, c)

    wanted = {r.sha for r in raw_commits}
    extra = sorted(set(by_sha) - wanted)
    if extra:
        logger.warning("  %s: ignoring unknown shas %s", Stage.CLASSIFY, ", ".join(extra))

    missing = [r.sha for r in raw_commits if r.sha not in by_sha]
    if missing:
        raise SchemaMismatchError(Stage.CLASSIFY, [f"no classification for commit {sha}" for sha in missing])

    aligned: list[ClassifiedCommit] = []
    for raw in raw_commits:
        c = by_sha[raw.sha]
        aligned.append(
            ClassifiedCommit(
                sha=raw.sha,
                type=c.type,
                message=strip_type_prefix(c.message or raw.raw_message),
                breaking=c.breaking or is_explicitly_breaking(raw.raw_message),
            )
        )
    return aligned


async def classify_commits(
    generator: TextGenerator,
    raw_commits: list[RawCommit],
    product_context: str,
) -> list[ClassifiedCommit]:
    response = await generator.generate_object(
        Stage.CLASSIFY,
        classify_prompt(product_context, raw_commits),
        ClassificationResponse,
    )
    return align_classifications(raw_commits, response.commits)

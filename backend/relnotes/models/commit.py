"""
Release Notes Forge — Commit-side data model.

Every pipeline stage receives these frozen models instead of raw dicts.
A model, once built, is never mutated; later stages build new ones.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field


class CommitType(str, enum.Enum):
    FEAT = "feat"
    FIX = "fix"
    PERF = "perf"
    CHORE = "chore"
    DOCS = "docs"
    REFACTOR = "refactor"
    TEST = "test"


MAINTENANCE_TYPES = frozenset({CommitType.CHORE, CommitType.DOCS, CommitType.REFACTOR, CommitType.TEST})


class VersionBump(str, enum.Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


class RawCommit(BaseModel):
    model_config = ConfigDict(frozen=True)

    sha: str = Field(min_length=1, max_length=64)
    raw_message: str


class ClassifiedCommit(BaseModel):
    model_config = ConfigDict(frozen=True)

    sha: str = Field(min_length=1, max_length=64)
    type: CommitType
    message: str
    breaking: bool = False


class CommitQuery(BaseModel):
    """What the caller asked for: a commit range plus free-text instructions."""

    model_config = ConfigDict(frozen=True)

    from_ref: str = "HEAD~12"
    to_ref: str = "HEAD"
    instructions: str = ""


class CategorizedBatch(BaseModel):
    """
    Classified commits partitioned into release-note buckets.

    Every classified commit lands in exactly one of the four lists.
    """

    model_config = ConfigDict(frozen=True)

    from_ref: str
    to_ref: str
    instructions: str = ""
    features: list[ClassifiedCommit] = Field(default_factory=list)
    fixes: list[ClassifiedCommit] = Field(default_factory=list)
    performance: list[ClassifiedCommit] = Field(default_factory=list)
    maintenance: list[ClassifiedCommit] = Field(default_factory=list)
    version_bump: VersionBump
    suggested_version: str

    @property
    def total(self) -> int:
        return len(self.features) + len(self.fixes) + len(self.performance) + len(self.maintenance)


class EnrichedCommit(BaseModel):
    model_config = ConfigDict(frozen=True)

    sha: str
    type: CommitType
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    breaking: bool = False


class EnrichedNotes(BaseModel):
    """Joined output of the two enrichment branches."""

    model_config = ConfigDict(frozen=True)

    features: list[EnrichedCommit] = Field(default_factory=list)
    fixes: list[EnrichedCommit] = Field(default_factory=list)
    performance: list[EnrichedCommit] = Field(default_factory=list)
    maintenance: list[EnrichedCommit] = Field(default_factory=list)

"""
Release Notes Forge — Categorizer.

Pure, deterministic step: partition classified commits into
release-note buckets and decide the semantic version bump.

Bump precedence:
  any breaking commit  → major
  any feat commit      → minor
  otherwise            → patch
"""

from __future__ import annotations

import re

from relnotes.errors import ConfigurationError
from relnotes.models.commit import (
    MAINTENANCE_TYPES,
    CategorizedBatch,
    ClassifiedCommit,
    CommitQuery,
    CommitType,
    VersionBump,
)

# Used when no current version is configured.
FIXED_VERSIONS = {
    VersionBump.MAJOR: "v3.0.0",
    VersionBump.MINOR: "v2.1.0",
    VersionBump.PATCH: "v2.0.1",
}

SEMVER_PATTERN = re.compile(r"^(v?)(\d+)\.(\d+)\.(\d+)([-+][\w.\-+]*)?$")


def determine_bump(commits: list[ClassifiedCommit]) -> VersionBump:
    if any(c.breaking for c in commits):
        return VersionBump.MAJOR
    if any(c.type == CommitType.FEAT for c in commits):
        return VersionBump.MINOR
    return VersionBump.PATCH


def suggest_version(bump: VersionBump, current_version: str | None = None) -> str:
    """
    Version string for the release.

    With a current version ("v2.0.0", "1.4.2-rc.1"), returns the real
    semver increment, keeping its "v" prefix if present and dropping any
    pre-release/build suffix. A pre-release is released as-is when the
    bump does not reach past its level: "2.0.0-rc.1" + major is "2.0.0",
    "1.4.2-rc.1" + minor is "1.5.0". Without a current version, falls back
    to the fixed table.
    """
    if not current_version:
        return FIXED_VERSIONS[bump]

    match = SEMVER_PATTERN.match(current_version.strip())
    if not match:
        raise ConfigurationError([f"CURRENT_VERSION (not a semantic version: {current_version!r})"])

    prefix = match.group(1)
    major, minor, patch = (int(match.group(i)) for i in (2, 3, 4))
    if (match.group(5) or "").startswith("-") and (
        bump == VersionBump.PATCH
        or (bump == VersionBump.MINOR and patch == 0)
        or (bump == VersionBump.MAJOR and minor == patch == 0)
    ):
        return f"{prefix}{major}.{minor}.{patch}"
    if bump == VersionBump.MAJOR:
        major, minor, patch = major + 1, 0, 0
    elif bump == VersionBump.MINOR:
        minor, patch = minor + 1, 0
    else:
        patch += 1
    return f"{prefix}{major}.{minor}.{patch}"


def categorize(
    query: CommitQuery,
    commits: list[ClassifiedCommit],
    current_version: str | None = None,
) -> CategorizedBatch:
    features = [c for c in commits if c.type == CommitType.FEAT]
    fixes = [c for c in commits if c.type == CommitType.FIX]
    performance = [c for c in commits if c.type == CommitType.PERF]
    maintenance = [c for c in commits if c.type in MAINTENANCE_TYPES]

    bump = determine_bump(commits)
    return CategorizedBatch(
        from_ref=query.from_ref,
        to_ref=query.to_ref,
        instructions=query.instructions,
        features=features,
        fixes=fixes,
        performance=performance,
        maintenance=maintenance,
        version_bump=bump,
        suggested_version=suggest_version(bump, current_version),
    )

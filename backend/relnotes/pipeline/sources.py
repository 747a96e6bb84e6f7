"""
Release Notes Forge — Commit sources.

A CommitSource turns a commit range into RawCommits:

  SampleCommitSource — a fixed sprint of real commits, so the service
                       runs without a repository checked out.
  GitCommitSource    — `git log from..to` in a local checkout.
"""

from __future__ import annotations

import asyncio
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from relnotes.core.config import AppConfig
from relnotes.errors import CommitSourceError
from relnotes.models.commit import CommitQuery, RawCommit
from relnotes.utils.logging import logger

# Real commits from github.com/Hendrik040/n-aible_edtech_sims (Dec 2025 sprint)
SAMPLE_COMMITS: tuple[RawCommit, ...] = tuple(
    RawCommit(sha=sha, raw_message=msg)
    for sha, msg in [
        ("f59ffed", "updated stuff"),
        ("c300d63", "added static worker ID logic for redis db caching"),
        ("718bf11", "removed Redis KEY logic"),
        ("efc056f", "adding some load testing"),
        ("34deabf", "added testing and password hash optimization"),
        ("3583104", "new database migration added"),
        ("cfab29e", "added new caching logic to optimize response time for chat experience"),
        ("a23ebf4", "oauth implementation"),
        ("c41a2b0", "fixed google oauth"),
        ("d5f451b", "big commit with heaps of changes (notification module)"),
        ("dd8c5a2", "Add load tests for simulation module"),
        ("9f130dd", "Merge PR #240: Optimize Database Connections & Queries"),
    ]
)

# Unit/record separators keep subjects with arbitrary punctuation intact.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
GIT_LOG_FORMAT = f"--format=%h{_FIELD_SEP}%s{_RECORD_SEP}"


class CommitSource(ABC):
    name = "abstract"

    @abstractmethod
    async def list_commits(self, query: CommitQuery) -> list[RawCommit]:
        """Return the raw commits in the query's range, oldest first."""


class SampleCommitSource(CommitSource):
    """Ignores the requested range and always returns the sample sprint."""

    name = "sample"

    def __init__(self, commits: tuple[RawCommit, ...] | list[RawCommit] = SAMPLE_COMMITS):
        self.commits = list(commits)

    async def list_commits(self, query: CommitQuery) -> list[RawCommit]:
        return list(self.commits)


def parse_git_log(output: str) -> list[RawCommit]:
    """Parse `git log` output produced with GIT_LOG_FORMAT."""
    commits: list[RawCommit] = []
    for record in output.split(_RECORD_SEP):
        record = record.strip()
        if not record:
            continue
        sha, _, subject = record.partition(_FIELD_SEP)
        commits.append(RawCommit(sha=sha.strip(), raw_message=subject.strip()))
    return commits


class GitCommitSource(CommitSource):
    name = "git"

    def __init__(self, repo_path: str | Path = "."):
        self.repo_path = Path(repo_path)

    def _run_git(self, *args: str) -> str:
        try:
            result = subprocess.run(
                ["git", "-C", str(self.repo_path), *args],
                capture_output=True,
                text=True,
                check=True,
                encoding="utf-8",
                errors="replace",
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise CommitSourceError(
                f"Git command failed: git {' '.join(args)}",
                detail=(e.stderr or "").strip()[:500] or None,
            )
        except FileNotFoundError:
            raise CommitSourceError("Git is not installed or not in PATH")

    async def list_commits(self, query: CommitQuery) -> list[RawCommit]:
        rev_range = f"{query.from_ref}..{query.to_ref}"
        output = await asyncio.to_thread(self._run_git, "log", "--reverse", GIT_LOG_FORMAT, rev_range)
        commits = parse_git_log(output)
        logger.info("  git log %s → %d commits (%s)", rev_range, len(commits), self.repo_path)
        return commits


def build_commit_source(cfg: AppConfig) -> CommitSource:
    if cfg.commits.kind == "git":
        return GitCommitSource(cfg.commits.repo_path)
    return SampleCommitSource()

"""
Release Notes Forge — Commit query parser.

The request body is free text. Its first line may name a commit range
("commits f59ffed..9f130dd"); the remaining lines are instructions for
the writer, optionally labelled "Additional instructions:".
Parsing never fails: anything unrecognised falls back to defaults.
"""

from __future__ import annotations

import re

from relnotes.models.commit import CommitQuery

DEFAULT_FROM_REF = "HEAD~12"
DEFAULT_TO_REF = "HEAD"

RANGE_PATTERN = re.compile(r"commits?\s+([a-f0-9]+)\.\.([a-f0-9]+)", re.IGNORECASE)
INSTRUCTIONS_LABEL = re.compile(r"^\s*Additional instructions:\s*", re.IGNORECASE)


def parse_commit_query(text: str) -> CommitQuery:
    lines = text.split("\n")

    match = RANGE_PATTERN.search(lines[0])
    from_ref = match.group(1) if match else DEFAULT_FROM_REF
    to_ref = match.group(2) if match else DEFAULT_TO_REF

    rest = "\n".join(lines[1:])
    instructions = INSTRUCTIONS_LABEL.sub("", rest, count=1).strip()

    return CommitQuery(from_ref=from_ref, to_ref=to_ref, instructions=instructions)

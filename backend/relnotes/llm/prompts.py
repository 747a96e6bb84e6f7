"""
Release Notes Forge — Prompt builders, one per model-backed stage.

Prompts are plain f-strings. The JSON Schema of the expected answer is
appended by the generator, so builders only describe the task.
"""

from __future__ import annotations

from relnotes.models.commit import ClassifiedCommit, EnrichedCommit, RawCommit

# Heading template the drafter and refiner must reproduce. Consumers of the
# API split the result on these exact headings.
SECTION_HEADINGS = {
    "features": "### ✨ Features",
    "fixes": "### 🐛 Bug Fixes",
    "performance": "### ⚡ Performance",
    "maintenance": "### 🔧 Maintenance",
}

COMMIT_TAXONOMY = """\
- feat: new features or capabilities
- fix: bug fixes
- perf: performance improvements
- chore: maintenance, deps, migrations, infra
- docs: documentation
- refactor: code restructuring
- test: tests added or changed"""


def _instructions_block(instructions: str) -> str:
    return f"\nAdditional instructions: {instructions}\n" if instructions else ""


def _commit_lines(commits: list[ClassifiedCommit], indent: str = "") -> str:
    return "\n".join(f"{indent}{c.sha}: {c.message}" for c in commits) or f"{indent}(none)"


def _entry_lines(entries: list[EnrichedCommit]) -> str:
    lines = []
    for e in entries:
        marker = " [BREAKING]" if e.breaking else ""
        lines.append(f"- {e.title}{marker}: {e.description}")
    return "\n".join(lines) or "(none)"


def classify_prompt(product_context: str, commits: list[RawCommit]) -> str:
    listing = "\n".join(f"{c.sha}: {c.raw_message}" for c in commits)
    return f"""You are processing git commit messages for {product_context}.

Classify each commit into a structured object. Infer the conventional commit type from context:
{COMMIT_TAXONOMY}

Commits to classify:
{listing}

For each commit return: sha (unchanged), type, cleaned message (readable, no "feat:" prefix),
breaking (true only if the commit explicitly says it is a breaking change).
Return exactly one object per commit, in the order given."""


def enrich_features_prompt(product_context: str, features: list[ClassifiedCommit], instructions: str) -> str:
    return f"""You are writing release notes for {product_context}.
Transform these feature commits into polished, user-friendly release note entries.
Write for a technical-but-product-aware audience. Be specific about user impact.
{_instructions_block(instructions)}
Feature commits:
{_commit_lines(features)}

For each commit, write:
- sha: the commit sha, unchanged
- title: 3–6 words, no "feat:" prefix, title-case
- description: 1–2 sentences explaining the user value or impact"""


def enrich_fixes_prompt(
    product_context: str,
    fixes: list[ClassifiedCommit],
    performance: list[ClassifiedCommit],
    maintenance: list[ClassifiedCommit],
    instructions: str,
) -> str:
    return f"""You are writing release notes for {product_context}.
Transform these commits into polished release note entries. Group them correctly.
{_instructions_block(instructions)}
Bug fixes [fix]:
{_commit_lines(fixes, "  ")}

Performance [perf]:
{_commit_lines(performance, "  ")}

Maintenance [chore/docs/refactor/test]:
{_commit_lines(maintenance, "  ")}

For each commit:
- sha: the commit sha, unchanged
- title: 3–6 words, title-case, no prefix
- description: 1 sentence, technical but clear
Place each commit in the matching output array (fixes / performance / maintenance)."""


def draft_prompt(
    product_context: str,
    version: str,
    release_month: str,
    request_text: str,
    instructions: str,
    features: list[EnrichedCommit],
    fixes: list[EnrichedCommit],
    performance: list[EnrichedCommit],
    maintenance: list[EnrichedCommit],
) -> str:
    h = SECTION_HEADINGS
    return f"""You are finalizing release notes for {product_context}.

Assemble these enriched commits into polished Markdown release notes using this format:

## {version} — {release_month}

{h["features"]}
- **Title**: Description.

{h["fixes"]}
- **Title**: Description.

{h["performance"]}
- **Title**: Description.

{h["maintenance"]}
- Item.

(Omit sections with no entries. Mark breaking changes clearly.)

Original request context: {request_text}
{_instructions_block(instructions)}
Features:
{_entry_lines(features)}

Bug Fixes:
{_entry_lines(fixes)}

Performance:
{_entry_lines(performance)}

Maintenance:
{_entry_lines(maintenance)}

Use "{version}" as the version and {release_month} as the release date.
Set is_complete to true if the notes are comprehensive and clear, with an empty suggestions list.
Otherwise set is_complete to false and list specific, actionable suggestions."""


def refine_prompt(markdown: str, suggestions: list[str]) -> str:
    numbered = "\n".join(f"{i}. {s}" for i, s in enumerate(suggestions, start=1))
    return f"""Improve these release notes by addressing each suggestion below.
Keep the same Markdown format and version header. Return only the improved release notes.

Current release notes:
{markdown}

Suggestions to address:
{numbered}"""

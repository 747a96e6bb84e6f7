"""
Release Notes Forge — Structured error catalog.

Every error has a code, human message, and suggested fix.
No raw exceptions leak to the HTTP caller; the API collapses
all pipeline failures into one generic response and logs the code.
"""

from __future__ import annotations

from typing import Any


class ReleaseNotesError(Exception):
    """Base error with structured code + suggestion."""

    def __init__(self, code: str, message: str, suggestion: str = "", detail: Any = None):
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.detail = detail
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "error_code": self.code,
            "message": self.message,
        }
        if self.suggestion:
            d["suggestion"] = self.suggestion
        if self.detail:
            d["detail"] = self.detail
        return d


class InputValidationError(ReleaseNotesError):
    def __init__(self, reason: str = "commitLog is required"):
        super().__init__(
            code="COMMIT_LOG_REQUIRED",
            message=reason,
            suggestion='Send a JSON body like {"commitLog": "commits f59ffed..9f130dd"}.',
        )


class ConfigurationError(ReleaseNotesError):
    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            code="CONFIG_MISSING",
            message=f"Missing configuration: {', '.join(missing)}",
            suggestion="Copy .env.example → .env and fill in the missing values.",
            detail=missing,
        )


class CommitSourceError(ReleaseNotesError):
    def __init__(self, message: str, detail: Any = None):
        super().__init__(
            code="COMMIT_SOURCE_FAILED",
            message=message,
            suggestion="Check COMMIT_SOURCE / GIT_REPO_PATH and the requested commit range.",
            detail=detail,
        )


class GeneratorError(ReleaseNotesError):
    """The text-generation collaborator failed or was unreachable."""

    def __init__(self, stage: str, message: str, detail: Any = None):
        self.stage = stage
        super().__init__(
            code=f"LLM_{stage.upper().replace('-', '_')}_FAILED",
            message=f"Text generation failed in stage '{stage}': {message}",
            suggestion="Check the model API key, quota and network access.",
            detail=detail,
        )


class GeneratorTimeoutError(ReleaseNotesError):
    def __init__(self, stage: str, timeout_s: float):
        self.stage = stage
        self.timeout_s = timeout_s
        super().__init__(
            code="LLM_TIMEOUT",
            message=f"Stage '{stage}' timed out after {timeout_s:g}s",
            suggestion="Raise LLM_TIMEOUT or retry later.",
        )


class SchemaMismatchError(ReleaseNotesError):
    """The collaborator answered, but not in the expected shape."""

    def __init__(self, stage: str, errors: list[str]):
        self.stage = stage
        self.errors = errors
        super().__init__(
            code="LLM_SCHEMA_MISMATCH",
            message=f"Stage '{stage}' returned an invalid response: {'; '.join(errors)}",
            suggestion="Retry the request; the model output did not match the expected schema.",
            detail=errors,
        )


class UnreachableBranchError(ReleaseNotesError):
    def __init__(self, received: Any):
        super().__init__(
            code="GATE_UNREACHABLE",
            message=f"Quality gate produced no usable outcome: {type(received).__name__}",
            suggestion="This is a defect in the pipeline; please report it.",
        )

"""
Release Notes Forge — Draft, gate outcome and final payload contracts.

The quality gate's result is a tagged union: a run either refined its
draft or passed it through. There is no value for "neither".
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Draft(BaseModel):
    """Drafted Markdown plus the drafter's own completeness verdict."""

    model_config = ConfigDict(frozen=True)

    markdown: str = Field(min_length=1)
    version: str = Field(min_length=1, max_length=50)
    is_complete: bool
    suggestions: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _suggestions_match_verdict(self) -> "Draft":
        if self.is_complete and self.suggestions:
            raise ValueError("a complete draft must not carry suggestions")
        if not self.is_complete and not self.suggestions:
            raise ValueError("an incomplete draft must list at least one suggestion")
        return self


class RefinedNotes(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["refined"] = "refined"
    markdown: str = Field(min_length=1)
    version: str


class PassedThroughNotes(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["passed_through"] = "passed_through"
    markdown: str = Field(min_length=1)
    version: str


GateOutcome = Annotated[Union[RefinedNotes, PassedThroughNotes], Field(discriminator="kind")]


class FinalResult(BaseModel):
    """Response payload of POST /api/query."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "result": "## v2.1.0 — December 2025\n\n### ✨ Features\n- **OAuth Sign-In**: ...",
                "version": "v2.1.0",
                "refined": False,
            }
        },
    )

    result: str
    version: str
    refined: bool

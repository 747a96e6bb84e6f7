"""Release Notes Forge data models — typed contracts for the entire pipeline."""

from relnotes.models.commit import (
    CommitType,
    VersionBump,
    RawCommit,
    ClassifiedCommit,
    CommitQuery,
    CategorizedBatch,
    EnrichedCommit,
    EnrichedNotes,
)
from relnotes.models.notes import (
    Draft,
    RefinedNotes,
    PassedThroughNotes,
    GateOutcome,
    FinalResult,
)
from relnotes.models.run import (
    Stage,
    RunState,
    StepTiming,
    RunReport,
)

__all__ = [
    "CommitType",
    "VersionBump",
    "RawCommit",
    "ClassifiedCommit",
    "CommitQuery",
    "CategorizedBatch",
    "EnrichedCommit",
    "EnrichedNotes",
    "Draft",
    "RefinedNotes",
    "PassedThroughNotes",
    "GateOutcome",
    "FinalResult",
    "Stage",
    "RunState",
    "StepTiming",
    "RunReport",
]

"""Value types shared by the judging engine."""

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OutcomeKind(str, enum.Enum):
    """Per-test-case classification of a sandboxed run."""

    accepted = "accepted"
    wrong_answer = "wrong_answer"
    runtime_error = "runtime_error"
    time_limit_exceeded = "time_limit_exceeded"
    output_limit_exceeded = "output_limit_exceeded"


class JudgeTestCase(BaseModel):
    """A single input/expected-output pair."""

    model_config = ConfigDict(frozen=True)

    input: str
    expected_output: str
    hidden: bool = False


class JudgeProblem(BaseModel):
    """Immutable problem definition for the duration of a judging run."""

    model_config = ConfigDict(frozen=True)

    id: int
    time_limit: float = Field(gt=0)  # seconds
    output_limit: int = Field(gt=0)  # bytes, stands in for a memory limit
    points: int = Field(ge=0)
    test_cases: tuple[JudgeTestCase, ...] = Field(min_length=1)


class RunResult(BaseModel):
    """Raw output of a program that exited cleanly."""

    stdout: str
    stderr: str = ""
    elapsed_ms: int


class ExecutionOutcome(BaseModel):
    """Result of one test case; never persisted on its own."""

    kind: OutcomeKind
    elapsed_ms: int = 0
    detail: Optional[str] = None
    # Set when the program could not be started at all
    environment_fault: bool = False


class Verdict(BaseModel):
    """Aggregate outcome of judging one submission against one problem."""

    status: OutcomeKind
    points_earned: int = Field(ge=0)
    test_cases_passed: int = Field(ge=0)
    total_test_cases: int = Field(ge=0)
    execution_time: int = 0  # ms, last completed test case
    early_exit: bool = False

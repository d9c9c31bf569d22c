"""Submission-related schemas."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SubmissionStatus = Literal[
    "accepted",
    "wrong_answer",
    "runtime_error",
    "time_limit_exceeded",
    "output_limit_exceeded",
]


class SubmissionCreate(BaseModel):
    """Submit code for a problem."""

    code: str = Field(min_length=1)
    # Checked against the configured runtimes when submitted
    language: str = Field(default="javascript", min_length=1)


class SubmissionResult(BaseModel):
    """Verdict of a judged submission."""

    model_config = ConfigDict(from_attributes=True)

    problem_id: int
    status: SubmissionStatus
    points_earned: int
    test_cases_passed: int
    total_test_cases: int
    execution_time: Optional[int] = None  # ms


class SubmissionDetail(SubmissionResult):
    """Stored submission including the code that produced it."""

    language: str
    code: str
    submitted_at: datetime

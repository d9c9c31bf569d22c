"""Problem-related schemas."""

from typing import List

from pydantic import BaseModel, ConfigDict


class VisibleTestCase(BaseModel):
    """A test case that contestants may see."""

    model_config = ConfigDict(from_attributes=True)

    input: str
    expected_output: str


class ProblemDetail(BaseModel):
    """Problem as returned to contestants; hidden test cases are omitted."""

    id: int
    contest_id: int
    title: str
    description: str
    tags: List[str] = []
    points: int
    time_limit: float
    memory_limit: int
    visible_test_cases: List[VisibleTestCase] = []

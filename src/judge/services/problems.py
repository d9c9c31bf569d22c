"""Problem lookup and conversion to judging inputs."""

from datetime import datetime, timezone
from typing import List, Optional

from judge.db.models import Contest
from judge.db.models import Problem as ProblemModel
from judge.db.models import TestCase as TestCaseModel
from judge.engine.outcomes import JudgeProblem, JudgeTestCase
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_contest_open(contest: Contest, now: Optional[datetime] = None) -> bool:
    """Whether ``now`` falls inside the contest window (inclusive)."""
    now = now or datetime.now(timezone.utc)
    return _as_utc(contest.start_time) <= _as_utc(now) <= _as_utc(contest.end_time)


def visible_test_cases(problem: ProblemModel) -> List[TestCaseModel]:
    """Test cases that may be shown to contestants."""
    return [case for case in problem.test_cases if not case.is_hidden]


def to_judge_problem(problem: ProblemModel) -> JudgeProblem:
    """Freeze a stored problem, hidden cases included, in persisted order."""
    return JudgeProblem(
        id=problem.id,
        time_limit=problem.time_limit,
        output_limit=problem.memory_limit,
        points=problem.points,
        test_cases=tuple(
            JudgeTestCase(
                input=case.input,
                expected_output=case.expected_output,
                hidden=case.is_hidden,
            )
            for case in problem.test_cases
        ),
    )


class ProblemService:
    """Service for reading problems."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_problem(self, problem_id: int) -> Optional[ProblemModel]:
        """Get problem by ID with its contest and ordered test cases."""
        result = await self.db.execute(
            select(ProblemModel).where(ProblemModel.id == problem_id)
        )
        return result.scalar_one_or_none()

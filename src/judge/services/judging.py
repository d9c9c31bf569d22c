"""Judging service: run a submission and persist its verdict."""

import logging
import time
from typing import Optional

from judge.config import Settings, get_settings
from judge.db.models import Problem as ProblemModel
from judge.engine.aggregator import VerdictAggregator
from judge.engine.evaluator import Runner, TestCaseEvaluator
from judge.engine.outcomes import Verdict
from judge.engine.sandbox import SandboxRunner
from judge.services.problems import to_judge_problem
from judge.services.submissions import SubmissionStore
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class ProblemNotJudgeable(ValueError):
    """The problem has no test cases to judge against."""


class JudgingService:
    """Evaluates one submission at a time and writes a single verdict."""

    def __init__(
        self,
        db: AsyncSession,
        runner: Optional[Runner] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.runner = runner or SandboxRunner.from_settings(self.settings)
        self.evaluator = TestCaseEvaluator(self.runner)
        self.aggregator = VerdictAggregator()
        self.store = SubmissionStore(db)

    async def judge(
        self,
        user_id: int,
        problem: ProblemModel,
        code: str,
        language: str,
    ) -> Verdict:
        """Judge ``code`` against every test case of ``problem``.

        Nothing is written until the verdict is complete; a cancelled or
        crashed run leaves the previous verdict untouched. Raises
        ``StoreWriteFailure`` if the verdict cannot be stored.
        """
        if not problem.test_cases:
            raise ProblemNotJudgeable(f"Problem {problem.id} has no test cases")

        judge_problem = to_judge_problem(problem)
        logger.info(
            "Judging user %s on problem %s (%s, %d cases)",
            user_id, problem.id, language, len(judge_problem.test_cases),
        )

        start_time = time.perf_counter()
        verdict = await self.aggregator.aggregate(
            judge_problem,
            self.evaluator.evaluate(judge_problem, code, language),
        )
        logger.info(
            "User %s problem %s: %s, %d/%d passed, %d points in %.3fs",
            user_id, problem.id, verdict.status.value,
            verdict.test_cases_passed, verdict.total_test_cases,
            verdict.points_earned, time.perf_counter() - start_time,
        )

        await self.store.upsert_verdict(user_id, problem.id, code, language, verdict)
        return verdict

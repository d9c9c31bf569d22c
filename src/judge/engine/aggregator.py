"""Fold per-test-case outcomes into a verdict."""

import logging
from contextlib import aclosing
from typing import AsyncGenerator, Optional

from judge.engine.outcomes import (
    ExecutionOutcome,
    JudgeProblem,
    OutcomeKind,
    Verdict,
)

logger = logging.getLogger(__name__)


def compute_points(passed: int, total: int, points: int) -> int:
    """floor(passed / total * points), in exact integer arithmetic."""
    if total <= 0:
        return 0
    return passed * points // total


class VerdictAggregator:
    """Consumes outcomes in order and derives status and score."""

    async def aggregate(
        self,
        problem: JudgeProblem,
        outcomes: AsyncGenerator[ExecutionOutcome, None],
    ) -> Verdict:
        total = len(problem.test_cases)
        passed = 0
        marker: Optional[OutcomeKind] = None
        execution_time = 0
        early_exit = False

        async with aclosing(outcomes):
            async for outcome in outcomes:
                execution_time = outcome.elapsed_ms
                if outcome.kind is OutcomeKind.runtime_error:
                    early_exit = True
                    break
                if outcome.kind is OutcomeKind.accepted:
                    passed += 1
                else:
                    marker = outcome.kind

        if early_exit:
            status = OutcomeKind.runtime_error
            logger.warning(
                "Problem %s: runtime error, stopped after %d of %d cases",
                problem.id, passed, total,
            )
        elif passed == total:
            status = OutcomeKind.accepted
        else:
            # A short sequence without any failure marker is treated as wrong
            status = marker or OutcomeKind.wrong_answer

        return Verdict(
            status=status,
            points_earned=compute_points(passed, total, problem.points),
            test_cases_passed=passed,
            total_test_cases=total,
            execution_time=execution_time,
            early_exit=early_exit,
        )

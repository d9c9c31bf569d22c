"""Test case evaluator."""

import logging
from typing import AsyncGenerator, Protocol

from judge.engine.errors import LaunchFailure, SandboxFailure
from judge.engine.outcomes import (
    ExecutionOutcome,
    JudgeProblem,
    OutcomeKind,
    RunResult,
)

logger = logging.getLogger(__name__)


class Runner(Protocol):
    async def run(
        self,
        code: str,
        language: str,
        input_text: str,
        time_limit: float,
        output_limit: int,
    ) -> RunResult: ...


def outputs_match(actual: str, expected: str) -> bool:
    """Exact comparison ignoring leading and trailing whitespace."""
    return actual.strip() == expected.strip()


class TestCaseEvaluator:
    """Runs a submission against each test case of a problem, in order."""

    def __init__(self, runner: Runner):
        self.runner = runner

    async def evaluate(
        self, problem: JudgeProblem, code: str, language: str
    ) -> AsyncGenerator[ExecutionOutcome, None]:
        """Yield one outcome per test case.

        The next test case is only started when the consumer asks for it, so
        closing the generator stops execution.
        """
        for index, test_case in enumerate(problem.test_cases, start=1):
            try:
                result = await self.runner.run(
                    code,
                    language,
                    test_case.input,
                    problem.time_limit,
                    problem.output_limit,
                )
            except LaunchFailure as exc:
                logger.error(
                    "Problem %s case %d: could not launch program: %s",
                    problem.id, index, exc.detail,
                )
                outcome = ExecutionOutcome(
                    kind=OutcomeKind.runtime_error,
                    elapsed_ms=exc.elapsed_ms,
                    detail=exc.detail,
                    environment_fault=True,
                )
            except SandboxFailure as exc:
                outcome = ExecutionOutcome(
                    kind=exc.kind, elapsed_ms=exc.elapsed_ms, detail=exc.detail
                )
            else:
                if outputs_match(result.stdout, test_case.expected_output):
                    kind = OutcomeKind.accepted
                else:
                    kind = OutcomeKind.wrong_answer
                outcome = ExecutionOutcome(kind=kind, elapsed_ms=result.elapsed_ms)

            logger.debug(
                "Problem %s case %d: %s (%d ms)",
                problem.id, index, outcome.kind.value, outcome.elapsed_ms,
            )
            yield outcome

import math
from fractions import Fraction

import pytest
from judge.engine import (
    ExecutionOutcome,
    OutcomeKind,
    RuntimeFault,
    TestCaseEvaluator,
    TimeLimitExceeded,
    VerdictAggregator,
    compute_points,
)


async def judge_with(runner, problem):
    evaluator = TestCaseEvaluator(runner)
    return await VerdictAggregator().aggregate(
        problem, evaluator.evaluate(problem, "code", "python")
    )


def test_compute_points_is_floor_of_proportional_score():
    for total in range(1, 8):
        for points in (0, 1, 7, 30, 100):
            for passed in range(total + 1):
                earned = compute_points(passed, total, points)
                assert earned == math.floor(Fraction(passed, total) * points)
                assert 0 <= earned <= points


def test_compute_points_with_no_cases_is_zero():
    assert compute_points(0, 0, 100) == 0


@pytest.mark.asyncio
async def test_partial_pass_reports_wrong_answer(scripted_runner, judge_problem):
    runner = scripted_runner(["4", "5", "14"])
    problem = judge_problem([("2", "4"), ("5", "10"), ("7", "14")], points=30)

    verdict = await judge_with(runner, problem)

    assert verdict.status is OutcomeKind.wrong_answer
    assert verdict.test_cases_passed == 2
    assert verdict.total_test_cases == 3
    assert verdict.points_earned == 20
    assert not verdict.early_exit


@pytest.mark.asyncio
async def test_all_accepted_earns_full_points(scripted_runner, judge_problem):
    runner = scripted_runner(["1", "2", "3"])
    problem = judge_problem([("", "1"), ("", "2"), ("", "3")], points=100)

    verdict = await judge_with(runner, problem)

    assert verdict.status is OutcomeKind.accepted
    assert verdict.points_earned == 100
    assert verdict.test_cases_passed == 3


@pytest.mark.asyncio
async def test_runtime_error_stops_further_test_cases(scripted_runner, judge_problem):
    runner = scripted_runner([RuntimeFault("exit code 1", exit_code=1), "2", "3"])
    problem = judge_problem([("", "1"), ("", "2"), ("", "3")])

    verdict = await judge_with(runner, problem)

    assert verdict.status is OutcomeKind.runtime_error
    assert verdict.test_cases_passed == 0
    assert verdict.points_earned == 0
    assert verdict.early_exit
    assert len(runner.calls) == 1


@pytest.mark.asyncio
async def test_runtime_error_overrides_earlier_failures(scripted_runner, judge_problem):
    runner = scripted_runner(["1", "bad", RuntimeFault("crash"), "4"])
    problem = judge_problem([("", "1"), ("", "2"), ("", "3"), ("", "4")], points=40)

    verdict = await judge_with(runner, problem)

    assert verdict.status is OutcomeKind.runtime_error
    assert verdict.test_cases_passed == 1
    assert verdict.points_earned == 10
    assert len(runner.calls) == 3


@pytest.mark.asyncio
async def test_time_limit_does_not_count_and_evaluation_continues(scripted_runner, judge_problem):
    runner = scripted_runner([TimeLimitExceeded("slow", elapsed_ms=1000), "2", "3"])
    problem = judge_problem([("", "1"), ("", "2"), ("", "3")], points=30)

    verdict = await judge_with(runner, problem)

    assert verdict.status is OutcomeKind.time_limit_exceeded
    assert verdict.test_cases_passed == 2
    assert verdict.points_earned == 20
    assert len(runner.calls) == 3


@pytest.mark.asyncio
async def test_status_is_last_non_accepted_kind(scripted_runner, judge_problem):
    runner = scripted_runner([TimeLimitExceeded("slow"), "wrong", "3"])
    problem = judge_problem([("", "1"), ("", "2"), ("", "3")])

    verdict = await judge_with(runner, problem)

    assert verdict.status is OutcomeKind.wrong_answer
    assert verdict.test_cases_passed == 1


@pytest.mark.asyncio
async def test_execution_time_is_from_last_completed_case(scripted_runner, judge_problem):
    runner = scripted_runner(["1", "2"])
    problem = judge_problem([("", "1"), ("", "2")])

    verdict = await judge_with(runner, problem)

    # ScriptedRunner reports the call number as elapsed milliseconds
    assert verdict.execution_time == 2


@pytest.mark.asyncio
async def test_early_exit_closes_outcome_stream(judge_problem):
    closed = []

    async def outcomes():
        try:
            yield ExecutionOutcome(kind=OutcomeKind.runtime_error, elapsed_ms=3)
            yield ExecutionOutcome(kind=OutcomeKind.accepted)
        finally:
            closed.append(True)

    problem = judge_problem([("", "1"), ("", "2")])

    verdict = await VerdictAggregator().aggregate(problem, outcomes())

    assert closed == [True]
    assert verdict.execution_time == 3

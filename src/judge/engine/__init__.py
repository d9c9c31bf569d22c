"""Submission judging engine."""

from .aggregator import VerdictAggregator, compute_points
from .errors import (
    LaunchFailure,
    OutputLimitExceeded,
    RuntimeFault,
    SandboxFailure,
    TimeLimitExceeded,
)
from .evaluator import TestCaseEvaluator
from .isolation import IsolationPolicy
from .outcomes import (
    ExecutionOutcome,
    JudgeProblem,
    JudgeTestCase,
    OutcomeKind,
    RunResult,
    Verdict,
)
from .sandbox import SandboxRunner, SourceArtifact

__all__ = [
    "ExecutionOutcome",
    "IsolationPolicy",
    "JudgeProblem",
    "JudgeTestCase",
    "LaunchFailure",
    "OutcomeKind",
    "OutputLimitExceeded",
    "RunResult",
    "RuntimeFault",
    "SandboxFailure",
    "SandboxRunner",
    "SourceArtifact",
    "TestCaseEvaluator",
    "TimeLimitExceeded",
    "Verdict",
    "VerdictAggregator",
    "compute_points",
]

"""Failures raised by the sandbox runner."""

from typing import Optional

from judge.engine.outcomes import OutcomeKind


class SandboxFailure(Exception):
    """A sandboxed run that did not produce usable output."""

    kind: OutcomeKind = OutcomeKind.runtime_error

    def __init__(self, detail: str, elapsed_ms: int = 0):
        super().__init__(detail)
        self.detail = detail
        self.elapsed_ms = elapsed_ms


class TimeLimitExceeded(SandboxFailure):
    kind = OutcomeKind.time_limit_exceeded


class OutputLimitExceeded(SandboxFailure):
    kind = OutcomeKind.output_limit_exceeded


class RuntimeFault(SandboxFailure):
    """Program crashed, exited non-zero, or was killed by a signal."""

    kind = OutcomeKind.runtime_error

    def __init__(
        self,
        detail: str,
        elapsed_ms: int = 0,
        exit_code: Optional[int] = None,
    ):
        super().__init__(detail, elapsed_ms)
        self.exit_code = exit_code


class LaunchFailure(RuntimeFault):
    """The runtime could not be started; an environment problem, not a bug in the code."""

"""Sandbox runner: execute one untrusted program against one input.

Every call owns exactly one temporary source file and at most one child
process. The call resolves once, either with a ``RunResult`` or by raising a
``SandboxFailure`` subclass, and by the time it returns the child has been
killed and reaped and the source file is gone, including when the awaiting
task is cancelled.
"""

import asyncio
import logging
import os
import signal
import tempfile
import time
from contextlib import asynccontextmanager, suppress
from pathlib import Path
from typing import AsyncIterator, Mapping, Optional

from judge.config import LanguageRuntime, Settings
from judge.engine.errors import (
    LaunchFailure,
    OutputLimitExceeded,
    RuntimeFault,
    TimeLimitExceeded,
)
from judge.engine.isolation import IsolationPolicy
from judge.engine.outcomes import RunResult

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class SourceArtifact:
    """A uniquely named temporary file holding submitted source code."""

    def __init__(self, path: Path):
        self.path = path
        self.removed = False

    @classmethod
    async def create(
        cls, code: str, suffix: str, directory: Optional[str] = None
    ) -> "SourceArtifact":
        fd, name = tempfile.mkstemp(prefix="submission_", suffix=suffix, dir=directory)
        artifact = cls(Path(name))
        try:
            # Writing through the descriptor keeps a cancelled write from
            # recreating the path after it was unlinked.
            await asyncio.to_thread(_write_source, fd, code)
        except BaseException:
            artifact.remove()
            raise
        return artifact

    def remove(self) -> None:
        """Delete the file; safe to call any number of times."""
        if self.removed:
            return
        self.path.unlink(missing_ok=True)
        self.removed = True


class SandboxRunner:
    """Runs submissions as isolated child processes."""

    def __init__(
        self,
        runtimes: Mapping[str, LanguageRuntime],
        policy: Optional[IsolationPolicy] = None,
        work_dir: Optional[str] = None,
        stderr_limit: int = 64 * 1024,
    ):
        self.runtimes = dict(runtimes)
        self.policy = policy or IsolationPolicy()
        self.work_dir = work_dir
        self.stderr_limit = stderr_limit

    @classmethod
    def from_settings(cls, settings: Settings) -> "SandboxRunner":
        return cls(
            runtimes=settings.runtimes,
            policy=IsolationPolicy.from_settings(settings),
            work_dir=settings.work_dir,
            stderr_limit=settings.stderr_limit,
        )

    @asynccontextmanager
    async def materialize(self, code: str, language: str) -> AsyncIterator[list[str]]:
        """Write ``code`` to disk and yield the argv that runs it."""
        runtime = self.runtimes.get(language)
        if runtime is None:
            raise LaunchFailure(f"No runtime configured for language {language!r}")

        try:
            artifact = await SourceArtifact.create(code, runtime.suffix, self.work_dir)
        except OSError as exc:
            raise LaunchFailure(f"Could not write source file: {exc}") from exc
        try:
            yield self.policy.command([*runtime.command, str(artifact.path)])
        finally:
            artifact.remove()

    async def run(
        self,
        code: str,
        language: str,
        input_text: str,
        time_limit: float,
        output_limit: int,
    ) -> RunResult:
        async with self.materialize(code, language) as argv:
            logger.debug("Launching %s", " ".join(argv))
            start = time.perf_counter()
            try:
                process = await asyncio.create_subprocess_exec(
                    *argv,
                    stdin=asyncio.subprocess.PIPE,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    **self.policy.spawn_options(),
                )
            except OSError as exc:
                raise LaunchFailure(f"Failed to start {argv[0]}: {exc}") from exc

            finished = False
            try:
                stdout, stderr = await asyncio.wait_for(
                    self._communicate(process, input_text, output_limit),
                    timeout=time_limit,
                )
                finished = True
            except asyncio.TimeoutError:
                raise TimeLimitExceeded(
                    f"Exceeded time limit of {time_limit}s",
                    elapsed_ms=_elapsed_ms(start),
                ) from None
            except OutputLimitExceeded as exc:
                exc.elapsed_ms = _elapsed_ms(start)
                raise
            finally:
                await self._terminate(process, finished)

            elapsed_ms = _elapsed_ms(start)
            if process.returncode != 0:
                raise RuntimeFault(
                    _describe_exit(process.returncode, stderr),
                    elapsed_ms=elapsed_ms,
                    exit_code=process.returncode,
                )
            return RunResult(stdout=stdout, stderr=stderr, elapsed_ms=elapsed_ms)

    async def _communicate(
        self,
        process: asyncio.subprocess.Process,
        input_text: str,
        output_limit: int,
    ) -> tuple[str, str]:
        feeder = asyncio.create_task(_feed(process, input_text))
        errors = asyncio.create_task(_drain(process.stderr, self.stderr_limit))
        try:
            stdout = await _read_limited(process.stdout, output_limit)
            await process.wait()
            stderr = await errors
        finally:
            for task in (feeder, errors):
                task.cancel()
            await asyncio.gather(feeder, errors, return_exceptions=True)
        return (
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )

    async def _terminate(
        self, process: asyncio.subprocess.Process, finished: bool
    ) -> None:
        # After a clean exit the leader is reaped and its pid may be reused, so
        # the group is only signalled while the leader lives or while a
        # descendant still holds the output pipe open.
        if process.returncode is None or not finished:
            self.policy.kill(process)
        await process.wait()


def _write_source(fd: int, code: str) -> None:
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(code)


async def _feed(process: asyncio.subprocess.Process, input_text: str) -> None:
    stdin = process.stdin
    try:
        if input_text:
            stdin.write(input_text.encode("utf-8"))
            await stdin.drain()
    except (BrokenPipeError, ConnectionResetError):
        # Program exited without reading all of its input
        pass
    finally:
        stdin.close()


async def _read_limited(stream: asyncio.StreamReader, limit: int) -> bytes:
    buffer = bytearray()
    while True:
        chunk = await stream.read(CHUNK_SIZE)
        if not chunk:
            return bytes(buffer)
        buffer.extend(chunk)
        if len(buffer) > limit:
            raise OutputLimitExceeded(f"Output exceeded {limit} bytes")


async def _drain(stream: asyncio.StreamReader, limit: int) -> bytes:
    buffer = bytearray()
    while True:
        chunk = await stream.read(CHUNK_SIZE)
        if not chunk:
            return bytes(buffer)
        if len(buffer) < limit:
            buffer.extend(chunk[: limit - len(buffer)])


def _describe_exit(returncode: int, stderr: str) -> str:
    if stderr.strip():
        return stderr.strip()
    if returncode < 0:
        with suppress(ValueError):
            return f"killed by signal {signal.Signals(-returncode).name}"
        return f"killed by signal {-returncode}"
    return f"exit code {returncode}"


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)

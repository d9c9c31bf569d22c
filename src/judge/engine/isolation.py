"""Process isolation policy for sandboxed runs.

The default policy relies on plain OS process boundaries: the child gets its
own session (so the whole process group can be killed), a trimmed environment,
and no shell. Stronger isolation is plugged in through ``wrapper``, an argv
prefix such as ``["prlimit", "--as=268435456", "--"]`` or an nsjail/bwrap
invocation, without changing how outcomes are classified.
"""

import asyncio
import os
import signal
from dataclasses import dataclass, field
from typing import Optional, Sequence

from judge.config import Settings


@dataclass(frozen=True)
class IsolationPolicy:
    wrapper: tuple[str, ...] = ()
    new_session: bool = True
    env_passthrough: tuple[str, ...] = ("PATH", "LANG", "HOME")
    extra_env: dict[str, str] = field(default_factory=dict)
    cwd: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "IsolationPolicy":
        return cls(
            wrapper=tuple(settings.sandbox_wrapper),
            new_session=settings.sandbox_new_session,
            env_passthrough=tuple(settings.sandbox_env_passthrough),
            cwd=settings.work_dir,
        )

    def command(self, argv: Sequence[str]) -> list[str]:
        return [*self.wrapper, *argv]

    def environment(self) -> dict[str, str]:
        env = {
            name: os.environ[name]
            for name in self.env_passthrough
            if name in os.environ
        }
        env.update(self.extra_env)
        return env

    def spawn_options(self) -> dict:
        """Keyword arguments for ``asyncio.create_subprocess_exec``."""
        return {
            "env": self.environment(),
            "cwd": self.cwd,
            "start_new_session": self.new_session and os.name == "posix",
        }

    def kill(self, process: asyncio.subprocess.Process) -> None:
        """Forcibly stop the child and, with a session, everything it spawned."""
        if self.new_session and os.name == "posix":
            try:
                os.killpg(process.pid, signal.SIGKILL)
                return
            except ProcessLookupError:
                return
            except PermissionError:
                pass
        try:
            process.kill()
        except ProcessLookupError:
            pass

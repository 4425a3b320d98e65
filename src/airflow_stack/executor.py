from __future__ import annotations

import logging
import os
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .errors import DelegatedCommandError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    args: List[str]
    returncode: int
    output: str
    duration: float

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Execute external commands while streaming output to the console."""

    def __init__(
        self,
        stream_output: bool = True,
        base_env: Dict[str, str] | None = None,
        cwd: Optional[Path] = None,
    ) -> None:
        self.stream_output = stream_output
        self.base_env = dict(base_env or {})
        self.cwd = cwd

    def run(self, args: Sequence[str]) -> CommandResult:
        env = dict(os.environ)
        env.update(self.base_env)

        logger.debug("Running %s", " ".join(args))
        start = time.perf_counter()
        try:
            process = subprocess.Popen(
                list(args),
                cwd=self.cwd or Path.cwd(),
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                env=env,
            )
        except FileNotFoundError as exc:
            # Mirror the shell: a missing executable exits with 127.
            logger.debug("Executable not found: %s", exc)
            return CommandResult(args=list(args), returncode=127, output=str(exc), duration=0.0)
        except PermissionError as exc:
            # ...and one that cannot be executed exits with 126.
            logger.debug("Executable not runnable: %s", exc)
            return CommandResult(args=list(args), returncode=126, output=str(exc), duration=0.0)

        captured_output = []
        assert process.stdout is not None
        for line in process.stdout:
            captured_output.append(line)
            if self.stream_output:
                sys.stdout.write(line)
                sys.stdout.flush()

        process.wait()
        duration = time.perf_counter() - start
        output = "".join(captured_output)
        logger.debug("%s exited with %s after %.2fs", args[0], process.returncode, duration)
        return CommandResult(args=list(args), returncode=process.returncode or 0, output=output, duration=duration)

    def check(self, args: Sequence[str]) -> CommandResult:
        """Run ``args`` and raise :class:`DelegatedCommandError` on a non-zero exit."""

        result = self.run(args)
        if not result.ok:
            raise DelegatedCommandError(result.args, result.returncode)
        return result


def run_sequence(runner: CommandRunner, commands: Sequence[Sequence[str]]) -> List[CommandResult]:
    """Run commands in order, stopping at the first failure."""

    return [runner.check(args) for args in commands]

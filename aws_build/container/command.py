"""External command execution.

Every external call made by the build (image build, container run,
recursive chown, strip, cargo metadata) goes through a CommandRunner:

    (args, cwd, env overrides) -> CommandResult(exit code, combined output)

The default runner is run_command(), which blocks until the process exits.
Tests substitute a fake runner with the same signature.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from aws_build.errors import ExternalProcessError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result of an external command.

    Attributes:
        args: The command that was executed.
        exit_code: Process exit code.
        output: Combined stdout and stderr.
    """

    args: list[str]
    exit_code: int
    output: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class CommandRunner(Protocol):
    """Callable that runs one external command to completion."""

    def __call__(
        self,
        args: Sequence[str | Path],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
    ) -> CommandResult: ...


def format_command(args: Sequence[str | Path]) -> str:
    """Render a command as a shell-quoted string for logs and errors."""
    return shlex.join(str(a) for a in args)


def run_command(
    args: Sequence[str | Path],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    check: bool = True,
) -> CommandResult:
    """Run a command and capture its combined output.

    Args:
        args: Program and arguments.
        cwd: Working directory (defaults to the current one).
        env: Environment variable overrides on top of os.environ.
        check: Raise on non-zero exit.

    Returns:
        CommandResult with exit code and captured output.

    Raises:
        ExternalProcessError: If the program cannot be started, or exits
            non-zero and check is True.
    """
    str_args = [str(a) for a in args]
    cmd_str = format_command(str_args)
    logger.info("%s", cmd_str)
    if cwd is not None:
        logger.debug("Working directory: %s", cwd)

    full_env: dict[str, str] | None = None
    if env:
        full_env = dict(os.environ)
        full_env.update(env)

    try:
        proc = subprocess.run(
            str_args,
            cwd=cwd,
            env=full_env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
        )
    except OSError as e:
        logger.error("Failed to run %s: %s", cmd_str, e)
        raise ExternalProcessError(
            cmd_str,
            exit_code=None,
            output=str(e),
            message=f"failed to run {cmd_str}: {e}",
        ) from e

    result = CommandResult(
        args=str_args,
        exit_code=proc.returncode,
        output=proc.stdout.decode("utf-8", errors="replace"),
    )

    if check and not result.success:
        logger.error(
            "Command %s failed with exit code %d:\n%s",
            cmd_str,
            result.exit_code,
            result.output,
        )
        raise ExternalProcessError(cmd_str, result.exit_code, result.output)

    return result


__all__ = [
    "CommandResult",
    "CommandRunner",
    "format_command",
    "run_command",
]

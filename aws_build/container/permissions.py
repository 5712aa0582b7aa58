"""Ownership reconciliation for rootless container runtimes.

A rootless runtime (podman) maps root inside the container to the invoking
host user. Files the build writes into a bind mount therefore end up owned by
a subordinate uid on the host. To let the build write its output, the output
tree is re-owned (from inside the user namespace) to the invoking user's
uid/gid before the run, and re-owned to namespace root, which is the host
user, afterwards.

The reset is guarded: PermissionGuard.release() may be called explicitly to
observe its error, and runs automatically on scope exit otherwise. The
release chown runs exactly once per acquire.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType

from aws_build.container.command import CommandRunner, run_command
from aws_build.container.launcher import Launcher, UserAndGroup

logger = logging.getLogger(__name__)


def set_rootless_permissions(
    launcher: Launcher,
    user: UserAndGroup,
    path: Path,
    runner: CommandRunner = run_command,
) -> None:
    """Recursively set the owner of a directory tree.

    ``user`` is interpreted inside the rootless user namespace, so
    ``UserAndGroup.root()`` means the invoking host user.

    Raises:
        ExternalProcessError: If the chown fails.
    """
    runner(launcher.unshare_chown_args(user, path))


class PermissionGuard:
    """Scoped ownership change of a directory tree.

    Usage::

        with PermissionGuard(launcher, output_dir, runner) as guard:
            run_the_container()
            guard.release()  # surface release errors on the success path

    Entering re-owns the tree to the current user's mapping inside the
    namespace. Leaving without an explicit release performs a best-effort
    release; a failure there is logged and does not replace the exception
    (or normal return) of the guarded block.

    ``released`` records that the reset was attempted, ``reset`` that it
    succeeded.
    """

    def __init__(
        self,
        launcher: Launcher,
        path: Path,
        runner: CommandRunner = run_command,
    ) -> None:
        self.launcher = launcher
        self.path = path
        self.runner = runner
        self.acquired = False
        self.released = False
        self.reset = False

    def acquire(self) -> None:
        """Re-own the tree so the container user can write to it."""
        set_rootless_permissions(
            self.launcher, UserAndGroup.current(), self.path, self.runner
        )
        self.acquired = True
        self.released = False
        self.reset = False

    def release(self) -> None:
        """Re-own the tree back to the host user.

        Only the first call after acquire runs the chown; later calls are
        no-ops, even if the first one failed.

        Raises:
            ExternalProcessError: If the chown fails.
        """
        if not self.acquired or self.released:
            return
        self.released = True
        # Root inside the namespace is the invoking user outside it
        set_rootless_permissions(
            self.launcher, UserAndGroup.root(), self.path, self.runner
        )
        self.reset = True

    def __enter__(self) -> PermissionGuard:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if not self.acquired or self.released:
            return
        try:
            self.release()
        except Exception as e:
            logger.error("failed to reset permissions on %s: %s", self.path, e)


__all__ = ["PermissionGuard", "set_rootless_permissions"]

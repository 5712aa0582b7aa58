"""Container run for the project build.

This module handles:
- Composing the four bind mounts (code root, two cargo caches, output root)
- Running the build container as the invoking user
- Reconciling output ownership around the run for rootless runtimes

The built binary path is a contract with the container's build script:
``<output_dir>/<mode>/release/<bin>``.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath

from aws_build.builds.cache import CacheDirectories, prepare_cache_dirs
from aws_build.container.command import CommandRunner, run_command
from aws_build.container.launcher import Launcher, UserAndGroup, Volume
from aws_build.container.permissions import PermissionGuard
from aws_build.types import BuildMode, Relabel, mode_info, mount_option

logger = logging.getLogger(__name__)

# Mount points inside the container
CODE_MOUNT = PurePosixPath("/code")
TARGET_MOUNT = PurePosixPath("/code/target")
REGISTRY_MOUNT = PurePosixPath("/cargo/registry")
GIT_MOUNT = PurePosixPath("/cargo/git")


class ContainerState(str, Enum):
    """Progress of a container run."""

    NOT_STARTED = "not_started"
    PERMISSIONS_ACQUIRED = "permissions_acquired"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    PERMISSIONS_RELEASED = "permissions_released"
    PERMISSIONS_RELEASE_FAILED = "permissions_release_failed"


def mount_options(relabel: Relabel | None) -> tuple[str, ...]:
    """Return the extra volume options for a relabel policy."""
    option = mount_option(relabel)
    return (option,) if option else ()


def compose_volumes(
    code_root: Path,
    output_dir: Path,
    caches: CacheDirectories,
    relabel: Relabel | None = None,
) -> list[Volume]:
    """Compose the bind mounts for a build run.

    The code root is read-only; the caches and the output root are writable.
    """
    options = mount_options(relabel)
    return [
        Volume(src=code_root, dst=Path(CODE_MOUNT), options=options),
        Volume(
            src=caches.registry,
            dst=Path(REGISTRY_MOUNT),
            read_write=True,
            options=options,
        ),
        Volume(src=caches.git, dst=Path(GIT_MOUNT), read_write=True, options=options),
        Volume(src=output_dir, dst=Path(TARGET_MOUNT), read_write=True, options=options),
    ]


def compose_env(mode: BuildMode, bin_name: str) -> list[tuple[str, str]]:
    """Compose the environment consumed by the container's build script."""
    return [
        ("TARGET_DIR", str(TARGET_MOUNT / mode_info(mode).name)),
        ("BIN_TARGET", bin_name),
    ]


def built_binary_path(output_dir: Path, mode: BuildMode, bin_name: str) -> Path:
    """Return where the container build leaves the binary on the host."""
    return output_dir / mode_info(mode).name / "release" / bin_name


@dataclass
class ContainerRunner:
    """Runs the project build in a container.

    Attributes:
        mode: Build mode.
        bin_name: Binary target to build.
        launcher: Container runtime.
        image_tag: Image built by build_image().
        code_root: Directory mounted at /code; the project lives below it.
        output_dir: Output root mounted at /code/target.
        relabel: Optional relabel policy for all mounts.
        runner: Command runner.
        state: Current ContainerState.
        history: Every state entered, in order.
    """

    mode: BuildMode
    bin_name: str
    launcher: Launcher
    image_tag: str
    code_root: Path
    output_dir: Path
    relabel: Relabel | None = None
    runner: CommandRunner = run_command
    state: ContainerState = ContainerState.NOT_STARTED
    history: list[ContainerState] = field(default_factory=list)

    def _enter(self, state: ContainerState) -> None:
        logger.debug("Container state: %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def run_args(self, caches: CacheDirectories) -> list[str]:
        """Compose the container run command."""
        return self.launcher.run_args(
            image=self.image_tag,
            volumes=compose_volumes(
                self.code_root, self.output_dir, caches, self.relabel
            ),
            env=compose_env(self.mode, self.bin_name),
            user=UserAndGroup.current(),
        )

    def run(self) -> Path:
        """Run the build container.

        Returns:
            Path of the built binary on the host.

        Raises:
            FilesystemError: If the cache directories cannot be created.
            ExternalProcessError: If the container run or an ownership change
                fails.
        """
        caches = prepare_cache_dirs(self.output_dir, self.mode)

        with ExitStack() as stack:
            guard: PermissionGuard | None = None
            if self.launcher.is_rootless:
                # Let the (namespace-mapped) container user own the output
                guard = PermissionGuard(self.launcher, self.output_dir, self.runner)
                # Registered first so it runs after the guard's own exit
                stack.callback(self._note_released, guard)
                stack.enter_context(guard)
                self._enter(ContainerState.PERMISSIONS_ACQUIRED)

            self._enter(ContainerState.RUNNING)
            try:
                self.runner(self.run_args(caches))
            except BaseException:
                self._enter(ContainerState.FAILED)
                raise
            self._enter(ContainerState.COMPLETED)

            if guard is not None:
                # Explicit release so its error reaches the caller
                guard.release()

        return built_binary_path(self.output_dir, self.mode, self.bin_name)

    def _note_released(self, guard: PermissionGuard) -> None:
        if guard.reset:
            self._enter(ContainerState.PERMISSIONS_RELEASED)
        elif guard.released:
            self._enter(ContainerState.PERMISSIONS_RELEASE_FAILED)


__all__ = [
    "CODE_MOUNT",
    "GIT_MOUNT",
    "REGISTRY_MOUNT",
    "TARGET_MOUNT",
    "ContainerRunner",
    "ContainerState",
    "built_binary_path",
    "compose_env",
    "compose_volumes",
    "mount_options",
]

"""Build service module.

This module provides the high-level build API:
- run_build(): Main entry point - build a project in a container and
  publish a uniquely named artifact plus a ``latest-<mode>`` symlink
- request_from_settings(): Fill a BuildRequest from configuration

The build is one sequential flow; each step starts only after the previous
external process has exited successfully:

    validate paths -> select bin -> prepare dirs -> build image
        -> run container (ownership guarded for rootless runtimes)
        -> strip -> package -> publish latest

Any error aborts the build and propagates to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

from aws_build.builds.artifacts import package_artifact, strip_binary
from aws_build.builds.cache import prepare_output_dirs
from aws_build.builds.cargo import get_package_binaries, select_bin
from aws_build.builds.latest import publish_latest
from aws_build.builds.models import BuildOutput, BuildRequest
from aws_build.config import Settings
from aws_build.container.command import CommandRunner, run_command
from aws_build.container.image import build_image, ensure_utf8
from aws_build.container.launcher import Launcher, resolve_launcher
from aws_build.container.runner import ContainerRunner
from aws_build.errors import ConfigurationError, FilesystemError
from aws_build.types import BuildMode, ContainerCommand, Relabel

logger = logging.getLogger(__name__)


def canonicalize(path: Path) -> Path:
    """Resolve a path to its canonical absolute form.

    Volume arguments need absolute paths.

    Raises:
        FilesystemError: If the path does not exist.
    """
    try:
        return path.resolve(strict=True)
    except OSError as e:
        raise FilesystemError(f"failed to canonicalize {path}: {e}", path) from e


def relative_project_path(code_root: Path, project_path: Path) -> Path:
    """Return the project path relative to the code root.

    Both paths must already be canonical.

    Raises:
        ConfigurationError: If the project is not the code root or below it.
    """
    try:
        return project_path.relative_to(code_root)
    except ValueError:
        raise ConfigurationError(
            f"project path must be within the code root: "
            f"{project_path} is not below {code_root}"
        ) from None


def run_build(
    request: BuildRequest,
    runner: CommandRunner = run_command,
    when: datetime | None = None,
    tmp_dir: Path | None = None,
) -> BuildOutput:
    """Run the build in a container.

    Produces either a standalone executable (Amazon Linux 2) or a zip file
    (AWS Lambda) with a unique name, and points ``target/latest-<mode>`` at
    it.

    Args:
        request: Build options.
        runner: Command runner for every external process.
        when: Build time used for the artifact name (defaults to now, UTC).
        tmp_dir: Parent directory for the image build context.

    Returns:
        BuildOutput with the artifact and symlink paths.

    Raises:
        ConfigurationError: If the request is invalid. Raised before any
            container work.
        ExternalProcessError: If an external command fails.
        FilesystemError: If a host filesystem operation fails.
    """
    code_root = canonicalize(request.effective_code_root)
    project_path = canonicalize(request.project_path)
    relative_path = relative_project_path(code_root, project_path)
    # Must fail before any external process runs
    ensure_utf8(relative_path)

    if request.bin:
        bin_name = request.bin
    else:
        bin_name = select_bin(None, get_package_binaries(project_path, runner))
    logger.info("Building %s for %s", bin_name, request.mode.value)

    target_dir, output_dir = prepare_output_dirs(project_path)

    tag = build_image(
        request.launcher,
        request.mode,
        request.rust_version,
        request.packages,
        relative_path,
        runner=runner,
        tmp_dir=tmp_dir,
    )

    container = ContainerRunner(
        mode=request.mode,
        bin_name=bin_name,
        launcher=request.launcher,
        image_tag=tag,
        code_root=code_root,
        output_dir=output_dir,
        relabel=request.relabel,
        runner=runner,
    )
    bin_path = container.run()

    if request.strip:
        strip_binary(bin_path, runner)

    if when is None:
        when = datetime.now(timezone.utc)
    artifact = package_artifact(request.mode, bin_path, bin_name, output_dir, when)

    symlink = publish_latest(target_dir, request.mode, artifact.path)

    return BuildOutput(
        real=artifact.path,
        symlink=symlink,
        mode=request.mode,
        bin=bin_name,
        image_tag=tag,
        sha256=artifact.sha256,
    )


def request_from_settings(
    settings: Settings,
    mode: BuildMode,
    project_path: Path,
    code_root: Path | None = None,
    bin: str | None = None,
    strip: bool | None = None,
    rust_version: str | None = None,
    packages: Sequence[str] = (),
    relabel: Relabel | None = None,
    container_cmd: ContainerCommand | None = None,
    launcher: Launcher | None = None,
) -> BuildRequest:
    """Create a BuildRequest from settings, with explicit values winning.

    Raises:
        ConfigurationError: If no container runtime is given and none can be
            found on PATH.
    """
    if launcher is None:
        launcher = resolve_launcher(container_cmd or settings.container_cmd)
    if relabel is None and settings.relabel is not None:
        relabel = Relabel(settings.relabel)

    return BuildRequest(
        mode=mode,
        project_path=project_path,
        code_root=code_root,
        rust_version=rust_version or settings.rust_version,
        bin=bin,
        strip=settings.strip if strip is None else strip,
        launcher=launcher,
        packages=tuple(packages),
        relabel=relabel,
    )


__all__ = [
    "canonicalize",
    "relative_project_path",
    "request_from_settings",
    "run_build",
]

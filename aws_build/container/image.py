"""Build container image creation.

This module handles:
- Writing the Dockerfile and build script templates into a build context
- Composing the image tag and build arguments for a mode
- Running the container runtime's image build

The runtime's layer cache makes repeated builds with unchanged inputs cheap;
no caching is done here.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Sequence
from importlib import resources
from pathlib import Path

from aws_build.container.command import CommandRunner, run_command
from aws_build.container.launcher import Launcher
from aws_build.errors import ConfigurationError, FilesystemError
from aws_build.types import BuildMode, mode_info

logger = logging.getLogger(__name__)

# Files copied into the build context, relative to the templates directory
CONTAINER_FILES = ("Dockerfile", "build.sh")


def image_tag(mode: BuildMode, rust_version: str) -> str:
    """Return the deterministic image tag for a mode and toolchain."""
    return f"aws-build-{mode_info(mode).name}-{rust_version}"


def write_container_files(dest_dir: Path) -> list[Path]:
    """Write the container templates into a build context directory.

    Args:
        dest_dir: Existing build context directory.

    Returns:
        Paths of the written files.

    Raises:
        FilesystemError: If a file cannot be written.
    """
    templates = resources.files("aws_build.container").joinpath("templates")
    written: list[Path] = []
    for name in CONTAINER_FILES:
        dest = dest_dir / name
        try:
            dest.write_text(
                templates.joinpath(name).read_text(encoding="utf-8"),
                encoding="utf-8",
            )
        except OSError as e:
            raise FilesystemError(f"failed to write {dest}: {e}", dest) from e
        written.append(dest)
    return written


def ensure_utf8(path: Path) -> str:
    """Return the path as text for the container runtime.

    Raises:
        ConfigurationError: If the path is not valid UTF-8.
    """
    text = str(path)
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        raise ConfigurationError(f"project path is not utf-8: {text!r}") from None
    return text


def compose_build_args(
    mode: BuildMode,
    rust_version: str,
    packages: Sequence[str],
    relative_project_path: Path,
) -> list[tuple[str, str]]:
    """Compose the image build arguments.

    Args:
        mode: Build mode (selects the base image).
        rust_version: Toolchain version to install.
        packages: Extra yum packages to install in the image.
        relative_project_path: Project path relative to the code root.

    Returns:
        List of (name, value) build arguments.

    Raises:
        ConfigurationError: If the project path cannot be passed as UTF-8 text.
    """
    project_path = ensure_utf8(relative_project_path)

    return [
        ("FROM_IMAGE", mode_info(mode).base_image),
        ("RUST_VERSION", rust_version),
        ("DEV_PKGS", " ".join(packages)),
        ("PROJECT_PATH", project_path),
    ]


def build_image(
    launcher: Launcher,
    mode: BuildMode,
    rust_version: str,
    packages: Sequence[str],
    relative_project_path: Path,
    runner: CommandRunner = run_command,
    tmp_dir: Path | None = None,
) -> str:
    """Build the container image used to compile the project.

    Args:
        launcher: Container runtime.
        mode: Build mode.
        rust_version: Toolchain version to install.
        packages: Extra yum packages to install in the image.
        relative_project_path: Project path relative to the code root.
        runner: Command runner.
        tmp_dir: Parent for the temporary build context (system default if None).

    Returns:
        The image tag.

    Raises:
        ConfigurationError: If the build arguments cannot be represented.
        ExternalProcessError: If the image build fails.
    """
    build_args = compose_build_args(
        mode, rust_version, packages, relative_project_path
    )
    tag = image_tag(mode, rust_version)

    with tempfile.TemporaryDirectory(prefix="aws-build-", dir=tmp_dir) as context:
        context_dir = Path(context)
        write_container_files(context_dir)
        logger.info("Building image %s", tag)
        runner(launcher.build_args(tag, context_dir, build_args))

    return tag


__all__ = [
    "CONTAINER_FILES",
    "build_image",
    "compose_build_args",
    "ensure_utf8",
    "image_tag",
    "write_container_files",
]

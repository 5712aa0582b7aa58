"""The ``target/latest-<mode>`` pointer.

The pointer is replaced on every successful build by removing the old
symlink and creating a new one. This is not crash-atomic: a process killed
between the two steps leaves no pointer until the next build.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from aws_build.errors import FilesystemError
from aws_build.types import BuildMode, mode_info

logger = logging.getLogger(__name__)


def latest_symlink_path(target_dir: Path, mode: BuildMode) -> Path:
    """Return ``<project>/target/latest-<mode>``."""
    return target_dir / f"latest-{mode_info(mode).name}"


def publish_latest(target_dir: Path, mode: BuildMode, artifact: Path) -> Path:
    """Point ``latest-<mode>`` at an artifact.

    Args:
        target_dir: The project's target directory.
        mode: Build mode.
        artifact: Path of the artifact just written.

    Returns:
        Path of the symlink.

    Raises:
        FilesystemError: If the symlink cannot be created.
    """
    symlink_path = latest_symlink_path(target_dir, mode)

    try:
        symlink_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        # Creating the symlink below fails if the entry is still there
        logger.warning("failed to remove %s: %s", symlink_path, e)

    try:
        os.symlink(artifact, symlink_path)
    except OSError as e:
        raise FilesystemError(
            f"failed to create symlink {symlink_path} -> {artifact}: {e}",
            symlink_path,
        ) from e

    logger.info("symlink: %s", symlink_path)
    return symlink_path


__all__ = ["latest_symlink_path", "publish_latest"]

"""Host-side cache and output directories.

Layout below the project root:

    target/
        aws-build/                      output root, mounted at /code/target
            <mode>-cargo-registry/      cargo registry cache, mounted rw
            <mode>-cargo-git/           cargo git cache, mounted rw
            <mode>/                     build output and published artifacts

The cache directories are host mounts rather than runtime volumes so they
are not root-only. They are created once and reused by every build of the
same project and mode; nothing here deletes them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from aws_build.errors import FilesystemError
from aws_build.types import BuildMode, mode_info

logger = logging.getLogger(__name__)

OUTPUT_DIR_NAME = "aws-build"


@dataclass(frozen=True)
class CacheDirectories:
    """Per-mode dependency cache directories."""

    registry: Path
    git: Path


def ensure_dir(path: Path) -> Path:
    """Create a directory if it doesn't already exist.

    Only the last path component is created. A directory that already exists
    (for example created concurrently by another build) is not an error.

    Args:
        path: Directory to create.

    Returns:
        The same path.

    Raises:
        FilesystemError: If the path exists as something other than a
            directory, or cannot be created.
    """
    try:
        path.mkdir()
        logger.debug("Created directory %s", path)
    except FileExistsError:
        if not path.is_dir():
            raise FilesystemError(
                f"failed to create directory {path}: exists and is not a directory",
                path,
            ) from None
    except OSError as e:
        raise FilesystemError(f"failed to create directory {path}: {e}", path) from e
    return path


def prepare_output_dirs(project_path: Path) -> tuple[Path, Path]:
    """Ensure the project's target directory and the output root exist.

    Args:
        project_path: Canonical project path.

    Returns:
        Tuple of (target directory, output root).
    """
    target_dir = ensure_dir(project_path / "target")
    output_dir = ensure_dir(target_dir / OUTPUT_DIR_NAME)
    return target_dir, output_dir


def cache_dirs(output_dir: Path, mode: BuildMode) -> CacheDirectories:
    """Return the cache directory paths for a mode without creating them."""
    name = mode_info(mode).name
    return CacheDirectories(
        registry=output_dir / f"{name}-cargo-registry",
        git=output_dir / f"{name}-cargo-git",
    )


def prepare_cache_dirs(output_dir: Path, mode: BuildMode) -> CacheDirectories:
    """Ensure the cache directories for a mode exist.

    Args:
        output_dir: Output root (``target/aws-build``).
        mode: Build mode.

    Returns:
        CacheDirectories for the mode.
    """
    dirs = cache_dirs(output_dir, mode)
    ensure_dir(dirs.registry)
    ensure_dir(dirs.git)
    return dirs


__all__ = [
    "OUTPUT_DIR_NAME",
    "CacheDirectories",
    "cache_dirs",
    "ensure_dir",
    "prepare_cache_dirs",
    "prepare_output_dirs",
]

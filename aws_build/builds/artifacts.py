"""Artifact packaging.

This module handles:
- Optionally stripping symbols from the built executable
- Copying it to a uniquely named file (Amazon Linux 2)
- Zipping it as a single "bootstrap" entry (Lambda)

Artifacts are written to ``<output_dir>/<mode>/`` so multiple versions can be
uploaded to S3 without overwriting each other.
"""

from __future__ import annotations

import logging
import shutil
import stat
import zipfile
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import assert_never

from aws_build.builds.cache import ensure_dir
from aws_build.builds.naming import content_hash, make_unique_name, zip_name
from aws_build.container.command import CommandRunner, run_command
from aws_build.errors import FilesystemError
from aws_build.types import BuildMode, mode_info

logger = logging.getLogger(__name__)

# Entry name the Lambda "provided" runtime executes
BOOTSTRAP_NAME = "bootstrap"
BOOTSTRAP_MODE = 0o755


@dataclass
class PackagedArtifact:
    """A published build artifact.

    Attributes:
        path: Artifact file path.
        name: Artifact file name.
        sha256: SHA-256 hex digest of the packaged executable.
        size_bytes: Size of the artifact file.
    """

    path: Path
    name: str
    sha256: str
    size_bytes: int


def strip_binary(path: Path, runner: CommandRunner = run_command) -> None:
    """Remove symbols from an executable in place.

    Raises:
        ExternalProcessError: If `strip` fails.
    """
    runner(["strip", str(path)])


def read_binary(path: Path) -> bytes:
    """Read a built executable.

    Raises:
        FilesystemError: If the file cannot be read.
    """
    try:
        return path.read_bytes()
    except OSError as e:
        raise FilesystemError(f"failed to read {path}: {e}", path) from e


def write_bootstrap_zip(zip_path: Path, contents: bytes, when: datetime) -> None:
    """Write a zip holding the executable as its only entry, ``bootstrap``.

    The archive is closed, so its central directory is written, before this
    returns.
    """
    info = zipfile.ZipInfo(BOOTSTRAP_NAME, date_time=when.timetuple()[:6])
    info.compress_type = zipfile.ZIP_DEFLATED
    # Unix permission bits live in the high 16 bits of external_attr
    info.create_system = 3
    info.external_attr = (stat.S_IFREG | BOOTSTRAP_MODE) << 16
    with zipfile.ZipFile(zip_path, "w") as zf:
        zf.writestr(info, contents)


def package_artifact(
    mode: BuildMode,
    bin_path: Path,
    bin_name: str,
    output_dir: Path,
    when: datetime | None = None,
) -> PackagedArtifact:
    """Give the built executable a unique name, per mode.

    Args:
        mode: Build mode.
        bin_path: Path of the built (and possibly stripped) executable.
        bin_name: Binary target name.
        output_dir: Output root (``target/aws-build``).
        when: Build time; defaults to now (UTC). Only the date is used in
            the name.

    Returns:
        PackagedArtifact describing the written file.

    Raises:
        FilesystemError: If the executable cannot be read or the artifact
            cannot be written.
    """
    if when is None:
        when = datetime.now(timezone.utc)
    build_date: date = when.date()

    contents = read_binary(bin_path)
    base_name = make_unique_name(bin_name, contents, build_date, mode=mode)
    mode_dir = ensure_dir(output_dir / mode_info(mode).name)

    match mode:
        case BuildMode.AMAZON_LINUX_2:
            out_path = mode_dir / base_name
            logger.info("writing %s", out_path)
            try:
                shutil.copy(bin_path, out_path)
            except OSError as e:
                raise FilesystemError(
                    f"failed to copy {bin_path} to {out_path}: {e}", out_path
                ) from e
        case BuildMode.LAMBDA:
            out_path = mode_dir / zip_name(base_name)
            logger.info("writing %s", out_path)
            try:
                write_bootstrap_zip(out_path, contents, when)
            except OSError as e:
                raise FilesystemError(f"failed to write {out_path}: {e}", out_path) from e
        case _:
            assert_never(mode)

    return PackagedArtifact(
        path=out_path,
        name=out_path.name,
        sha256=content_hash(contents),
        size_bytes=out_path.stat().st_size,
    )


__all__ = [
    "BOOTSTRAP_MODE",
    "BOOTSTRAP_NAME",
    "PackagedArtifact",
    "package_artifact",
    "read_binary",
    "strip_binary",
    "write_bootstrap_zip",
]

"""Build request and result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from aws_build.config import DEFAULT_RUST_VERSION
from aws_build.container.launcher import Launcher
from aws_build.types import BuildMode, Relabel


@dataclass(frozen=True)
class BuildRequest:
    """Options for one build.

    Attributes:
        mode: Build for Amazon Linux 2 or AWS Lambda.
        project_path: Path of the crate to build. Must be the code root or
            somewhere below it.
        code_root: Directory mounted into the container; all source the
            build needs must live beneath it. Defaults to project_path.
        rust_version: Rust version to install, anything rustup accepts
            (e.g. "stable" or "1.45.2").
        bin: Binary target to build. May be None if the project has only
            one binary target.
        strip: Strip symbols from the executable.
        launcher: Container runtime.
        packages: Extra yum packages to install in the build image.
        relabel: Relabel bind mounts (z or Z volume option). This
            overwrites the SELinux label of the host files.
    """

    mode: BuildMode
    project_path: Path
    code_root: Path | None = None
    rust_version: str = DEFAULT_RUST_VERSION
    bin: str | None = None
    strip: bool = False
    launcher: Launcher = field(default_factory=Launcher)
    packages: tuple[str, ...] = ()
    relabel: Relabel | None = None

    @property
    def effective_code_root(self) -> Path:
        return self.code_root if self.code_root is not None else self.project_path


@dataclass
class BuildOutput:
    """Output of a successful build.

    Attributes:
        real: Path of the generated artifact.
        symlink: Path of the ``latest-<mode>`` symlink.
        mode: Build mode.
        bin: Binary target that was built.
        image_tag: Container image used for the build.
        sha256: SHA-256 of the packaged executable.
    """

    real: Path
    symlink: Path
    mode: BuildMode
    bin: str
    image_tag: str
    sha256: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "real": str(self.real),
            "symlink": str(self.symlink),
            "mode": self.mode.value,
            "bin": self.bin,
            "image_tag": self.image_tag,
            "sha256": self.sha256,
        }


__all__ = ["BuildOutput", "BuildRequest"]

"""Container runtime launcher.

This module handles:
- Selecting the container runtime (docker, sudo docker, or podman)
- Composing `build`, `run` and `unshare chown` command lines
- Rendering bind-mount volume arguments

Commands are returned as argument lists; running them is left to a
CommandRunner.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from aws_build.errors import ConfigurationError
from aws_build.types import ContainerCommand


@dataclass(frozen=True)
class UserAndGroup:
    """A numeric user and group identity."""

    uid: int
    gid: int

    @classmethod
    def current(cls) -> UserAndGroup:
        """The user running this process."""
        return cls(uid=os.getuid(), gid=os.getgid())

    @classmethod
    def root(cls) -> UserAndGroup:
        """The root user and group."""
        return cls(uid=0, gid=0)

    def arg(self) -> str:
        return f"{self.uid}:{self.gid}"


@dataclass(frozen=True)
class Volume:
    """A bind mount passed to `run -v`.

    Attributes:
        src: Host path.
        dst: Path inside the container.
        read_write: Mount writable; read-only otherwise.
        options: Extra mount options such as the relabel flag.
    """

    src: Path
    dst: Path
    read_write: bool = False
    options: tuple[str, ...] = ()

    def arg(self) -> str:
        """Render as `<src>:<dst>:<ro|rw>[,<option>...]`."""
        opts = ["rw" if self.read_write else "ro", *self.options]
        return f"{self.src}:{self.dst}:{','.join(opts)}"


@dataclass(frozen=True)
class Launcher:
    """A container runtime command.

    Attributes:
        program: Runtime executable, e.g. ``docker`` or ``podman``.
        sudo: Prefix every command with ``sudo``.
    """

    program: str = "docker"
    sudo: bool = False

    @classmethod
    def from_command(cls, command: ContainerCommand | str) -> Launcher:
        """Create a launcher from a container command choice."""
        command = ContainerCommand(command)
        if command is ContainerCommand.SUDO_DOCKER:
            return cls(program="docker", sudo=True)
        return cls(program=command.value)

    @classmethod
    def auto(cls) -> Launcher:
        """Find a container runtime on PATH.

        Docker is preferred when both are installed.

        Raises:
            ConfigurationError: If neither docker nor podman is found.
        """
        for program in ("docker", "podman"):
            if shutil.which(program):
                return cls(program=program)
        raise ConfigurationError(
            "no container runtime found: install docker or podman, "
            "or pass --container-cmd"
        )

    @property
    def is_rootless(self) -> bool:
        """Whether the runtime maps container root to the invoking user."""
        return Path(self.program).name == "podman"

    def base_args(self) -> list[str]:
        if self.sudo:
            return ["sudo", self.program]
        return [self.program]

    def build_args(
        self,
        tag: str,
        context: Path,
        build_args: Sequence[tuple[str, str]] = (),
    ) -> list[str]:
        """Compose the image build command."""
        cmd = self.base_args() + ["build"]
        for key, value in build_args:
            cmd.extend(["--build-arg", f"{key}={value}"])
        cmd.extend(["--tag", tag, str(context)])
        return cmd

    def run_args(
        self,
        image: str,
        volumes: Sequence[Volume] = (),
        env: Sequence[tuple[str, str]] = (),
        user: UserAndGroup | None = None,
        remove: bool = True,
        init: bool = True,
    ) -> list[str]:
        """Compose the container run command."""
        cmd = self.base_args() + ["run"]
        if remove:
            cmd.append("--rm")
        if init:
            cmd.append("--init")
        if user is not None:
            cmd.extend(["-u", user.arg()])
        for key, value in env:
            cmd.extend(["-e", f"{key}={value}"])
        for volume in volumes:
            cmd.extend(["-v", volume.arg()])
        cmd.append(image)
        return cmd

    def unshare_chown_args(self, user: UserAndGroup, path: Path) -> list[str]:
        """Compose a recursive chown run inside the rootless user namespace."""
        return self.base_args() + [
            "unshare",
            "chown",
            "--recursive",
            user.arg(),
            str(path),
        ]


def resolve_launcher(command: ContainerCommand | str | None) -> Launcher:
    """Resolve a launcher from an explicit choice or by auto-detection."""
    if command is None:
        return Launcher.auto()
    return Launcher.from_command(command)


__all__ = [
    "Launcher",
    "UserAndGroup",
    "Volume",
    "resolve_launcher",
]

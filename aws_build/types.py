"""Shared type definitions for aws_build.

This module contains the enums and small dataclasses shared across
subpackages to avoid circular imports.
"""

from dataclasses import dataclass
from enum import Enum
from typing import assert_never


class BuildMode(str, Enum):
    """Deployment target for a build.

    The value is the mode token used in cache directory names, output
    directory names, artifact names and the ``latest-<mode>`` symlink.
    """

    # Standalone executable for an Amazon Linux 2 host (e.g. EC2)
    AMAZON_LINUX_2 = "al2"
    # Zip file with a single "bootstrap" executable for AWS Lambda
    LAMBDA = "lambda"


class Relabel(str, Enum):
    """SELinux relabel option applied to bind mounts."""

    # Volume option "z": content may be shared between containers
    SHARED = "shared"
    # Volume option "Z": content is private to this container
    UNSHARED = "unshared"


class ContainerCommand(str, Enum):
    """Container runtime used to run the build."""

    DOCKER = "docker"
    SUDO_DOCKER = "sudo-docker"
    PODMAN = "podman"


@dataclass(frozen=True)
class ModeInfo:
    """Per-mode build parameters.

    Attributes:
        name: Mode token (``al2`` or ``lambda``).
        base_image: Image the build container is derived from.
        artifact_suffix: Suffix of the published artifact file.
    """

    name: str
    base_image: str
    artifact_suffix: str


def mode_info(mode: BuildMode) -> ModeInfo:
    """Return the build parameters for a mode."""
    match mode:
        case BuildMode.AMAZON_LINUX_2:
            # https://hub.docker.com/_/amazonlinux
            return ModeInfo(
                name="al2",
                base_image="docker.io/amazonlinux:2",
                artifact_suffix="",
            )
        case BuildMode.LAMBDA:
            # https://github.com/lambci/docker-lambda#documentation
            return ModeInfo(
                name="lambda",
                base_image="docker.io/lambci/lambda:build-provided.al2",
                artifact_suffix=".zip",
            )
        case _:
            assert_never(mode)


def mount_option(relabel: Relabel | None) -> str | None:
    """Return the bind-mount option for a relabel policy, if any."""
    match relabel:
        case None:
            return None
        case Relabel.SHARED:
            return "z"
        case Relabel.UNSHARED:
            return "Z"
        case _:
            assert_never(relabel)


__all__ = [
    "BuildMode",
    "ContainerCommand",
    "ModeInfo",
    "Relabel",
    "mode_info",
    "mount_option",
]

"""Binary target discovery.

Reads `cargo metadata` for the project (without dependencies) and picks the
binary target to build.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from aws_build.container.command import CommandRunner, run_command
from aws_build.errors import ConfigurationError

logger = logging.getLogger(__name__)

METADATA_COMMAND = ["cargo", "metadata", "--format-version", "1", "--no-deps"]


class CargoTarget(BaseModel):
    """One build target of a package."""

    model_config = ConfigDict(extra="ignore")

    name: str
    kind: list[str] = Field(default_factory=list)


class CargoPackage(BaseModel):
    """A workspace package."""

    model_config = ConfigDict(extra="ignore")

    name: str
    targets: list[CargoTarget] = Field(default_factory=list)


class CargoMetadata(BaseModel):
    """The subset of `cargo metadata` output used here."""

    model_config = ConfigDict(extra="ignore")

    packages: list[CargoPackage] = Field(default_factory=list)

    def binaries(self) -> list[str]:
        """Names of all binary targets, in package order."""
        return [
            target.name
            for package in self.packages
            for target in package.targets
            if "bin" in target.kind
        ]


def parse_metadata(raw: str) -> CargoMetadata:
    """Parse `cargo metadata` JSON output.

    Raises:
        ConfigurationError: If the output is not valid metadata.
    """
    # Output is combined with stderr, which may carry cargo warnings
    json_lines = [line for line in raw.splitlines() if line.startswith("{")]
    if json_lines:
        raw = json_lines[-1]
    try:
        return CargoMetadata.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigurationError(f"failed to parse cargo metadata: {e}") from e


def get_package_binaries(
    project_path: Path,
    runner: CommandRunner = run_command,
) -> list[str]:
    """Get the names of all the binary targets in a project.

    Raises:
        ExternalProcessError: If `cargo metadata` fails.
        ConfigurationError: If its output cannot be parsed.
    """
    result = runner(METADATA_COMMAND, cwd=project_path)
    binaries = parse_metadata(result.output).binaries()
    logger.debug("Binary targets in %s: %s", project_path, binaries)
    return binaries


def select_bin(explicit: str | None, binaries: Sequence[str]) -> str:
    """Choose the binary target to build.

    Args:
        explicit: Target named by the user, if any.
        binaries: Binary targets found in the project.

    Returns:
        The binary target name.

    Raises:
        ConfigurationError: If no target was named and the project does not
            have exactly one.
    """
    if explicit:
        return explicit
    if len(binaries) == 1:
        return binaries[0]
    if not binaries:
        raise ConfigurationError("no bin target found in package")
    raise ConfigurationError(
        "must specify bin target when package has more than one "
        f"(found: {', '.join(binaries)})"
    )


__all__ = [
    "METADATA_COMMAND",
    "CargoMetadata",
    "CargoPackage",
    "CargoTarget",
    "get_package_binaries",
    "parse_metadata",
    "select_bin",
]

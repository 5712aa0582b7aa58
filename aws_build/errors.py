"""Error definitions for aws_build.

Every error raised by the build pipeline derives from AwsBuildError and
carries a stable ``code`` that the CLI surfaces in JSON output. Nothing in
the pipeline retries on error.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

# Stable error codes
CONFIGURATION_ERROR = "configuration_error"
EXTERNAL_PROCESS_ERROR = "external_process_error"
FILESYSTEM_ERROR = "filesystem_error"


class AwsBuildError(Exception):
    """Base error for build operations."""

    def __init__(self, message: str, code: str = "aws_build_error") -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def details(self) -> dict[str, Any]:
        """Return extra structured context for the error."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"code": self.code, "message": self.message}
        details = self.details()
        if details:
            result["details"] = details
        return result


class ConfigurationError(AwsBuildError):
    """Raised when the build request is invalid.

    Detected before any container work starts. Examples are a project path
    outside the code root, an ambiguous binary target, or a path that cannot
    be passed to the container runtime as text.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, code=CONFIGURATION_ERROR)


class ExternalProcessError(AwsBuildError):
    """Raised when an external command exits non-zero or fails to start.

    Attributes:
        command: The full command line that was executed.
        exit_code: Process exit code, or None if it never started.
        output: Combined stdout/stderr captured from the process.
    """

    def __init__(
        self,
        command: str,
        exit_code: int | None,
        output: str = "",
        message: str | None = None,
    ) -> None:
        if message is None:
            if exit_code is None:
                message = f"command {command} failed to start"
            else:
                message = f"command {command} failed with exit code {exit_code}"
        super().__init__(message, code=EXTERNAL_PROCESS_ERROR)
        self.command = command
        self.exit_code = exit_code
        self.output = output

    def details(self) -> dict[str, Any]:
        return {
            "command": self.command,
            "exit_code": self.exit_code,
            "output": self.output,
        }


class FilesystemError(AwsBuildError):
    """Raised when a host filesystem operation fails."""

    def __init__(self, message: str, path: Path | str) -> None:
        super().__init__(message, code=FILESYSTEM_ERROR)
        self.path = Path(path)

    def details(self) -> dict[str, Any]:
        return {"path": str(self.path)}


__all__ = [
    "CONFIGURATION_ERROR",
    "EXTERNAL_PROCESS_ERROR",
    "FILESYSTEM_ERROR",
    "AwsBuildError",
    "ConfigurationError",
    "ExternalProcessError",
    "FilesystemError",
]

"""Shared fixtures for aws_build tests.

FakeRunner stands in for every external process. It records each command,
answers `cargo metadata`, and simulates the build container by writing the
binary where the container's build script would.
"""

import json
from collections.abc import Mapping, Sequence
from pathlib import Path

import pytest

from aws_build.container.command import CommandResult, format_command
from aws_build.errors import ExternalProcessError

BINARY_CONTENTS = b"\x7fELF fake executable"


def command_kind(args: Sequence[str]) -> str:
    """Classify a command: cargo, strip, or the runtime subcommand."""
    args = list(args)
    if args[0] == "sudo":
        args = args[1:]
    if args[0] in ("cargo", "strip"):
        return args[0]
    return args[1]


def cargo_metadata(*bins: str, libs: Sequence[str] = ()) -> str:
    """Render `cargo metadata` output for one package."""
    targets = [{"name": b, "kind": ["bin"], "src_path": f"src/bin/{b}.rs"} for b in bins]
    targets += [{"name": lib, "kind": ["lib"]} for lib in libs]
    return json.dumps(
        {
            "packages": [{"name": "proj", "version": "0.0.0", "targets": targets}],
            "workspace_root": "/code",
            "version": 1,
        }
    )


class FakeRunner:
    """Records commands and simulates their effects.

    Attributes:
        calls: Every command, as a list of strings.
        cwds: Working directory of every command.
        fail: Command kinds (see command_kind) that exit with code 1.
        metadata: Output returned for `cargo metadata`.
        contents: Bytes the simulated build writes.
        context_files: Files present in the image build context.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.cwds: list[Path | None] = []
        self.fail: set[str] = set()
        self.metadata = cargo_metadata("proj")
        self.contents = BINARY_CONTENTS
        self.context_files: dict[str, str] = {}

    def __call__(
        self,
        args: Sequence[str | Path],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
    ) -> CommandResult:
        str_args = [str(a) for a in args]
        self.calls.append(str_args)
        self.cwds.append(cwd)
        kind = command_kind(str_args)

        if kind in self.fail:
            output = f"{kind} exploded"
            if check:
                raise ExternalProcessError(format_command(str_args), 1, output)
            return CommandResult(args=str_args, exit_code=1, output=output)

        output = ""
        if kind == "cargo":
            output = self.metadata
        elif kind == "build":
            context = Path(str_args[-1])
            self.context_files = {
                p.name: p.read_text(encoding="utf-8") for p in context.iterdir()
            }
        elif kind == "run":
            self._simulate_container(str_args)
        return CommandResult(args=str_args, exit_code=0, output=output)

    def _simulate_container(self, args: list[str]) -> None:
        env = dict(
            args[i + 1].split("=", 1) for i, a in enumerate(args) if a == "-e"
        )
        mounts = [args[i + 1] for i, a in enumerate(args) if a == "-v"]
        output_dir = next(
            Path(m.split(":")[0]) for m in mounts if m.split(":")[1] == "/code/target"
        )
        mode_name = Path(env["TARGET_DIR"]).name
        bin_path = output_dir / mode_name / "release" / env["BIN_TARGET"]
        bin_path.parent.mkdir(parents=True, exist_ok=True)
        bin_path.write_bytes(self.contents)
        bin_path.chmod(0o755)

    def kinds(self) -> list[str]:
        return [command_kind(c) for c in self.calls]


@pytest.fixture
def fake_runner() -> FakeRunner:
    """A FakeRunner for one test."""
    return FakeRunner()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """An empty project directory."""
    path = tmp_path / "proj"
    path.mkdir()
    (path / "Cargo.toml").write_text('[package]\nname = "proj"\n', encoding="utf-8")
    return path

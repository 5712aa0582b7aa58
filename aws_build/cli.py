"""Thin CLI wrapper for aws_build.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from aws_build import __version__
from aws_build.config import get_settings, print_settings_json
from aws_build.errors import AwsBuildError, ExternalProcessError
from aws_build.types import BuildMode, ContainerCommand, Relabel

app = typer.Typer(
    name="aws-build",
    help="Build a Rust project in a container for deployment to AWS",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"aws-build version {__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Build a Rust project in a container for deployment to AWS."""


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings), markup=False, soft_wrap=True)
        return

    tmp_dir_display = str(settings.tmp_dir) if settings.tmp_dir else "(system default)"
    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]Toolchain:[/bold]")
    console.print(f"  Rust version:        {settings.rust_version}")
    console.print(f"  Strip:               {settings.strip}")
    console.print()
    console.print("[bold]Container:[/bold]")
    console.print(
        f"  Container command:   {settings.container_cmd or '(auto-detect)'}"
    )
    console.print(f"  Relabel:             {settings.relabel or '(none)'}")
    console.print()
    console.print("[bold]Paths:[/bold]")
    console.print(f"  Temp directory:      {tmp_dir_display}")
    console.print()
    console.print("[bold]Operational:[/bold]")
    console.print(f"  Log level:           {settings.log_level}")


@app.command()
def build(
    mode: Annotated[
        BuildMode,
        typer.Argument(help="al2 (Amazon Linux 2) or lambda (AWS Lambda)"),
    ],
    project: Annotated[
        Path,
        typer.Argument(help="Path of the project to build"),
    ] = Path("."),
    code_root: Annotated[
        Path | None,
        typer.Option(
            "--code-root",
            help="Directory mounted in the container; defaults to the project",
        ),
    ] = None,
    bin: Annotated[
        str | None,
        typer.Option(
            "--bin",
            help="Binary target to build (required with more than one)",
        ),
    ] = None,
    strip: Annotated[
        bool | None,
        typer.Option("--strip/--no-strip", help="Strip debug symbols"),
    ] = None,
    rust_version: Annotated[
        str | None,
        typer.Option("--rust-version", help="Rust version (default: stable)"),
    ] = None,
    packages: Annotated[
        list[str] | None,
        typer.Option(
            "--package",
            "-p",
            help="yum devel package to install in the build container "
            "(can be repeated)",
        ),
    ] = None,
    relabel: Annotated[
        Relabel | None,
        typer.Option("--relabel", help="Relabel bind mounts: shared (z) or unshared (Z)"),
    ] = None,
    container_cmd: Annotated[
        ContainerCommand | None,
        typer.Option(
            "--container-cmd",
            help="docker, sudo-docker, or podman (auto-detected by default)",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Build the project and publish target/latest-<mode>."""
    from aws_build.builds.service import request_from_settings, run_build

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        request = request_from_settings(
            settings,
            mode=mode,
            project_path=project,
            code_root=code_root,
            bin=bin,
            strip=strip,
            rust_version=rust_version,
            packages=packages or [],
            relabel=relabel,
            container_cmd=container_cmd,
        )
        output = run_build(request, tmp_dir=settings.tmp_dir)
    except AwsBuildError as e:
        if json_output:
            console.print(
                json.dumps({"error": e.to_dict()}, indent=2), markup=False, soft_wrap=True
            )
        else:
            err_console.print(f"[red]Error ({e.code}): {escape(e.message)}[/red]")
            if isinstance(e, ExternalProcessError) and e.output:
                err_console.print(e.output, markup=False, highlight=False)
        raise typer.Exit(code=1) from None

    if json_output:
        console.print(
            json.dumps(output.to_dict(), indent=2), markup=False, soft_wrap=True
        )
    else:
        console.print(f"[green]✓ Built {output.bin} ({output.mode.value})[/green]")
        console.print(f"  Artifact: {output.real}", highlight=False, soft_wrap=True)
        # Parsed by scripts, keep the plain "symlink: <path>" form
        console.print(
            f"symlink: {output.symlink}", markup=False, highlight=False, soft_wrap=True
        )


if __name__ == "__main__":
    app()

"""Typer-based CLI: ``cargo public-api-crates [check]``."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .analyze import ReferenceResult, analyze
from .build_docs import build_docs
from .check import compare, crates_in_public_api
from .config_manager import load_manifest
from .errors import PublicApiCratesError
from .loader import load_crate
from .models import Crate
from .output import render_report

logger = logging.getLogger(__name__)

err_console = Console(stderr=True)

app = typer.Typer(
    help="List the external crates whose items appear in a crate's public API.",
    rich_markup_mode="rich",
    add_completion=False,
)


@dataclass
class RunOptions:
    include_std: bool = False
    manifest_path: Optional[Path] = None
    skip_build: bool = False
    doc_json: Optional[Path] = None


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"public-api-crates v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(exc: PublicApiCratesError) -> typer.Exit:
    err_console.print(f"[bold red]error:[/bold red] {exc}")
    return typer.Exit(code=2)


def _load_and_analyze(opts: RunOptions) -> Tuple[Crate, ReferenceResult]:
    if opts.doc_json is not None:
        doc_json_path = opts.doc_json
    else:
        manifest = load_manifest(opts.manifest_path)
        with err_console.status(f"Building docs for {manifest.package_name}..."):
            doc_json_path = build_docs(manifest, skip_build=opts.skip_build)
    logger.debug("Analyzing %s", doc_json_path)
    krate = load_crate(doc_json_path)
    return krate, analyze(krate, include_std=opts.include_std)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    include_std: bool = typer.Option(
        False, "--include-std", help="Include types defined in `std`, `alloc`, and `core`."
    ),
    manifest_path: Optional[Path] = typer.Option(None, "--manifest-path", help="Path to Cargo.toml."),
    skip_build: bool = typer.Option(False, "--skip-build", help="Skip building the documentation."),
    doc_json: Optional[Path] = typer.Option(
        None,
        "--doc-json",
        exists=True,
        dir_okay=False,
        help="Analyze an existing rustdoc JSON file instead of building one.",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
):
    """Report external items reachable from the public API, grouped by crate."""
    _configure_logging(verbose)
    ctx.obj = RunOptions(
        include_std=include_std,
        manifest_path=manifest_path,
        skip_build=skip_build,
        doc_json=doc_json,
    )
    if ctx.invoked_subcommand is not None:
        return

    try:
        krate, result = _load_and_analyze(ctx.obj)
        typer.echo(render_report(krate, result), nl=False)
    except PublicApiCratesError as exc:
        raise _fail(exc)


@app.command("check")
def check(ctx: typer.Context):
    """Compare crates in the public API with [package.metadata.cargo-public-api-crates] allowed."""
    opts: RunOptions = ctx.obj
    try:
        manifest = load_manifest(opts.manifest_path)
        krate, result = _load_and_analyze(opts)
        report = compare(crates_in_public_api(krate, result), manifest.allowed)
    except PublicApiCratesError as exc:
        raise _fail(exc)

    for line in report.lines():
        typer.echo(line)
    raise typer.Exit(code=report.exit_code)


def running_as_cargo_cmd() -> bool:
    """True when launched as ``cargo public-api-crates``, which passes the subcommand name first."""
    return "CARGO" in os.environ and "CARGO_PKG_NAME" not in os.environ


def run(argv: Optional[List[str]] = None) -> None:
    """Console script entry point."""
    args = list(sys.argv[1:] if argv is None else argv)
    if running_as_cargo_cmd() and args:
        args = args[1:]
    app(args=args, prog_name="cargo public-api-crates")

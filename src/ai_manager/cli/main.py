"""CLI entry point for ai-manager."""

from __future__ import annotations

import logging

import click

from ai_manager import __version__
from ai_manager.cli.context import CliContext
from ai_manager.core.config import resolve_project_start, resolve_registry_root


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@click.group(invoke_without_command=True)
@click.option("--cwd", default=None, help="Start project detection here instead of the cwd")
@click.option("--registry", default=None, help="Registry root (default: built-in registry)")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(__version__, "--version", prog_name="ai-manager")
@click.pass_context
def cli(ctx: click.Context, cwd: str | None, registry: str | None, verbose: bool) -> None:
    """ai-manager -- generate and sync AI agent instruction files.

    \b
    Usage:
      ai-manager                    (same as: ai-manager status)
      ai-manager init [--backup]
      ai-manager skills list|add|remove [--backup]
      ai-manager harnesses list|add|remove [--backup]
      ai-manager doctor
    """
    _configure_logging(verbose)
    ctx.obj = CliContext(
        version=__version__,
        start_dir=resolve_project_start(cwd),
        registry_root=resolve_registry_root(registry),
    )
    if ctx.invoked_subcommand is None:
        from ai_manager.cli.commands import status_cmd

        ctx.invoke(status_cmd)


def _register_subcommands() -> None:
    """Register CLI subcommands."""
    from ai_manager.cli.commands import (
        doctor_cmd,
        harnesses_cmd,
        init_cmd,
        skills_cmd,
        status_cmd,
    )

    cli.add_command(status_cmd, "status")
    cli.add_command(init_cmd, "init")
    cli.add_command(skills_cmd, "skills")
    cli.add_command(harnesses_cmd, "harnesses")
    cli.add_command(doctor_cmd, "doctor")


_register_subcommands()


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()

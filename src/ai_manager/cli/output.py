"""Rich-powered terminal output for ai-manager commands."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ai_manager.core.errors import SchemaError
from ai_manager.core.manager import DoctorCheck, OperationResult, ProjectStatus
from ai_manager.types.manifests import HarnessManifest, SkillManifest

# ── Palette ──────────────────────────────────────────────────────────────────

STYLE_OK = "bold #34d399"        # green
STYLE_WARN = "bold #fbbf24"      # amber
STYLE_BAD = "bold #f87171"       # red
STYLE_DIM = "#7c7c8a"            # muted grey
STYLE_ACCENT = "bold #a78bfa"    # violet

ICON_OK = Text("OK", style=STYLE_OK)
ICON_WARN = Text("!", style=STYLE_WARN)
ICON_BAD = Text("X", style=STYLE_BAD)


def _console() -> Console:
    return Console(highlight=False)


def _err_console() -> Console:
    return Console(stderr=True, highlight=False)


def print_header(version: str) -> None:
    body = Text.assemble(
        ("ai-manager", "bold"), " ", (f"v{version}", STYLE_DIM), "\n",
        ("AI harness + skill manager", STYLE_DIM),
    )
    _console().print(Panel(body, border_style="cyan", expand=False, padding=(1, 2)))


def _status_table(*headers: str) -> Table:
    table = Table(show_header=True, header_style=STYLE_DIM)
    for header in headers:
        table.add_column(header, overflow="fold")
    return table


def print_status(status: ProjectStatus) -> None:
    state = status.state
    table = _status_table("Status", "Item", "Details")
    table.add_row(
        ICON_OK if status.initialized else ICON_BAD,
        "Init",
        "Initialized" if status.initialized else "Not initialized",
    )
    table.add_row(ICON_OK, "Project", str(status.project_root))
    skill_ids = state.skill_ids if state else []
    harness_ids = state.harness_ids if state else []
    table.add_row(
        ICON_OK if skill_ids else ICON_BAD, "Skills", ", ".join(skill_ids) or "None",
    )
    table.add_row(
        ICON_OK if harness_ids else ICON_BAD, "Harness", ", ".join(harness_ids) or "None",
    )
    table.add_row(
        ICON_OK,
        "Registry",
        f"{status.registry_skills} skills, {status.registry_harnesses} harnesses loaded",
    )
    console = _console()
    console.print(table)
    if not status.initialized:
        console.print(Text.assemble(
            ICON_WARN, " ", ("Project not initialized. Run:", STYLE_WARN), " ai-manager init",
        ))


def print_skills(skills: Iterable[SkillManifest]) -> None:
    table = _status_table("Id", "Name", "Description")
    for skill in skills:
        table.add_row(skill.id, skill.name, skill.description)
    _console().print(table)


def print_harnesses(harnesses: Iterable[HarnessManifest]) -> None:
    table = _status_table("Id", "Name", "Outputs")
    for harness in harnesses:
        table.add_row(harness.id, harness.name, ", ".join(o.target for o in harness.outputs))
    _console().print(table)


def print_doctor(checks: list[DoctorCheck]) -> None:
    table = _status_table("Status", "Item", "Details")
    for check in checks:
        table.add_row(ICON_OK if check.ok else ICON_BAD, check.label, check.detail)
    _console().print(table)


def print_result(result: OperationResult, message: str, project_root: Path) -> None:
    """Summarize the files an operation wrote, removed and backed up."""
    console = _console()
    table = _status_table("Change", "File")
    for target in result.applied.removed:
        table.add_row(Text("removed", style=STYLE_WARN), target)
    for target in result.applied.written:
        table.add_row(Text("written", style=STYLE_OK), target)
    for path in result.applied.backed_up:
        shown = path.relative_to(project_root) if path.is_relative_to(project_root) else path
        table.add_row(Text("backup", style=STYLE_DIM), str(shown))
    console.print(table)
    print_success(message)


def print_success(message: str) -> None:
    _console().print(Text.assemble(ICON_OK, " ", (message, STYLE_OK)))


def print_warning(message: str) -> None:
    _console().print(Text.assemble(ICON_WARN, " ", (message, STYLE_WARN)), soft_wrap=True)


def print_error(message: str) -> None:
    _err_console().print(Text.assemble(ICON_BAD, " ", (message, STYLE_BAD)), soft_wrap=True)


def print_schema_error(exc: SchemaError) -> None:
    console = _err_console()
    console.print(
        Text.assemble(ICON_BAD, " ", (f"Invalid {exc.source}", STYLE_BAD)), soft_wrap=True,
    )
    for violation in exc.violations:
        console.print(Text(f"  - {violation}", style=STYLE_DIM), soft_wrap=True)

"""netinteract validate — Load a script and report problems without running it.

Parses the script YAML, builds every target and action, and checks that
static jump targets exist. No network requests are made.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from netinteract.engine.actions import build_action
from netinteract.errors import ScriptError
from netinteract.script.loader import find_unresolved_jumps, load_script

console = Console(stderr=True)

# ── Severity ordering ─────────────────────────────────────────────────────

_SEVERITY_ORDER = {"error": 0, "warning": 1, "info": 2}


def _sev_style(severity: str) -> str:
    return {"error": "bold red", "warning": "yellow", "info": "dim"}.get(severity, "")


# ── Validation helpers ────────────────────────────────────────────────────


def validate_script_file(path: Path) -> list[dict[str, Any]]:
    """Validate a script YAML file. Returns list of issue dicts."""
    issues: list[dict[str, Any]] = []

    try:
        script = load_script(path)
    except ScriptError as exc:
        issues.append({"severity": "error", "field": "script", "message": f"{type(exc).__name__}: {exc}"})
        return issues

    if not script.default_target:
        issues.append(
            {
                "severity": "warning",
                "field": "default_target",
                "message": "No default_target; runs must name an entry target with --target",
            }
        )
    elif script.find_target(script.default_target) is None:
        issues.append(
            {
                "severity": "error",
                "field": "default_target",
                "message": f"default_target '{script.default_target}' is not a declared target",
            }
        )

    for target, missing in find_unresolved_jumps(script):
        issues.append(
            {
                "severity": "error",
                "field": f"targets.{target}",
                "message": f"Jump to unknown target '{missing}'",
            }
        )

    for target in script.targets:
        for index, config in enumerate(target.actions):
            try:
                build_action(config)
            except ScriptError as exc:
                issues.append(
                    {
                        "severity": "error",
                        "field": f"targets.{target.name}.actions[{index}]",
                        "message": f"{type(exc).__name__}: {exc}",
                    }
                )
        if not target.actions:
            issues.append(
                {
                    "severity": "info",
                    "field": f"targets.{target.name}",
                    "message": "Target has no actions",
                }
            )

    return issues


# ── Command ───────────────────────────────────────────────────────────────


def validate(
    script_path: Path = typer.Argument(..., help="Script YAML file to validate."),
) -> None:
    """Validate a script file without executing it."""
    issues = validate_script_file(script_path)
    issues.sort(key=lambda i: _SEVERITY_ORDER.get(i["severity"], 9))

    errors = [i for i in issues if i["severity"] == "error"]
    warnings = [i for i in issues if i["severity"] == "warning"]

    console.print()
    console.print(f"[bold]Validating[/bold] {escape(str(script_path))}")

    for issue in issues:
        style = _sev_style(issue["severity"])
        label = issue["severity"].upper()
        field_str = f" [{issue['field']}]" if issue["field"] else ""
        console.print(f"  [{style}]{label}[/{style}]{escape(field_str)} {escape(issue['message'])}")

    console.print()
    if errors:
        console.print(
            Panel(
                f"[bold red]{len(errors)} error(s)[/bold red], {len(warnings)} warning(s)",
                title="[red]Validation Failed[/red]",
                border_style="red",
            )
        )
        raise typer.Exit(code=1)

    console.print(
        Panel(
            f"[bold green]Script is valid[/bold green] ({len(warnings)} warning(s))",
            title="[green]Validation Passed[/green]",
            border_style="green",
        )
    )

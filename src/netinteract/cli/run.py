"""netinteract run — Execute a script.

Loads the script, builds the network collaborator from config, runs the
entry target and displays the outcome as a Rich panel plus an outputs table
(or JSON on stdout for machine consumption).
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from netinteract.accessors import create_web_accessor
from netinteract.config import NetInteractConfig, NetInteractConfigError
from netinteract.engine.context import InteractionResult
from netinteract.engine.executor import InteractionExecutor
from netinteract.errors import ScriptError
from netinteract.models import ACCESSOR_KINDS
from netinteract.script.loader import load_script
from netinteract.script.model import Script

console = Console(stderr=True)
output_console = Console()  # stdout for machine-readable output

logger = logging.getLogger("netinteract.cli.run")


def _error_panel(title: str, message: str) -> None:
    console.print(Panel(f"[red]{escape(message)}[/red]", title=f"[red]{title}[/red]", border_style="red"))


def _parse_inputs(pairs: list[str]) -> dict[str, str]:
    """Parse repeated ``KEY=VALUE`` options into a dict."""
    inputs: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            _error_panel("Input Error", f"Invalid input: {pair}\n\nExpected format: KEY=VALUE")
            raise typer.Exit(code=2)
        inputs[key] = value
    return inputs


def _build_config(config_path: Optional[Path], accessor: Optional[str]) -> NetInteractConfig:
    """Load config.yaml if given (or present in cwd); CLI options override it."""
    if config_path is None and Path("netinteract.yaml").is_file():
        config_path = Path("netinteract.yaml")
    config = NetInteractConfig.from_file(config_path) if config_path is not None else NetInteractConfig()
    if accessor is not None:
        if accessor not in ACCESSOR_KINDS:
            raise NetInteractConfigError(
                f"Unknown accessor: {accessor}\n\nExpected one of: {', '.join(ACCESSOR_KINDS)}"
            )
        config.accessor = accessor
    return config


async def execute_script(
    script: Script,
    config: NetInteractConfig,
    inputs: dict[str, str],
    target: Optional[str],
) -> InteractionResult:
    """Run ``script`` with a collaborator built from ``config`` and release it afterwards."""
    accessor = create_web_accessor(config)
    executor = InteractionExecutor(accessor, max_jump_depth=config.max_jump_depth)
    try:
        return await executor.run(script, inputs, target)
    finally:
        closer = getattr(accessor, "aclose", None) or getattr(accessor, "close", None)
        if closer is not None:
            outcome = closer()
            if inspect.isawaitable(outcome):
                await outcome


def _print_result(script_path: Path, entry: str, result: InteractionResult) -> None:
    if result.ok:
        verdict = "[bold green]RUN SUCCEEDED[/bold green]"
        border = "green"
    else:
        verdict = "[bold red]RUN FAILED[/bold red]"
        border = "red"

    lines = [
        verdict,
        "",
        f"  Script:   {escape(str(script_path))}",
        f"  Target:   {entry}",
        f"  Outputs:  {len(result.outputs or {})}",
    ]
    if result.message:
        lines.append(f"  Message:  {escape(result.message)}")
    console.print()
    console.print(Panel("\n".join(lines), border_style=border))

    if result.outputs:
        table = Table(title="Outputs", show_lines=False)
        table.add_column("Name", style="bold")
        table.add_column("Value")
        for name, value in result.outputs.items():
            table.add_row(escape(name), escape(value))
        output_console.print(table)


def run(
    script_path: Path = typer.Argument(..., help="Script YAML file to execute."),
    target: Optional[str] = typer.Option(
        None,
        "--target",
        "-t",
        help="Entry target. Default: the script's default_target.",
    ),
    input_values: list[str] = typer.Option(
        [],
        "--input",
        "-i",
        help="Input value as KEY=VALUE; repeatable.",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config YAML file. Default: ./netinteract.yaml when present.",
    ),
    accessor: Optional[str] = typer.Option(
        None,
        "--accessor",
        "-a",
        help="Network collaborator: http or playwright.",
    ),
    output_format: str = typer.Option(
        "text",
        "--output",
        "-o",
        help="Output format: text or json.",
    ),
) -> None:
    """Run a script against its web site and print the extracted outputs."""
    if output_format not in ("text", "json"):
        _error_panel("Config Error", f"Invalid output format: {output_format}\n\nValid formats: text, json")
        raise typer.Exit(code=2)

    try:
        config = _build_config(config_path, accessor)
    except NetInteractConfigError as exc:
        _error_panel("Config Error", str(exc))
        raise typer.Exit(code=2)

    inputs = {**config.inputs, **_parse_inputs(input_values)}

    try:
        script = load_script(script_path)
        entry = target or script.default_target or ""
        result = asyncio.run(execute_script(script, config, inputs, target))
    except ScriptError as exc:
        logger.debug("Script error", exc_info=True)
        _error_panel("Script Error", f"{type(exc).__name__}: {exc}")
        raise typer.Exit(code=2)
    except NetInteractConfigError as exc:
        _error_panel("Config Error", str(exc))
        raise typer.Exit(code=2)

    if output_format == "json":
        output_console.print_json(
            json.dumps(
                {
                    "ok": result.ok,
                    "message": result.message,
                    "target": entry,
                    "outputs": result.outputs or {},
                }
            )
        )
    else:
        _print_result(script_path, entry, result)

    if not result.ok:
        raise typer.Exit(code=1)

"""Command line interface for foldsort."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from foldsort.config import ConfigError, ConfigManager
from foldsort.organization import ExecutionError, ExecutionResult
from foldsort.planning import ParseError, Plan, PlanningError, PlanResult, parse_plan_response
from foldsort.scanning import DirectoryEntry, EntryKind, ScanError
from foldsort.service import OrganizerService
from foldsort.state import MoveRecord, StateError

console = Console()
err_console = Console(stderr=True)

_HANDLED_ERRORS = (ConfigError, ScanError, PlanningError, ExecutionError, StateError)


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    raise click.ClickException(message) from original


def _error_code(exc: Exception) -> str:
    codes = {
        ConfigError: "config_error",
        ScanError: "scan_error",
        ParseError: "parse_error",
        PlanningError: "upstream_error",
        ExecutionError: "execution_error",
        StateError: "state_error",
    }
    for error_type, code in codes.items():
        if isinstance(exc, error_type):
            return code
    return "internal_error"


def _fail(exc: Exception, *, json_output: bool) -> None:
    details = None
    if isinstance(exc, ParseError) and exc.raw_response is not None:
        details = {"raw_response": exc.raw_response}
        if not json_output:
            err_console.print(Syntax(exc.raw_response, "json", word_wrap=True))
    _handle_cli_error(
        str(exc), code=_error_code(exc), json_output=json_output, details=details, original=exc
    )


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _build_service(ctx: click.Context) -> OrganizerService:
    """Load configuration, configure logging, and return a service instance."""
    manager = ConfigManager()
    manager.ensure_exists()
    config = manager.load()
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    _configure_logging("DEBUG" if verbose else config.logging.level)
    return OrganizerService(config)


def _format_bytes(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{size} B" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def _entries_table(root: Path, entries: list[DirectoryEntry]) -> Table:
    table = Table(title=f"Contents of {root}")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Files", justify="right")
    table.add_column("Top extensions")
    table.add_column("Markers")
    for entry in entries:
        context = entry.context
        if entry.kind is EntryKind.FILE:
            table.add_row(entry.name, "file", "", "", "")
        elif context is None:
            table.add_row(entry.name, "folder", "?", "[red]unreadable[/red]", "")
        else:
            count = f"{context.file_count}+" if context.truncated else str(context.file_count)
            table.add_row(
                entry.name,
                "folder",
                count,
                ", ".join(context.top_extensions),
                ", ".join(context.markers),
            )
    return table


def _plan_table(plan: Plan) -> Table:
    table = Table(title="Proposed organization")
    table.add_column("Category")
    table.add_column("Items")
    table.add_column("Reason")
    for category in plan.categories:
        names = "\n".join(
            f"{item.name}/" if item.kind is EntryKind.FOLDER else item.name
            for item in category.items
        )
        table.add_row(category.name, names, category.reason or "")
    return table


def _emit_debug(result: PlanResult) -> None:
    if result.debug is None:
        return
    debug = result.debug
    err_console.rule("Debug")
    err_console.print(f"Model: {debug.model}  Items: {debug.item_count}  Usage: {debug.usage}")
    err_console.print(Syntax(debug.user_prompt, "markdown", word_wrap=True))
    err_console.print(Syntax(debug.raw_response, "json", word_wrap=True))


def _execution_payload(root: Path, result: ExecutionResult) -> dict[str, Any]:
    return {
        "root": str(root),
        "moved": [record.model_dump(mode="json") for record in result.records],
        "skipped": [
            {
                "name": outcome.item.name,
                "category": outcome.category,
                "reason": outcome.skip_reason.value if outcome.skip_reason else None,
                "detail": outcome.detail,
            }
            for outcome in result.skipped
        ],
        "bytes_moved": result.bytes_moved,
    }


def _format_history_event(record: MoveRecord) -> str:
    stamp = record.timestamp.strftime("%Y-%m-%d %H:%M:%S")
    suffix = "/" if record.kind is EntryKind.FOLDER else ""
    return f"[{stamp}] {record.name}{suffix} -> {record.category}"


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="foldsort")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """foldsort tidies a folder by sorting its contents into AI-suggested categories."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option("--json", "json_output", is_flag=True, help="Emit the listing as JSON.")
@click.pass_context
def scan(ctx: click.Context, path: str, json_output: bool) -> None:
    """List the contents of PATH with summaries of each subfolder."""
    root = Path(path).expanduser().resolve()
    try:
        service = _build_service(ctx)
        entries = service.scan_folder(root)
    except _HANDLED_ERRORS as exc:
        _fail(exc, json_output=json_output)
        return

    if json_output:
        console.print_json(data=[entry.model_dump(mode="json") for entry in entries])
        return
    console.print(_entries_table(root, entries))


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=str),
    help="Write the plan as JSON for editing before `foldsort org --plan`.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit the plan as JSON.")
@click.pass_context
def analyze(ctx: click.Context, path: str, output: str | None, json_output: bool) -> None:
    """Scan PATH and request a categorization plan without moving anything."""
    root = Path(path).expanduser().resolve()
    try:
        service = _build_service(ctx)
        entries = service.scan_folder(root)
        result = service.analyze_folder(root, entries)
    except _HANDLED_ERRORS as exc:
        _fail(exc, json_output=json_output)
        return

    document = result.plan.to_mapping()
    if output:
        text = json.dumps(document, indent=2, ensure_ascii=False)
        try:
            Path(output).write_text(text, encoding="utf-8")
        except OSError as exc:
            _handle_cli_error(
                f"Unable to write plan to {output}: {exc}",
                code="io_error",
                json_output=json_output,
                original=exc,
            )
            return

    if json_output:
        payload: dict[str, Any] = {"plan": document}
        if result.debug is not None:
            payload["debug"] = result.debug.model_dump(mode="json")
        console.print_json(data=payload)
        return

    _emit_debug(result)
    if result.plan.is_empty:
        console.print("[green]Nothing to organize; the folder already looks tidy.[/green]")
    else:
        console.print(_plan_table(result.plan))
    if output:
        console.print(f"[cyan]Plan written to {output}.[/cyan]")


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option(
    "--plan",
    "plan_file",
    type=click.Path(exists=True, dir_okay=False, path_type=str),
    help="Apply a previously exported (and possibly edited) plan instead of requesting one.",
)
@click.option("-y", "--yes", is_flag=True, help="Apply without asking for confirmation.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the moves.")
@click.pass_context
def org(
    ctx: click.Context,
    path: str,
    plan_file: str | None,
    yes: bool,
    json_output: bool,
) -> None:
    """Organize PATH by moving its items into category folders."""
    if json_output and not yes:
        raise click.ClickException("--json requires --yes.")

    root = Path(path).expanduser().resolve()
    try:
        service = _build_service(ctx)
        if plan_file:
            plan = parse_plan_response(Path(plan_file).read_text(encoding="utf-8"))
        else:
            result = service.analyze_folder(root, service.scan_folder(root))
            if not json_output:
                _emit_debug(result)
            plan = result.plan

        if plan.is_empty:
            if json_output:
                console.print_json(data=_execution_payload(root, ExecutionResult()))
            else:
                console.print("[green]Nothing to organize; the folder already looks tidy.[/green]")
            return

        if not yes:
            console.print(_plan_table(plan))
            click.confirm("Apply this plan?", abort=True)

        service.execute_organization(root, plan)
    except _HANDLED_ERRORS as exc:
        _fail(exc, json_output=json_output)
        return

    execution = service.last_execution or ExecutionResult()
    if json_output:
        console.print_json(data=_execution_payload(root, execution))
        return

    for outcome in execution.skipped:
        reason = outcome.skip_reason.value if outcome.skip_reason else "unknown"
        console.print(f"[yellow]Skipped {outcome.item.name} ({reason}).[/yellow]")
    console.print(
        f"[green]Moved {len(execution.records)} item(s) "
        f"({_format_bytes(execution.bytes_moved)}) in {root}.[/green]"
    )


@cli.command()
@click.option("--limit", type=int, default=20, show_default=True, help="Entries to display.")
@click.option("--json", "json_output", is_flag=True, help="Emit history as JSON.")
@click.pass_context
def history(ctx: click.Context, limit: int, json_output: bool) -> None:
    """Show recently moved items, newest first."""
    try:
        records = _build_service(ctx).get_history()[: max(limit, 0)]
    except _HANDLED_ERRORS as exc:
        _fail(exc, json_output=json_output)
        return

    if json_output:
        console.print_json(data=[record.model_dump(mode="json") for record in records])
        return
    if not records:
        console.print("[yellow]No items have been organized yet.[/yellow]")
        return
    for record in records:
        console.print(_format_history_event(record))


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit metrics as JSON.")
@click.pass_context
def metrics(ctx: click.Context, json_output: bool) -> None:
    """Show cumulative organization metrics."""
    try:
        snapshot = _build_service(ctx).get_metrics()
    except _HANDLED_ERRORS as exc:
        _fail(exc, json_output=json_output)
        return

    if json_output:
        console.print_json(data=snapshot.model_dump(mode="json", by_alias=True))
        return

    console.print(f"Items moved: {snapshot.total_files}")
    console.print(f"Data moved: {_format_bytes(snapshot.total_bytes)}")
    minutes, seconds = divmod(snapshot.total_time_saved, 60)
    console.print(f"Time saved: {minutes} min {seconds} s")
    if snapshot.history:
        table = Table(title="Recent operations")
        table.add_column("When")
        table.add_column("Items", justify="right")
        table.add_column("Size", justify="right")
        for point in reversed(snapshot.history[-10:]):
            table.add_row(
                point.timestamp.strftime("%Y-%m-%d %H:%M"),
                str(point.files_moved),
                _format_bytes(point.bytes_moved),
            )
        console.print(table)


@cli.group()
def config() -> None:
    """Manage foldsort configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Args:
        no_env: If True, ignore environment-derived overrides.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    try:
        yaml_text = ConfigManager().render(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    try:
        diff = ConfigManager().set_value(key, value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if not diff:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return
    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {key}.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()

"""Typer CLI entrypoint for addon-audit."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from typing import Optional

import typer
import yaml
from rich import box
from rich.console import Console
from rich.table import Table

from .config import AuditConfig, ConfigRepository
from .engine import CatalogError
from .logging_conf import available_logs, configure_logging, tail_log
from .orchestrator import Auditor
from .ui import BatchProgress, ProgressActivity, render_report, render_summary_table

app = typer.Typer(
    help="Audit addon fingerprints against the Curse and WowUp APIs.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(
    name="config",
    help="Inspect or initialise the audit configuration.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Inspect log files.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()
err_console = Console(stderr=True)


@dataclass
class AppState:
    repository: ConfigRepository
    verbose: bool = False


def build_state(verbose: bool) -> AppState:
    repository = ConfigRepository()
    configure_logging(verbose=verbose, log_dir=repository.locator.logs_dir)
    return AppState(repository=repository, verbose=verbose)


def build_auditor(config: AuditConfig) -> Auditor:
    return Auditor(config)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _progress_default_enabled() -> bool:
    return bool(getattr(sys.stderr, "isatty", lambda: False)())


app.add_typer(config_app, name="config")
app.add_typer(log_app, name="log")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.", is_flag=True),
) -> None:
    ctx.obj = build_state(verbose)


@app.command("run", help="Fetch the catalog and audit it against both fingerprint APIs.")
def run(
    ctx: typer.Context,
    batch_size: Optional[int] = typer.Option(
        None, "--batch-size", min=1, help="Packages per fingerprint request."
    ),
    page_size: Optional[int] = typer.Option(
        None, "--page-size", min=1, help="Number of catalog packages to fetch."
    ),
    sort: Optional[str] = typer.Option(
        None, "--sort", help="Catalog sort order, e.g. popularity or total_downloads."
    ),
    quiet: bool = typer.Option(False, "--quiet", help="Hide progress output.", is_flag=True),
    table: bool = typer.Option(False, "--table", help="Also render a summary table.", is_flag=True),
    json_output: bool = typer.Option(
        False, "--json", help="Print the summary as JSON instead of text.", is_flag=True
    ),
) -> None:
    state = _get_state(ctx)
    try:
        config = state.repository.apply_overrides(
            batch_size=batch_size,
            catalog={"page_size": page_size, "sort": sort},
        )
    except ValueError as exc:
        err_console.print(f"Invalid configuration: {exc}", style="red", markup=False)
        raise typer.Exit(code=2)

    show_progress = _progress_default_enabled() and not (quiet or json_output)
    auditor = build_auditor(config)
    try:
        report = auditor.run(
            progress=BatchProgress(enabled=show_progress, console=err_console),
            activity=ProgressActivity(enabled=show_progress, console=err_console),
        )
    except CatalogError as exc:
        err_console.print(
            f"ERROR: {exc}", style="red", markup=False, highlight=False, soft_wrap=True
        )
        raise typer.Exit(code=1)

    if json_output:
        typer.echo(json.dumps(report.as_dict(), indent=2))
        return
    render_report(report, console, err_console)
    if table:
        console.print(render_summary_table(report))


@config_app.command("show", help="Print the effective configuration as YAML.")
def config_show(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = state.repository.load_audit_config()
    path = state.repository.locator.audit_config_path()
    source = str(path) if path.exists() else "built-in defaults"
    console.print(f"# source: {source}", style="dim", markup=False)
    typer.echo(yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False).rstrip())


@config_app.command("init", help="Write the default configuration file.")
def config_init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    path = state.repository.locator.audit_config_path()
    if path.exists() and not force:
        console.print(f"Configuration already exists: {path}", style="yellow", markup=False)
        raise typer.Exit(code=1)
    written = state.repository.save_audit_config(AuditConfig())
    console.print(f"Configuration written to {written}", style="green", markup=False)


@log_app.command("list", help="List available log files.")
def log_list(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    logs = list(available_logs(state.repository.locator.logs_dir))
    if not logs:
        console.print("No log files yet.", style="dim")
        return
    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("File", style="green")
    for path in logs:
        table.add_row(path.name)
    console.print(table)


@log_app.command("show", help="Show the last lines of a log file.")
def log_show(
    ctx: typer.Context,
    name: str = typer.Argument("audit", help="Log name without the .log suffix."),
    tail: int = typer.Option(100, "--tail", min=1, help="Number of lines to show."),
) -> None:
    state = _get_state(ctx)
    path = state.repository.locator.logs_dir / f"{name}.log"
    lines = tail_log(path, tail)
    if not lines:
        console.print("No log entries yet.", style="dim")
        return
    console.print(f"{path.name} · last {len(lines)} lines", style="cyan", markup=False)
    typer.echo("".join(lines).rstrip("\n"))


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()

"""Typer CLI entrypoint for blog-indexer."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

import typer
import yaml
from rich import box
from rich.console import Console
from rich.table import Table

from .config import AppConfig, ConfigRepository, ScheduleConfig, ScheduleType
from .discovery import DiscoveryError
from .engine import PoolInitializationError, Rejection
from .logging_conf import available_source_logs, configure_logging, log_dir, tail_log
from .models import CandidateLink, RunSummary
from .pipeline import IngestionPipeline, audit_duplicates, build_pipeline
from .scheduler import APSchedulerAdapter
from .store import StoreError
from .ui import ProgressActivity, ProgressReporter

app = typer.Typer(
    help="Discover, extract, deduplicate and index blog articles.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(
    name="config",
    help="Configuration commands.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Log viewing commands.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()

RUN_ERRORS = (DiscoveryError, StoreError, PoolInitializationError)


@dataclass
class AppState:
    repository: ConfigRepository
    config: AppConfig
    scheduler: APSchedulerAdapter
    pipeline: IngestionPipeline


def build_state(verbose: bool) -> AppState:
    configure_logging(verbose=verbose)
    repository = ConfigRepository()
    config = repository.load_config()
    return AppState(
        repository=repository,
        config=config,
        scheduler=APSchedulerAdapter(),
        pipeline=build_pipeline(config),
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _format_schedule(schedule: ScheduleConfig) -> str:
    data = schedule.value
    label = schedule.type.value
    if data in (None, "", [], {}):
        return label
    if schedule.type is ScheduleType.CRON:
        return f"cron ({data})"
    if schedule.type is ScheduleType.INTERVAL:
        return f"interval ({data})"
    return f"{label} ({data})"


def _progress_default_enabled() -> bool:
    return bool(getattr(sys.stdout, "isatty", lambda: False)())


def _render_summary_table(summary: RunSummary) -> Table:
    table = Table(title="Run summary", box=box.SIMPLE_HEAD)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green", justify="right")
    table.add_row("Indexed", str(summary.success))
    table.add_row("Failed", str(summary.failed))
    table.add_row("Duplicates", str(summary.duplicates))
    table.add_row("Low quality", str(summary.low_quality))
    table.add_row("Total processed", str(summary.total_processed))
    table.add_row("Success rate", f"{summary.success_rate:.1%}")
    table.add_row("Elapsed", f"{summary.processing_time_ms / 1000:.1f}s")
    return table


def _render_links_table(links: Sequence[CandidateLink]) -> Table:
    table = Table(title=f"Discovered links · {len(links)}", box=box.SIMPLE_HEAD)
    table.add_column("Source", style="magenta", no_wrap=True)
    table.add_column("Score", style="yellow", justify="right")
    table.add_column("Title", style="cyan", overflow="fold")
    table.add_column("URL", style="dim", overflow="fold")
    for link in links:
        table.add_row(link.source, str(link.score), link.title, link.url)
    return table


def _render_duplicates_table(duplicates: Sequence[Rejection]) -> Table:
    table = Table(title=f"Stored duplicates · {len(duplicates)}", box=box.SIMPLE_HEAD)
    table.add_column("Reason", style="yellow", no_wrap=True)
    table.add_column("ID", style="magenta")
    table.add_column("Title", style="cyan", overflow="fold")
    table.add_column("URL", style="dim", overflow="fold")
    for item in duplicates:
        table.add_row(item.reason, item.matched_id or "-", item.title, item.url)
    return table


def _render_jobs_table(jobs: Iterable[dict]) -> Table:
    table = Table(title="Scheduled jobs", box=box.SIMPLE_HEAD)
    table.add_column("Job ID", style="cyan", no_wrap=True)
    table.add_column("Next run", style="green")
    table.add_column("Trigger", style="magenta", overflow="fold")
    for job in jobs:
        table.add_row(
            str(job.get("id", "-")),
            str(job.get("next_run_time", "-")),
            str(job.get("trigger", "-")),
        )
    return table


app.add_typer(config_app, name="config", help="Inspect the effective configuration.")
app.add_typer(log_app, name="log", help="List or tail log files.")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.", is_flag=True),
) -> None:
    ctx.obj = build_state(verbose)


@app.command("run", help="Run the pipeline once.")
def run(
    ctx: typer.Context,
    links_file: Optional[Path] = typer.Option(
        None, "--links", help="JSON/YAML file of links to process instead of discovery."
    ),
    quiet: bool = typer.Option(False, "--quiet", help="Print a one-line result.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    links: list[CandidateLink] | None = None
    if links_file is not None:
        try:
            links = state.repository.load_links(links_file)
        except (FileNotFoundError, ValueError) as exc:
            console.print(f"Cannot read links: {exc}", style="red")
            raise typer.Exit(code=1)
    progress = ProgressReporter(enabled=_progress_default_enabled() and not quiet)
    try:
        summary = state.pipeline.run(links, progress=progress)
    except RUN_ERRORS as exc:
        console.print(f"Run aborted: {exc}", style="red")
        raise typer.Exit(code=1)
    if quiet:
        console.print(
            f"Run complete: indexed {summary.success}, failed {summary.failed}, "
            f"duplicates {summary.duplicates}, low quality {summary.low_quality}"
        )
        return
    console.print(_render_summary_table(summary))


@app.command("discover", help="List candidate links without extracting them.")
def discover(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    with ProgressActivity(enabled=_progress_default_enabled()) as activity:
        activity.start("Polling discovery sources…")
        try:
            links = state.pipeline.discover()
        except DiscoveryError as exc:
            activity.close()
            console.print(f"Discovery failed: {exc}", style="red")
            raise typer.Exit(code=1)
    if not links:
        console.print("No links discovered.", style="yellow")
        return
    console.print(_render_links_table(links))


@app.command("init-store", help="Create the search collection when it is missing.")
def init_store(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    try:
        state.pipeline.store.ensure_collection()
    except StoreError as exc:
        console.print(f"Store initialisation failed: {exc}", style="red")
        raise typer.Exit(code=1)
    console.print(f"Collection `{state.config.store.collection}` is ready.", style="green")


@app.command("check-duplicates", help="Audit the stored index for exact duplicates.")
def check_duplicates(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    try:
        duplicates = audit_duplicates(state.pipeline.store, state.config)
    except StoreError as exc:
        console.print(f"Audit failed: {exc}", style="red")
        raise typer.Exit(code=1)
    if not duplicates:
        console.print("No duplicates found.", style="green")
        return
    console.print(_render_duplicates_table(duplicates))


@app.command("serve", help="Run the pipeline on the configured schedule until interrupted.")
def serve(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    schedule = state.config.schedule
    state.scheduler.schedule_pipeline(schedule, state.pipeline.run)
    state.scheduler.start()
    console.print(f"Scheduled pipeline: {_format_schedule(schedule)}", style="cyan")
    console.print(_render_jobs_table(state.scheduler.list_jobs()))
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("Stopping scheduler…", style="yellow")
    finally:
        state.scheduler.shutdown()


@config_app.command("show", help="Print the effective configuration as YAML.")
def config_show(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    console.print(f"# {state.repository.locator.config_path()}", style="dim")
    console.print(
        yaml.safe_dump(state.config.model_dump(mode="json"), allow_unicode=True, sort_keys=False),
        markup=False,
    )


@log_app.command("list", help="List available log files.")
def log_list() -> None:
    logs = list(available_source_logs())
    console.print("Log files:", style="cyan")
    if not logs:
        console.print("No discovery source logs yet.", style="dim")
        return
    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("File", style="green")
    for path in logs:
        table.add_row(path.name)
    console.print(table)


@log_app.command("show", help="Show the latest lines of a log.")
def log_show(
    name: Optional[str] = typer.Option(
        None, "--source", help="Discovery source name (defaults to the main log)."
    ),
    tail: int = typer.Option(100, "--tail", help="Number of lines to show."),
    errors: bool = typer.Option(False, "--errors", help="Show the error log.", is_flag=True),
) -> None:
    base_dir = log_dir()
    if name:
        path = base_dir / "sources" / f"{name}.log"
    elif errors:
        path = base_dir / "error.log"
    else:
        path = base_dir / "indexer.log"
    lines = tail_log(path, tail)
    if not lines:
        console.print("No log entries yet.", style="dim")
        return
    console.print(f"{path.name} · last {len(lines)} lines", style="cyan")
    console.print("".join(lines), markup=False)


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()

"""CLI interface for taskflow."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import click
from pydantic import ValidationError
from rich.console import Console

from taskflow import __version__
from taskflow.config import CONFIG_FILE, TaskflowConfig
from taskflow.controller import TaskListController
from taskflow.display import build_filter_tabs, build_stats_panel, build_task_list
from taskflow.logging_setup import setup_logging
from taskflow.models import FILTERS, MAX_TITLE_LENGTH
from taskflow.storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from taskflow.store import TaskStore

console = Console()
logger = logging.getLogger(__name__)

T = TypeVar("T")


def build_storage(config: TaskflowConfig) -> KeyValueStorage:
    """Create the storage backend named in the config."""
    if config.storage.backend == "memory":
        return MemoryStorage()
    return JsonFileStorage(Path(config.storage.path))


def build_controller(config: TaskflowConfig) -> TaskListController:
    """Create a controller wired to the configured store."""
    return TaskListController(store=TaskStore(build_storage(config)))


def run_with_controller(
    config: TaskflowConfig, action: Callable[[TaskListController], T]
) -> tuple[TaskListController, T]:
    """Load tasks, apply one action, and wait for its saves to finish."""

    async def _session() -> tuple[TaskListController, T]:
        controller = build_controller(config)
        await controller.load()
        result = action(controller)
        await controller.flush()
        return controller, result

    return asyncio.run(_session())


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="taskflow")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help=f"Config file (default: {CONFIG_FILE})",
)
@click.option(
    "--store",
    "store_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Storage file to read and write tasks",
)
@click.option("--ephemeral", is_flag=True, help="Keep tasks in memory only")
@click.option("--verbose", "-v", count=True, help="Log more (repeat for debug)")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    store_path: Path | None,
    ephemeral: bool,
    verbose: int,
) -> None:
    """taskflow - your productivity companion.

    Add short tasks, tick them off, filter by status and clear what's done.

    \b
    Quick start:
      taskflow add Buy milk      # Add a task
      taskflow list              # Show tasks
      taskflow toggle <id>       # Mark done / not done
      taskflow shell             # Interactive mode
    """
    try:
        config = TaskflowConfig.load(config_path)
    except (ValueError, ValidationError) as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        ctx.exit(1)

    if store_path is not None:
        config.storage.path = str(store_path)
        config.storage.backend = "file"
    if ephemeral:
        config.storage.backend = "memory"

    if verbose >= 2:
        level = "DEBUG"
    elif verbose == 1:
        level = "INFO"
    else:
        level = config.logging.level
    # Ephemeral sessions and a bare help screen leave nothing on disk.
    log_file = None if ephemeral or ctx.invoked_subcommand is None else config.logging.file
    setup_logging(console_level=level, log_file=log_file)
    logger.debug("taskflow %s storage=%s", __version__, config.storage)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config

    # If no subcommand, show help
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command()
@click.argument("words", nargs=-1, required=True)
@click.pass_context
def add(ctx: click.Context, words: tuple[str, ...]) -> None:
    """Add a task.

    \b
    Examples:
      taskflow add Buy milk
      taskflow add "Call the plumber about the sink"
    """
    config: TaskflowConfig = ctx.obj["config"]
    _, task = run_with_controller(config, lambda c: c.add_task(" ".join(words)))

    if task is None:
        console.print(f"[dim]Nothing added (titles are 1-{MAX_TITLE_LENGTH} characters).[/dim]")
        return

    console.print(f"[green]Added:[/green] {task.title} [dim]({task.id})[/dim]")


@main.command("list")
@click.option(
    "--filter",
    "-f",
    "filter_name",
    type=click.Choice(FILTERS),
    default="all",
    show_default=True,
    help="Which tasks to show",
)
@click.pass_context
def list_command(ctx: click.Context, filter_name: str) -> None:
    """List tasks."""
    config: TaskflowConfig = ctx.obj["config"]
    controller, _ = run_with_controller(config, lambda c: c.set_filter(filter_name))
    view = controller.derived_view()

    console.print(build_filter_tabs(view))
    console.print(build_task_list(view, show_ids=config.display.show_ids))


@main.command()
@click.argument("task_id", type=int)
@click.pass_context
def toggle(ctx: click.Context, task_id: int) -> None:
    """Mark a task done, or not done again."""
    config: TaskflowConfig = ctx.obj["config"]
    controller, toggled = run_with_controller(config, lambda c: c.toggle_task(task_id))

    task = controller.find(task_id)
    if not toggled or task is None:
        console.print(f"[red]Task not found:[/red] {task_id}")
        return

    if task.completed:
        console.print(f"[green]Completed:[/green] {task.title}")
    else:
        console.print(f"[cyan]Reopened:[/cyan] {task.title}")


@main.command()
@click.argument("task_id", type=int)
@click.pass_context
def delete(ctx: click.Context, task_id: int) -> None:
    """Delete a task."""
    config: TaskflowConfig = ctx.obj["config"]
    _, deleted = run_with_controller(config, lambda c: c.delete_task(task_id))

    if deleted:
        console.print(f"[green]Deleted:[/green] {task_id}")
    else:
        console.print(f"[red]Task not found:[/red] {task_id}")


@main.command()
@click.pass_context
def clear(ctx: click.Context) -> None:
    """Clear completed tasks."""
    config: TaskflowConfig = ctx.obj["config"]
    _, removed = run_with_controller(config, lambda c: c.clear_completed())

    if removed:
        console.print(f"[green]Cleared {removed} completed task(s).[/green]")
    else:
        console.print("[dim]No completed tasks to clear.[/dim]")


@main.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show task counts and progress."""
    config: TaskflowConfig = ctx.obj["config"]
    controller, _ = run_with_controller(config, lambda c: None)

    console.print(build_stats_panel(controller.derived_view()))


@main.command()
@click.pass_context
def shell(ctx: click.Context) -> None:
    """Interactive mode: type tasks, press Enter to add them."""
    from taskflow.shell import TaskShell

    config: TaskflowConfig = ctx.obj["config"]
    task_shell = TaskShell(build_controller(config), console=console, display=config.display)
    try:
        asyncio.run(task_shell.run())
    except KeyboardInterrupt:
        # Raised by asyncio.run after Ctrl-C, once the session has flushed.
        logger.debug("Shell interrupted")


if __name__ == "__main__":
    main()

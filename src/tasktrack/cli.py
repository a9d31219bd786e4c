"""CLI interface for tasktrack."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel

from tasktrack import __version__
from tasktrack.api import TaskApi
from tasktrack.cache import LocalCache
from tasktrack.client import TaskClient
from tasktrack.config import CONFIG_FILE, TrackConfig
from tasktrack.logging_setup import setup_logging
from tasktrack.models import PRIORITIES, Task
from tasktrack.state import PRIORITY_FILTERS, STATUS_FILTERS, find_todo
from tasktrack.view import ConsoleView, render_html

console = Console()

DATE_TYPE = click.DateTime(formats=["%Y-%m-%d"])


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="tasktrack")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help=f"Config file (default: {CONFIG_FILE})",
)
@click.pass_context
def main(ctx: click.Context, config_path: Path | None) -> None:
    """tasktrack - personal task tracking.

    \b
    Start the service, then work with tasks from another terminal:
      tasktrack serve
      tasktrack add "buy milk" -p high --due 2026-10-20
      tasktrack list --status active
      tasktrack done <id>
    """
    ctx.ensure_object(dict)
    config = TrackConfig.load(config_path)
    ctx.obj["config"] = config
    setup_logging(config.logging.level, config.logging.file)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _build_client(ctx: click.Context, assume_yes: bool = False) -> tuple[TaskClient, ConsoleView]:
    config: TrackConfig = ctx.obj["config"]
    view = ConsoleView(console, assume_yes=assume_yes)
    client = TaskClient(
        TaskApi(config.client.api_url),
        LocalCache(config.client.cache_file, config.client.cache_slot),
        view,
        export_dir=config.client.export_dir,
        max_workers=config.client.max_workers,
    )
    return client, view


def _load(client: TaskClient, view: ConsoleView) -> None:
    """Fetch the working set without drawing it."""
    with view.muted():
        client.load_todos()


def _resolve(ctx: click.Context, client: TaskClient, task_id: str) -> Task:
    task = find_todo(client.state, task_id)
    if task is None:
        console.print(f"[red]Todo not found:[/red] {task_id}")
        ctx.exit(1)
    return task


@main.command()
@click.option("--host", default=None, help="Interface to bind")
@click.option("--port", type=int, default=None, envvar="PORT", help="Port to listen on")
@click.option("--data-file", type=click.Path(path_type=Path), default=None, help="Task store file")
@click.option("--debug", is_flag=True, help="Enable Flask debug mode")
@click.pass_context
def serve(
    ctx: click.Context,
    host: str | None,
    port: int | None,
    data_file: Path | None,
    debug: bool,
) -> None:
    """Run the task store service."""
    from tasktrack.server import run_server

    config: TrackConfig = ctx.obj["config"]
    server_config = config.server.model_copy(
        update={
            key: value
            for key, value in {
                "host": host,
                "port": port,
                "data_file": str(data_file) if data_file else None,
                "debug": debug or None,
            }.items()
            if value is not None
        }
    )

    console.print(
        Panel.fit(
            f"http://{server_config.host}:{server_config.port}/todos\n"
            f"[dim]store: {server_config.data_file}[/dim]",
            title="tasktrack serve",
        )
    )
    run_server(server_config)


@main.command("list")
@click.option("--status", type=click.Choice(STATUS_FILTERS), default="all", help="Status filter")
@click.option("--priority", type=click.Choice(PRIORITY_FILTERS), default="all", help="Priority filter")
@click.option("--search", "-s", default="", help="Match text in task or category")
@click.pass_context
def list_command(ctx: click.Context, status: str, priority: str, search: str) -> None:
    """Show tasks, filtered."""
    client, view = _build_client(ctx)
    with view.muted():
        client.load_todos()
        client.set_status_filter(status)
        client.set_priority_filter(priority)
        client.set_search(search)
    view.render(client.state)


@main.command()
@click.argument("text")
@click.option("--priority", "-p", type=click.Choice(PRIORITIES), default="medium")
@click.option("--due", type=DATE_TYPE, default=None, help="Due date (YYYY-MM-DD)")
@click.option("--category", "-c", default="", help="Category (default: general)")
@click.pass_context
def add(ctx: click.Context, text: str, priority: str, due, category: str) -> None:
    """Add a task."""
    client, view = _build_client(ctx)
    _load(client, view)
    created = client.add_todo(text, priority, due.date() if due else None, category)
    if created is None:
        ctx.exit(1)


def _toggle(ctx: click.Context, task_id: str, completed: bool) -> None:
    client, view = _build_client(ctx)
    _load(client, view)
    task = _resolve(ctx, client, task_id)
    if not client.toggle_todo(task.id, completed):
        ctx.exit(1)


@main.command()
@click.argument("task_id")
@click.pass_context
def done(ctx: click.Context, task_id: str) -> None:
    """Mark a task completed."""
    _toggle(ctx, task_id, True)


@main.command()
@click.argument("task_id")
@click.pass_context
def undo(ctx: click.Context, task_id: str) -> None:
    """Mark a task active again."""
    _toggle(ctx, task_id, False)


@main.command()
@click.argument("task_id")
@click.option("--task", "text", default=None, help="New task text")
@click.option("--priority", "-p", type=click.Choice(PRIORITIES), default=None)
@click.option("--due", type=DATE_TYPE, default=None, help="New due date (YYYY-MM-DD)")
@click.option("--no-due", is_flag=True, help="Remove the due date")
@click.option("--category", "-c", default=None)
@click.pass_context
def edit(
    ctx: click.Context,
    task_id: str,
    text: str | None,
    priority: str | None,
    due,
    no_due: bool,
    category: str | None,
) -> None:
    """Edit a task; unspecified fields keep their value."""
    client, view = _build_client(ctx)
    _load(client, view)
    task = _resolve(ctx, client, task_id)

    form = client.open_edit(task.id)
    if text is not None:
        form = replace(form, task=text)
    if priority is not None:
        form = replace(form, priority=priority)
    if due is not None:
        form = replace(form, due_date=due.date())
    if no_due:
        form = replace(form, due_date=None)
    if category is not None:
        form = replace(form, category=category)

    if not client.save_edit(task.id, form):
        ctx.exit(1)


@main.command()
@click.argument("task_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx: click.Context, task_id: str, yes: bool) -> None:
    """Delete a task."""
    client, view = _build_client(ctx, assume_yes=yes)
    _load(client, view)
    task = _resolve(ctx, client, task_id)
    if not client.delete_todo(task.id):
        ctx.exit(1)


@main.command("clear-completed")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def clear_completed(ctx: click.Context, yes: bool) -> None:
    """Delete every completed task."""
    client, view = _build_client(ctx, assume_yes=yes)
    _load(client, view)
    if not client.clear_completed():
        ctx.exit(1)


@main.command("export")
@click.option("--dir", "directory", type=click.Path(path_type=Path), default=None)
@click.pass_context
def export_command(ctx: click.Context, directory: Path | None) -> None:
    """Export all tasks to a backup file."""
    client, view = _build_client(ctx)
    _load(client, view)
    path = client.export_data(directory)
    if path is None:
        ctx.exit(1)
    console.print(f"[cyan]{path}[/cyan]")


@main.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def import_command(ctx: click.Context, path: Path, yes: bool) -> None:
    """Replace all tasks with those in an export file."""
    client, view = _build_client(ctx, assume_yes=yes)
    _load(client, view)
    if not client.import_data(path):
        ctx.exit(1)


@main.command()
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--status", type=click.Choice(STATUS_FILTERS), default="all")
@click.option("--priority", type=click.Choice(PRIORITY_FILTERS), default="all")
@click.option("--search", "-s", default="")
@click.pass_context
def html(ctx: click.Context, output: Path, status: str, priority: str, search: str) -> None:
    """Write the filtered list as an HTML page."""
    client, view = _build_client(ctx)
    with view.muted():
        client.load_todos()
        client.set_status_filter(status)
        client.set_priority_filter(priority)
        client.set_search(search)

    output.write_text(render_html(client.state), encoding="utf-8")
    console.print(f"[green]✓[/green] Wrote {output}")


if __name__ == "__main__":
    main()

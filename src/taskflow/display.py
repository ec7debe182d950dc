"""Rich renderables for the task board."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from taskflow.models import FILTERS, MAX_TITLE_LENGTH, Filter, TaskView

# Icon, title, hint shown when a filter has nothing to list
EMPTY_STATES: dict[str, tuple[str, str, str]] = {
    "all": ("✨", "Start your journey", "Add your first task to get started"),
    "active": ("⚡", "All caught up!", "Time to take a break or add new tasks"),
    "completed": ("🎉", "No completed tasks", "Complete some tasks to see them here"),
}

FOOTER_HINT = "Press Enter to add tasks quickly"


def build_stats_panel(view: TaskView, clear_hint: str = "taskflow clear") -> Panel:
    """Build the overview panel: counts, progress bar and clear hint.

    Args:
        view: The derived view to summarise.
        clear_hint: How to clear completed tasks in the current surface.
            Only shown while something is completed.

    Returns:
        A Rich Panel with the overview.
    """
    counts = Text()
    counts.append("Total ", style="dim")
    counts.append(str(view.total_tasks), style="bold")
    counts.append("   Active ", style="dim")
    counts.append(str(view.active_tasks), style="cyan bold")
    counts.append("   Done ", style="dim")
    counts.append(str(view.completed_tasks), style="green bold")

    progress_header = Text()
    progress_header.append("Progress ", style="dim")
    progress_header.append(f"{view.completion_percentage}%", style="bold")

    bar = ProgressBar(total=100, completed=view.completion_percentage, width=40)

    parts: list[RenderableType] = [counts, progress_header, bar]
    if view.completed_tasks > 0:
        parts.append(Text(f"✗ Clear Completed: {clear_hint}", style="yellow"))

    return Panel(Group(*parts), title="[bold]Overview[/bold]", border_style="cyan")


def build_filter_tabs(view: TaskView) -> Text:
    """Build the filter selector with a count badge per filter."""
    tabs = Text()
    for index, name in enumerate(FILTERS):
        if index:
            tabs.append("  ")
        label = f"{name.capitalize()} ({view.count_for(name)})"
        if name == view.filter:
            tabs.append(label, style="bold reverse cyan")
        else:
            tabs.append(label, style="dim")
    return tabs


def build_empty_state(filter_name: Filter) -> Panel:
    """Build the placeholder shown when the filtered list is empty."""
    icon, title, hint = EMPTY_STATES.get(filter_name, EMPTY_STATES["all"])
    content = Text(justify="center")
    content.append(f"{icon}\n")
    content.append(f"{title}\n", style="bold")
    content.append(hint, style="dim")
    return Panel(content, border_style="dim")


def build_task_table(view: TaskView, show_ids: bool = True) -> Table:
    """Build the table of visible tasks.

    Rows are numbered by position in the filtered list; the shell addresses
    tasks by that number.
    """
    table = Table(show_header=True, header_style="bold", expand=False)
    table.add_column("#", style="dim", justify="right")
    if show_ids:
        table.add_column("ID", style="cyan")
    table.add_column("", width=1)
    table.add_column("Title")

    for position, task in enumerate(view.filtered_tasks, start=1):
        check = "[green]✓[/green]" if task.completed else "[dim]○[/dim]"
        title = Text(task.title, style="strike dim" if task.completed else "")
        row: list[RenderableType] = [str(position)]
        if show_ids:
            row.append(str(task.id))
        row.extend([check, title])
        table.add_row(*row)

    return table


def build_task_list(view: TaskView, show_ids: bool = True) -> RenderableType:
    """The task table, or the filter's empty state when there is nothing to show."""
    if not view.filtered_tasks:
        return build_empty_state(view.filter)
    return build_task_table(view, show_ids=show_ids)


def build_char_counter(text: str, warning_threshold: int = 80) -> Text:
    """Build the ``n/100`` counter for the input buffer."""
    length = len(text)
    if length > MAX_TITLE_LENGTH:
        style = "red bold"
    elif length > warning_threshold:
        style = "yellow"
    else:
        style = "dim"
    return Text(f"{length}/{MAX_TITLE_LENGTH}", style=style)


def build_board(
    view: TaskView,
    input_buffer: str = "",
    show_ids: bool = False,
    warning_threshold: int = 80,
    clear_hint: str = "/clear",
) -> Group:
    """Build the full board used by the interactive shell."""
    footer = Text()
    footer.append("⚡ ", style="yellow")
    footer.append(FOOTER_HINT, style="dim")

    return Group(
        build_stats_panel(view, clear_hint=clear_hint),
        build_filter_tabs(view),
        build_task_list(view, show_ids=show_ids),
        build_char_counter(input_buffer, warning_threshold),
        footer,
    )

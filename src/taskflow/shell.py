"""Interactive task shell.

Plain input lines become new tasks. Slash commands act on tasks by their
position in the currently filtered list, the way a user would click the
row they can see.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading

from rich.console import Console

from taskflow.config import DisplayConfig
from taskflow.controller import TaskListController
from taskflow.display import build_board
from taskflow.models import FILTERS, Task

logger = logging.getLogger(__name__)

PROMPT = "[bold cyan]›[/bold cyan] "

HELP_TEXT = """\
[bold]Type a task and press Enter to add it.[/bold]

  [cyan]/toggle N[/cyan]  (/t)   Mark task N done or not done
  [cyan]/delete N[/cyan]  (/d)   Delete task N
  [cyan]/filter F[/cyan]  (/f)   Show all, active or completed tasks
  [cyan]/all /active /completed[/cyan]
  [cyan]/clear[/cyan]            Clear completed tasks
  [cyan]/help[/cyan]             Show this help
  [cyan]/quit[/cyan]      (/q)   Leave the shell"""

_ALIASES = {
    "t": "toggle",
    "d": "delete",
    "f": "filter",
    "q": "quit",
    "exit": "quit",
    "h": "help",
}


def parse_command(line: str) -> tuple[str, str]:
    """Split a slash command into (name, argument).

    Returns ("", line) for plain input.
    """
    if not line.startswith("/"):
        return "", line

    name, _, arg = line[1:].strip().partition(" ")
    name = name.lower()
    return _ALIASES.get(name, name), arg.strip()


class TaskShell:
    """Line-driven front end over a TaskListController."""

    def __init__(
        self,
        controller: TaskListController,
        console: Console | None = None,
        display: DisplayConfig | None = None,
    ) -> None:
        self.controller = controller
        self.console = console or Console()
        self.display = display or DisplayConfig()
        self.running = True

    def render(self) -> None:
        view = self.controller.derived_view()
        self.console.print(
            build_board(
                view,
                input_buffer=self.controller.input_buffer,
                show_ids=False,
                warning_threshold=self.display.char_warning_threshold,
            )
        )

    def handle(self, line: str) -> bool:
        """Apply one line of input. Returns False once the user quits."""
        name, arg = parse_command(line.rstrip("\n"))

        if not name:
            if arg.strip():
                self.controller.input_buffer = arg
                self.controller.submit()
            return True

        if name == "quit":
            self.running = False
        elif name == "help":
            self.console.print(HELP_TEXT)
        elif name in FILTERS:
            self.controller.set_filter(name)
        elif name == "filter":
            if not self.controller.set_filter(arg.lower()):
                self.console.print(f"[dim]Filters: {', '.join(FILTERS)}[/dim]")
        elif name == "clear":
            self.controller.clear_completed()
        elif name in ("toggle", "delete"):
            task = self._task_at(arg)
            if task is None:
                self.console.print(f"[dim]No task at position {arg or '?'}[/dim]")
            elif name == "toggle":
                self.controller.toggle_task(task.id)
            else:
                self.controller.delete_task(task.id)
        else:
            self.console.print(f"[dim]Unknown command /{name}. Try /help.[/dim]")

        return self.running

    def _task_at(self, position: str) -> Task | None:
        """Task at a 1-based position in the filtered view."""
        try:
            index = int(position)
        except ValueError:
            return None

        visible = self.controller.derived_view().filtered_tasks
        if 1 <= index <= len(visible):
            return visible[index - 1]
        return None

    async def run(self) -> None:
        """Load saved tasks, then read and apply lines until the user quits."""
        with self.console.status("Loading tasks..."):
            await self.controller.load()

        self.console.print("[dim]Type /help for commands.[/dim]")
        try:
            while self.running:
                self.render()
                try:
                    line = await self._read_line()
                except (EOFError, KeyboardInterrupt, asyncio.CancelledError):
                    # Ctrl-C inside asyncio.run arrives as a cancellation.
                    self.console.print()
                    break
                self.handle(line)
        finally:
            await self.controller.flush()
            logger.debug("Shell closed with %d task(s)", len(self.controller.tasks))

    async def _read_line(self) -> str:
        """Read one line on a daemon thread.

        A blocked read must not keep the process alive once the session has
        ended, so the default executor is not used.
        """
        loop = asyncio.get_running_loop()
        line: asyncio.Future[str] = loop.create_future()

        def deliver(value: str | None, error: Exception | None) -> None:
            if line.done():
                return
            if error is not None:
                line.set_exception(error)
            else:
                line.set_result(value or "")

        def reader() -> None:
            value: str | None = None
            error: Exception | None = None
            try:
                value = self.console.input(PROMPT)
            except Exception as e:
                error = e
            # The loop may already be closed if the session ended meanwhile.
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(deliver, value, error)

        threading.Thread(target=reader, name="taskflow-input", daemon=True).start()
        return await line

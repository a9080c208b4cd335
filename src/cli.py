"""Command-line interface loop for the task list.

Tasks are addressed by the number shown next to them in the current
view, not by their internal id. Anything that is not a command is added
as a new task.
"""
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

import click

from config import Settings
from models import PRIORITIES, VIEWS, Task
from storage import Storage
from task_filter import FilterSpec
from task_list import TaskList


# --- terminal control helpers ---
# We aggressively clear: ESC[3J (scrollback), ESC[H (home), ESC[2J (screen), ESC[H (home))
def _clear_screen() -> None:  # pragma: no cover
    click.echo("\033[3J\033[H\033[2J\033[H", nl=False)


def _enter_alt_screen() -> None:  # pragma: no cover
    click.echo("\033[?1049h", nl=False)


def _leave_alt_screen() -> None:  # pragma: no cover
    click.echo("\033[?1049l", nl=False)


VIEW_ALIASES = {
    'a': 'all',
    't': 'today',
    'w': 'week',
    'o': 'overdue',
    'c': 'completed',
}
VIEW_ALIASES.update({v: v for v in VIEWS})

COMMANDS = ('add', 'done', 'edit', 'rm', 'undo', 'view', 'cat', 'pri', 'search',
            'clear', 'mv', 'reverse', 'stats', 'help', 'exit')
# first argument is a task number
NUMBERED_COMMANDS = ('done', 'edit', 'rm', 'mv')


class CLI:
    def __init__(self, task_list: TaskList, storage: Storage, settings: Settings):
        self.task_list: TaskList = task_list
        self.storage: Storage = storage
        self.settings: Settings = settings
        self.alt_screen: bool = settings.alt_screen
        self.spec: FilterSpec = FilterSpec()
        self.shown: List[Task] = []
        self.message: Optional[str] = None

    def run(self) -> None:  # pragma: no cover - interactive
        """Main REPL loop; list is cleared/redrawn each cycle."""
        exit_message: Optional[str] = None
        self.task_list.analytics['sessions'] = self.task_list.analytics.get('sessions', 0) + 1
        if self.alt_screen:
            _enter_alt_screen()
        try:
            while True:
                _clear_screen()
                self.shown = self.task_list.display(self.spec)
                if self.message:
                    click.echo(f"\n{self.message}")
                    self.message = None
                line = input("\n> ").strip()
                if not line:
                    continue
                lower = line.lower()
                if lower == 'help':
                    _clear_screen()
                    self._help()
                    input("\nPress Enter to return to the list...")
                    continue
                if lower == 'exit':
                    self.persist()
                    exit_message = "Goodbye."
                    break
                self.handle_command(line)
                self.persist()
        except (KeyboardInterrupt, EOFError):
            self.persist()
            exit_message = "Interrupted. Goodbye."
        finally:
            if self.alt_screen:
                _leave_alt_screen()
            if exit_message:
                click.echo(exit_message)

    def persist(self) -> None:
        self.task_list.archive_completed(self.settings.archive_days)
        if not self.storage.save(self.task_list.get_state()):
            self.message = "Could not save tasks; changes are kept in memory."

    # -------------------- command dispatch --------------------
    def handle_command(self, line: str, now: Optional[datetime] = None) -> Optional[str]:
        """Run one command line. The feedback text is stored in self.message and returned."""
        tokens = line.split()
        if not tokens:
            return None
        cmd = tokens[0].lower()
        args = tokens[1:]
        if cmd not in COMMANDS:
            # plain text is a new task
            cmd, args = 'add', tokens
        handler = getattr(self, f"_cmd_{cmd}", None)
        if cmd in NUMBERED_COMMANDS and args and not args[0].rstrip('.').isdigit():
            self.message = (f"'{cmd}' expects a task number. "
                            f"To add this as a task, type: add {line.strip()}")
        elif handler is None:
            self.message = "Unknown command. Type 'help' for instructions."
        else:
            self.message = handler(args, now)
        self.shown = self.task_list.visible(self.spec, now)
        return self.message

    def _task_at(self, raw: str) -> Optional[Task]:
        raw = raw.rstrip('.')
        if not raw.isdigit():
            return None
        idx = int(raw) - 1
        if idx < 0 or idx >= len(self.shown):
            return None
        return self.shown[idx]

    # ---- individual command helpers ----
    def _cmd_add(self, args: List[str], now: Optional[datetime]) -> Optional[str]:
        task = self.task_list.add(' '.join(args), now)
        if task is None:
            return "Task text required."
        return None

    def _cmd_done(self, args: List[str], now: Optional[datetime]) -> str:
        if len(args) != 1:
            return "Usage: done <n>"
        task = self._task_at(args[0])
        if task is None:
            return "Invalid task number."
        return self.task_list.toggle(task.id, now)

    def _cmd_edit(self, args: List[str], now: Optional[datetime]) -> str:
        if len(args) < 2:
            return "Usage: edit <n> <new text>"
        task = self._task_at(args[0])
        if task is None:
            return "Invalid task number."
        return self.task_list.edit(task.id, ' '.join(args[1:]))

    def _cmd_rm(self, args: List[str], now: Optional[datetime]) -> str:
        if len(args) != 1:
            return "Usage: rm <n>"
        task = self._task_at(args[0])
        if task is None:
            return "Invalid task number."
        return self.task_list.delete(task.id)

    def _cmd_undo(self, args: List[str], now: Optional[datetime]) -> str:
        return self.task_list.undo_delete()

    def _cmd_view(self, args: List[str], now: Optional[datetime]) -> Optional[str]:
        view = VIEW_ALIASES.get(args[0].lower()) if args else 'all'
        if not view:
            return f"Views: {', '.join(VIEWS)}"
        self.spec = replace(self.spec, view=view)
        return None

    def _cmd_cat(self, args: List[str], now: Optional[datetime]) -> Optional[str]:
        category = args[0].lstrip('#') if args else ''
        self.spec = replace(self.spec, category=category)
        return None

    def _cmd_pri(self, args: List[str], now: Optional[datetime]) -> Optional[str]:
        priority = args[0].lstrip('!').lower() if args else ''
        if priority and priority not in PRIORITIES:
            return f"Priorities: {', '.join(PRIORITIES)}"
        self.spec = replace(self.spec, priority=priority)
        return None

    def _cmd_search(self, args: List[str], now: Optional[datetime]) -> Optional[str]:
        self.spec = replace(self.spec, search=' '.join(args))
        return None

    def _cmd_clear(self, args: List[str], now: Optional[datetime]) -> Optional[str]:
        self.spec = FilterSpec()
        return None

    def _cmd_mv(self, args: List[str], now: Optional[datetime]) -> str:
        if len(args) != 2 or not args[1].isdigit():
            return "Usage: mv <n> <new position>"
        task = self._task_at(args[0])
        if task is None:
            return "Invalid task number."
        return self.task_list.move(task.id, int(args[1]) - 1, self.spec, now)

    def _cmd_reverse(self, args: List[str], now: Optional[datetime]) -> Optional[str]:
        self.task_list.reverse()
        return None

    def _cmd_stats(self, args: List[str], now: Optional[datetime]) -> str:
        r = self.task_list.analytics_report()
        return '\n'.join([
            f"Completed: {r['completed']}  Pending: {r['pending']}  Rate: {r['rate']}%",
            f"High: {r['high']}  Medium: {r['medium']}  Low: {r['low']}",
            f"Completed today: {r['completed_today']}  Sessions today: {r['sessions']}",
        ])

    # -------------------- help --------------------
    def _help(self) -> None:  # pragma: no cover
        click.echo("Commands:")
        click.echo("  <text>              Add a task, e.g. Buy milk tomorrow #shopping !high")
        click.echo("  add <text>          Same, explicit; needed when the text starts with a command word")
        click.echo("  done <n>            Toggle task n complete / incomplete")
        click.echo("  edit <n> <text>     Replace the text of task n")
        click.echo("  rm <n>              Delete task n")
        click.echo("  undo                Restore the last deleted task")
        click.echo("  view <name>         all (a), today (t), week (w), overdue (o), completed (c)")
        click.echo("  cat [name]          Filter by category (no name clears)")
        click.echo("  pri [level]         Filter by priority: high/medium/low (no level clears)")
        click.echo("  search [text]       Filter by text (no text clears)")
        click.echo("  clear               Reset all filters")
        click.echo("  mv <n> <pos>        Move task n to position pos in this view")
        click.echo("  reverse             Reverse the whole list order")
        click.echo("  stats               Show completion statistics")
        click.echo("  help                Show this help (press Enter to return)")
        click.echo("  exit                Save and exit")

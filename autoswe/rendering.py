"""Console rendering for a run: banner, phase headers, tool lines, plan table, summary."""

from typing import TYPE_CHECKING, Any, Dict, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .state import Plan, Task, TaskStatus
from .tools.registry import ToolRegistry

if TYPE_CHECKING:
    from .orchestrator import RunSummary

# ── Palette (GitHub dark) ──────────────────────────────────
ACCENT = "#7FA6D9"
BORDER = "#30363D"
DIM = "#6E7681"
TEXT = "#E6EDF3"
MUTED = "#8B949E"
SUCCESS = "#57DB9C"
WARN = "#E3B341"
ERROR = "#F85149"
INFO = "#58A6FF"

_TOOL_ICONS = {
    "read_file": "▸", "write_file": "◆", "list_files": "≡",
    "search": "⊙", "bash": "$",
}

# Status display: (icon, color)
_STATUS_DISPLAY = {
    TaskStatus.PENDING: ("○", DIM),
    TaskStatus.IN_PROGRESS: ("▸", INFO),
    TaskStatus.COMPLETED: ("✓", SUCCESS),
    TaskStatus.FAILED: ("✗", ERROR),
}


def _brief(text: str, limit: int = 80) -> str:
    line = (text or "").strip().splitlines()[0] if (text or "").strip() else ""
    return line[:limit] + "..." if len(line) > limit else line


class RunRenderer:
    """Prints run progress to a rich Console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def render_banner(self, working_dir: str, request: str) -> None:
        self.console.print(Panel(
            f"[{MUTED}]Working directory:[/{MUTED}] [bold {TEXT}]{escape(working_dir)}[/bold {TEXT}]\n"
            f"[{MUTED}]Request:[/{MUTED}] [{TEXT}]{escape(request)}[/{TEXT}]",
            title=f"[bold {ACCENT}] autoswe [/bold {ACCENT}]",
            title_align="left",
            border_style=BORDER,
            padding=(0, 1),
        ))

    def render_phase(self, title: str) -> None:
        self.console.print()
        self.console.print(f"[bold {ACCENT}]── {title} ──[/bold {ACCENT}]")

    def render_tool_call(self, name: str, arguments: Dict[str, Any], exploring: bool = False) -> None:
        icon = _TOOL_ICONS.get(name, "·")
        detail = ToolRegistry.describe_call(name, arguments)
        verb = "exploring " if exploring else ""
        self.console.print(
            f"  [{ACCENT}]{icon}[/{ACCENT}] [{DIM}]{verb}[/{DIM}]"
            f"[bold {TEXT}]{escape(name)}[/bold {TEXT}] [{DIM}]{escape(detail)}[/{DIM}]",
            highlight=False,
        )

    def render_tool_error(self, message: str) -> None:
        self.console.print(f"     [{ERROR}]{escape(_brief(message, 120))}[/{ERROR}]", highlight=False)

    def render_note(self, message: str) -> None:
        self.console.print(f"  [{DIM}]{escape(message)}[/{DIM}]")

    def render_plan(self, plan: Plan) -> None:
        table = Table(
            show_header=True,
            header_style=f"bold {ACCENT}",
            border_style=BORDER,
            padding=(0, 1),
        )
        table.add_column("ID", style="bold", min_width=6)
        table.add_column("Description", min_width=30)

        for task in plan:
            table.add_row(task.id, Text(task.description))

        self.console.print(Panel(
            table,
            title=f"[bold {ACCENT}] Execution Plan [/bold {ACCENT}]",
            subtitle=f"[{DIM}]Total tasks: {len(plan)}[/{DIM}]",
            title_align="left",
            border_style=BORDER,
            padding=(0, 1),
        ))

    def render_task_start(self, index: int, total: int, task: Task) -> None:
        self.console.print()
        self.console.print(
            f"[{DIM}][{index}/{total}][/{DIM}] [{INFO}]▸[/{INFO}] "
            f"[bold {TEXT}]{task.id}[/bold {TEXT}] [{TEXT}]{escape(task.description)}[/{TEXT}]",
            highlight=False,
        )

    def render_task_done(self, task: Task) -> None:
        if task.exhausted:
            self.console.print(
                f"  [{WARN}]✓ {task.id} completed (round limit reached)[/{WARN}]")
            return
        self.console.print(
            f"  [{SUCCESS}]✓[/{SUCCESS}] [{DIM}]{task.id} completed: {escape(_brief(task.output))}[/{DIM}]",
            highlight=False,
        )

    def render_task_failed(self, task: Task) -> None:
        self.console.print(
            f"  [{ERROR}]✗ {task.id} failed: {escape(_brief(task.error, 120))}[/{ERROR}]",
            highlight=False,
        )

    def render_fatal(self, message: str) -> None:
        self.console.print()
        self.console.print(Panel(
            f"[{ERROR}]{escape(message)}[/{ERROR}]",
            title=f"[bold {ERROR}]Run aborted[/bold {ERROR}]",
            title_align="left",
            border_style=ERROR,
            padding=(0, 2),
        ))

    def render_summary(self, summary: "RunSummary") -> None:
        table = Table(
            show_header=True,
            header_style=f"bold {ACCENT}",
            border_style=BORDER,
            padding=(0, 1),
        )
        table.add_column("Task", min_width=8)
        table.add_column("Status", min_width=10)
        table.add_column("Description", min_width=30)

        for task in summary.tasks:
            icon, color = _STATUS_DISPLAY[task.status]
            label = task.status.value
            if task.exhausted:
                label += " (exhausted)"
                color = WARN
            table.add_row(task.id, f"[{color}]{icon} {label}[/{color}]", Text(task.description))

        footer = (
            f"{summary.completed} completed | {summary.failed} failed | "
            f"{summary.pending} pending | {summary.total_tokens:,} tokens"
        )
        self.console.print()
        self.console.print(Panel(
            table,
            title=f"[bold {ACCENT}] Run Summary [/bold {ACCENT}]",
            subtitle=f"[{DIM}]{footer}[/{DIM}]",
            title_align="left",
            border_style=BORDER,
            padding=(0, 1),
        ))
        if summary.exhausted:
            self.console.print(
                f"  [{WARN}]{summary.exhausted} task(s) hit the round limit without "
                f"confirming completion[/{WARN}]")
        if summary.errors:
            self.console.print(f"  [bold {ERROR}]Errors:[/bold {ERROR}]")
            for err in summary.errors:
                self.console.print(f"    [{ERROR}]- {escape(err)}[/{ERROR}]", highlight=False)

        color = SUCCESS if summary.all_completed else WARN
        self.console.print()
        self.console.print(f"[bold {color}]{summary.outcome}[/bold {color}]")

    def render_config(self, settings: Dict[str, Any]) -> None:
        table = Table(show_header=False, border_style=BORDER, padding=(0, 2), box=None)
        table.add_column("Key", style=f"bold {ACCENT}", min_width=14)
        table.add_column("Value", style=TEXT)
        for key, value in settings.items():
            table.add_row(key, str(value))
        self.console.print(Panel(table, title=f"[bold {ACCENT}] Configuration [/bold {ACCENT}]",
                                 title_align="left", border_style=BORDER, padding=(0, 1)))

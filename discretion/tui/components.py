"""Rich renderables for the table browser and the CLI."""
from __future__ import annotations

import io
from typing import TYPE_CHECKING

from rich import box
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models import Column, Dataset, Row

if TYPE_CHECKING:
    from rich.console import RenderableType

    from .controller import Frame


# ═══════════════════════════════════════════════════════════════════════════════
# BRAND STYLING
# ═══════════════════════════════════════════════════════════════════════════════

BORDER_STYLE = "grey42"
TITLE_STYLE = "bold italic"
STATUS_STYLE = "bold #c3ff68"
SELECTED_STYLE = "bold #fafafa on #7d56f4"
HEADER_STYLE = "bold"

KEY_HINTS = "↑/k ↓/j move  enter copy  / search  esc clear  x toggle  r refresh  q quit"
SEARCH_HINTS = "enter apply  esc cancel  backspace delete"


# ═══════════════════════════════════════════════════════════════════════════════
# TABLE
# ═══════════════════════════════════════════════════════════════════════════════

def _cells(row: Row, columns: tuple[Column, ...]) -> list[Text]:
    # Rows may carry more fields than columns (hidden but matchable).
    # Text() keeps secret names with brackets from being read as markup.
    return [Text(row.values[i] if i < len(row) else "") for i in range(len(columns))]


def build_table(
    columns: tuple[Column, ...],
    rows: tuple[Row, ...],
    highlight: int | None = None,
) -> Table:
    """Fixed-width table; long cells are truncated with an ellipsis."""
    table = Table(
        box=box.SIMPLE_HEAD,
        header_style=HEADER_STYLE,
        border_style=BORDER_STYLE,
        pad_edge=True,
        expand=False,
    )
    for col in columns:
        table.add_column(
            col.title,
            width=col.width,
            min_width=col.width,
            max_width=col.width,
            no_wrap=True,
            overflow="ellipsis",
        )
    for i, row in enumerate(rows):
        table.add_row(*_cells(row, columns), style=SELECTED_STYLE if i == highlight else None)
    return table


# ═══════════════════════════════════════════════════════════════════════════════
# FRAME
# ═══════════════════════════════════════════════════════════════════════════════

def render_title(frame: Frame) -> Text:
    title = Text(f" {frame.title} ", style=TITLE_STYLE)
    if frame.status:
        title.append("  ")
        title.append(frame.status, style=STATUS_STYLE)
    return title


def render_position(frame: Frame) -> Text:
    if frame.total == 0:
        position = Text("no rows", style="dim")
    else:
        position = Text(f"{frame.cursor + 1}/{frame.total}", style="dim")
    if frame.filter_query:
        position.append("  filter: ", style="dim")
        position.append(frame.filter_query, style="cyan")
    return position


def render_frame(frame: Frame) -> RenderableType:
    """Compose the whole screen for one frame."""
    parts: list[RenderableType] = [
        render_title(frame),
        build_table(frame.columns, frame.rows, frame.highlight),
        render_position(frame),
    ]
    if frame.composing:
        parts.append(Text.assemble(("Search: ", "bold"), frame.query, ("█", "dim")))
        hints = SEARCH_HINTS
    else:
        hints = KEY_HINTS
    return Group(
        Panel(Group(*parts), border_style=BORDER_STYLE, expand=False),
        Text(hints, style="dim"),
    )


def render_ansi(renderable: RenderableType, width: int = 100) -> str:
    """Render to an ANSI string for embedding in a prompt_toolkit layout."""
    console = Console(
        file=io.StringIO(),
        width=max(20, width),
        force_terminal=True,
        color_system="truecolor",
        highlight=False,
    )
    with console.capture() as capture:
        console.print(renderable)
    return capture.get()


# ═══════════════════════════════════════════════════════════════════════════════
# CLI OUTPUT
# ═══════════════════════════════════════════════════════════════════════════════

def render_dataset(console: Console, dataset: Dataset, title: str) -> None:
    """Print a full dataset (no windowing) for one-shot commands."""
    table = build_table(dataset.columns, dataset.rows)
    table.title = f"[bold]{title}[/bold]"
    console.print(table)
    console.print(f"[dim]{len(dataset)} rows[/dim]")


def render_result_panel(console: Console, message: str, is_error: bool = False) -> None:
    """Render a success/failure outcome panel."""
    if is_error:
        icon = "✗"
        style = "red"
    else:
        icon = "✓"
        style = "green"

    console.print(Panel.fit(f"[bold {style}]{icon} {message}[/bold {style}]", border_style=style))


def render_error(
    console: Console,
    title: str,
    cause: str,
    action: str | None = None,
) -> None:
    """Red panel: what failed, why, and optionally what to do next."""
    # Causes often quote Azure messages or user input; keep them out of markup.
    body = Text.assemble((f"✗ {title}", "bold red"), "\n\n", ("Cause: ", "yellow"), cause)
    if action:
        body.append(f"\n\n→ {action}", style="dim")
    console.print(Panel.fit(body, border_style="red", title="Error"))
    console.print()

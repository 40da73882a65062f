"""Renderer: turns an App Frame into a list of terminal lines.

Layout top to bottom: progress line, task table (with sort indicator),
optional form panel, status line, controls footer. Column widths are
fixed percentages of the terminal width; long cells are truncated.
"""
from __future__ import annotations
from typing import List, Optional, Sequence, Tuple

from app import Frame
from form import FIELD_ORDER, TaskForm
from theme import BOLD, DIM, Theme
from view import Projection, Row

MIN_WIDTH = 40
BAR_WIDTH = 20
SEP = " | "
ELLIPSIS = "…"

COLUMNS: Tuple[Tuple[str, int], ...] = (
    ("Title", 30),
    ("Description", 40),
    ("Target Date", 15),
    ("Status", 15),
)

CONTROLS: Tuple[str, ...] = (
    "q/Esc: quit | ↑/↓: navigate | Space: toggle complete | n: new | e: edit | d: delete",
    "s: sort by date | t: sort by target | c: sort by completion",
    "Overdue tasks are shown in red, completed tasks in green",
)
FORM_CONTROLS = "Tab/Shift+Tab: next/prev field | Enter: save | Esc: cancel"


def fit(text: str, width: int) -> str:
    """Pad or truncate plain text to exactly width characters."""
    text = text.replace('\n', ' ')
    if len(text) > width:
        return text[:max(0, width - 1)] + ELLIPSIS if width > 0 else ''
    return text + ' ' * (width - len(text))


def column_widths(total_width: int) -> List[int]:
    usable = max(MIN_WIDTH, total_width) - len(SEP) * (len(COLUMNS) - 1) - 2
    widths = [max(4, usable * pct // 100) for _, pct in COLUMNS]
    # hand rounding leftovers to the description column
    widths[1] += max(0, usable - sum(widths))
    return widths


def render_progress(projection: Projection, theme: Theme) -> str:
    filled = int(round(projection.ratio * BAR_WIDTH))
    bar = '#' * filled + '-' * (BAR_WIDTH - filled)
    line = (f"Progress: {projection.completed}/{projection.total} tasks completed "
            f"[{bar}] {int(projection.ratio * 100)}%")
    if projection.overdue:
        line += f" | {projection.overdue} overdue"
    return theme.header(line)


def _cells(row: Row) -> Sequence[str]:
    task = row.task
    return (
        task.title,
        task.description,
        task.target_date.isoformat() if task.target_date else '-',
        "✓ Done" if task.completed else "○ Pending",
    )


def render_table(projection: Projection, selected: Optional[int], width: int, theme: Theme) -> List[str]:
    widths = column_widths(width)
    lines = [theme.header(f"Todo List [Sorted by {projection.sort_mode.label}]")]
    header = SEP.join(fit(name, w) for (name, _), w in zip(COLUMNS, widths))
    lines.append(theme.header('  ' + header))
    lines.append(theme.style('-' * (len(header) + 2), theme.primary))
    if not projection.rows:
        lines.append(theme.style("  (no tasks - press n to add one)", DIM))
        return lines
    for idx, row in enumerate(projection.rows):
        is_selected = idx == selected
        marker = '> ' if is_selected else '  '
        text = marker + SEP.join(fit(cell, w) for cell, w in zip(_cells(row), widths))
        lines.append(theme.row(text, row.color, selected=is_selected))
    return lines


def render_form(form: TaskForm, theme: Theme) -> List[str]:
    lines = ['', theme.header(form.heading)]
    for field in FIELD_ORDER:
        focused = field is form.focus
        value = form.value(field) + ('_' if focused else '')
        text = f"{'>' if focused else ' '} {field.label}: {value}"
        lines.append(theme.style(text, theme.primary, BOLD) if focused else text)
    lines.append(theme.style(FORM_CONTROLS, DIM))
    return lines


def render_frame(frame: Frame, width: int = 100, theme: Optional[Theme] = None) -> List[str]:
    theme = theme or Theme.plain()
    lines = [render_progress(frame.projection, theme), '']
    lines.extend(render_table(frame.projection, frame.selected, width, theme))
    if frame.form is not None:
        lines.extend(render_form(frame.form, theme))
    lines.append('')
    if frame.status:
        lines.append(theme.style(frame.status, theme.primary, BOLD))
    lines.extend(theme.style(text, DIM) for text in CONTROLS)
    return lines

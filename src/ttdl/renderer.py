"""Console rendering of per-URL outcomes and the session summary table."""

from __future__ import annotations

from typing import Sequence

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ttdl.config import MediaKind, OutcomeStatus
from ttdl.models import OutcomeRecord

_KIND_LABELS = {
    MediaKind.VIDEO: "Video",
    MediaKind.PHOTO_SET: "Photo Slide",
}

_COLUMNS = (("Type", 15), ("Author", 20), ("Status", 15), ("Details", 30))


def kind_label(kind: MediaKind) -> str:
    return _KIND_LABELS[kind]


def _status_style(status: OutcomeStatus) -> str:
    return "green" if status == OutcomeStatus.SUCCESS else "red"


def render_outcome(record: OutcomeRecord) -> str:
    """Render one outcome as an inline status line."""

    label = kind_label(record.media_kind)
    if record.status == OutcomeStatus.SUCCESS:
        text = f"✔ {label} {record.id} by {record.author}: {record.details}"
        if record.strategy:
            text += f" (via {record.strategy})"
        return typer.style(text, fg=typer.colors.GREEN)
    return typer.style(f"✖ Error: {record.details}", fg=typer.colors.RED)


def build_summary_table(records: Sequence[OutcomeRecord]) -> Table:
    table = Table(title="SESSION SUMMARY", show_header=True, header_style="bold cyan")
    for title, width in _COLUMNS:
        table.add_column(title, width=width, no_wrap=True, overflow="ellipsis")

    for record in records:
        table.add_row(
            kind_label(record.media_kind),
            record.author,
            Text(record.status.value, style=_status_style(record.status)),
            record.details,
        )
    return table


def print_summary(records: Sequence[OutcomeRecord], console: Console) -> None:
    """Print the end-of-session summary table; prints nothing if nothing ran."""

    if not records:
        return
    console.print()
    console.print(build_summary_table(records))

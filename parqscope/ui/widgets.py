from __future__ import annotations

from typing import TYPE_CHECKING

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from textual import events
from textual.widget import Widget
from textual.widgets import Static

from ..core.frame import footer_parts, prepare_detail, tree_selection_index
from ..core.parquet_file import format_bytes
from ..core.query import QueryErr
from ..core.views import SCHEMA_TABLE_COLUMNS, KeyPress, ViewKind

if TYPE_CHECKING:
    from ..core.frame import RenderView
    from ..core.parquet_file import ColumnChunkInfo, ParquetSource
    from ..core.result_set import ResultSet

# Widest a data cell is drawn before it is truncated with an ellipsis
MAX_CELL_WIDTH = 40

SELECTED_STYLE = "reverse"


def build_data_table(
    data: ResultSet,
    view: RenderView,
    title: str,
) -> Table:
    """Draw the visible window of a row table with the selected row highlighted."""
    state = view.state
    table = Table(title=title, box=box.ROUNDED, expand=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim", no_wrap=True)
    columns = data.columns[state.horizontal_offset :]
    for name in columns:
        table.add_column(name, no_wrap=True, overflow="ellipsis", max_width=MAX_CELL_WIDTH)

    start = state.data_scroll_offset
    end = start + state.visible_row_capacity
    for index in range(start, min(end, data.total_rows)):
        row = data.rows[index]
        style = SELECTED_STYLE if index == state.vertical_offset else None
        table.add_row(str(index + 1), *row[state.horizontal_offset :], style=style)
    return table


def build_schema_table(view: RenderView, show_details: bool) -> Table:
    """Draw the indented schema tree, optionally with the type detail columns."""
    source = view.source
    state = view.state
    selected = tree_selection_index(source, state.vertical_offset)

    table = Table(title="Schema Tree", box=box.ROUNDED, header_style="bold cyan", expand=show_details)
    table.add_column("Column", no_wrap=True, min_width=source.tree_width)
    detail_columns = SCHEMA_TABLE_COLUMNS[state.horizontal_offset :] if show_details else ()
    for name in detail_columns:
        table.add_column(name, no_wrap=True)

    start = state.tree_scroll_offset
    for tree_index, node in enumerate(source.schema[start : start + view.tree_visible_rows], start):
        label = Text("  " * node.depth + node.name)
        if not node.is_primitive:
            label.stylize("bold yellow")
        cells = [label]
        if show_details:
            values = (
                node.physical_type,
                node.logical_type,
                node.converted_type,
                node.max_definition_level,
                node.max_repetition_level,
            )
            offset = len(SCHEMA_TABLE_COLUMNS) - len(detail_columns)
            cells.extend("" if value is None else str(value) for value in values[offset:])
        style = SELECTED_STYLE if tree_index == selected else None
        table.add_row(*cells, style=style)
    return table


def build_metadata_panel(source: ParquetSource) -> Panel:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", no_wrap=True)
    table.add_column()
    for label, value in source.metadata.items():
        table.add_row(label, value)
    return Panel(table, title="File metadata", box=box.ROUNDED, border_style="cyan")


def build_row_group_bar(source: ParquetSource, selected: int) -> Text:
    """One cell per row group, the selected one highlighted."""
    text = Text(f"Row group {selected + 1}/{source.row_group_count}  ")
    for rg in source.row_groups:
        text.append("█" if rg.index == selected else "░", style="green" if rg.index == selected else "dim")
    return text


def build_column_chunk_panel(chunk: ColumnChunkInfo) -> Panel:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", no_wrap=True)
    table.add_column()
    table.add_row("Path", chunk.path)
    table.add_row("Physical type", chunk.physical_type)
    table.add_row("Compression", chunk.compression)
    table.add_row("Encodings", ", ".join(chunk.encodings))
    table.add_row("Values", f"{chunk.num_values:,}")
    table.add_row("Compressed", format_bytes(chunk.compressed_size))
    table.add_row("Uncompressed", format_bytes(chunk.uncompressed_size))
    table.add_row("Ratio", f"{chunk.compression_ratio:.2f}x")
    table.add_row("Min", chunk.min_value if chunk.min_value is not None else "n/a")
    table.add_row("Max", chunk.max_value if chunk.max_value is not None else "n/a")
    table.add_row("Nulls", str(chunk.null_count) if chunk.null_count is not None else "n/a")
    return Panel(table, title="Column chunk", box=box.ROUNDED, border_style="cyan")


def build_row_group_summary(source: ParquetSource, selected: int) -> Panel:
    rg = source.row_groups[selected]
    stats = source.row_group_stats
    table = Table(box=box.SIMPLE, header_style="bold cyan")
    table.add_column("")
    table.add_column("This group", justify="right")
    table.add_column("Average", justify="right")
    table.add_column("Median", justify="right")
    table.add_row("Rows", f"{rg.num_rows:,}", f"{stats.avg_rows:,.0f}", f"{stats.median_rows:,.0f}")
    table.add_row(
        "Bytes",
        format_bytes(rg.total_byte_size),
        format_bytes(stats.avg_bytes),
        format_bytes(stats.median_bytes),
    )
    table.add_row("Compressed", format_bytes(rg.compressed_size), "", "")
    table.add_row("Columns", str(len(rg.columns)), "", "")
    return Panel(table, title="Row group", box=box.ROUNDED, border_style="cyan")


class TabBar(Static):
    """Header line listing the views with the open file name on the right."""

    def show(self, view: RenderView) -> None:
        tabs = Text()
        for index, label in enumerate(view.tabs.labels):
            if index:
                tabs.append(" | ", style="white")
            style = "bold reverse" if index == view.tabs.index else ""
            tabs.append(f" {label} ", style=style)
        grid = Table.grid(expand=True)
        grid.add_column()
        grid.add_column(justify="right", no_wrap=True)
        grid.add_row(tabs, Text(view.file_name, style="green"))
        self.update(grid)


class FooterBar(Static):
    """Footer line: title plus the search prompt or the active view's hints."""

    def show(self, view: RenderView) -> None:
        line = Text(view.title, style="bold green")
        line.append(" ")
        prompt, hints, note = footer_parts(view)
        if prompt is not None:
            line.append(prompt, style="green")
            line.append("  Enter=filter, Esc=cancel")
            self.update(line)
            return

        for index, (label, shortcut) in enumerate(hints):
            if index:
                line.append(" | ", style="white")
            line.append(shortcut, style="green")
            line.append(f" : {label}")
        if note is not None:
            if hints:
                line.append(" - ")
            line.append(note, style="green")
            line.append(" (Esc to show all)")
        self.update(line)


class ExplorerBody(Widget):
    """Main area: paints the active view or the row detail overlay and captures keys."""

    can_focus = True

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._view: RenderView | None = None

    def show(self, view: RenderView) -> None:
        self._view = view
        self.refresh()

    def on_key(self, event: events.Key) -> None:
        """Forward every key to the explorer; nothing falls through to Textual bindings."""
        event.stop()
        event.prevent_default()
        self.app.handle_key_press(KeyPress(event.key, event.character))

    def on_resize(self, event: events.Resize) -> None:
        self.app.refresh_frame()

    def render(self) -> RenderableType:
        view = self._view
        if view is None:
            return Text("Loading...")
        if view.state.detail_row is not None:
            return self._render_row_detail(view)

        kind = view.active_kind
        if kind is ViewKind.METADATA:
            return build_metadata_panel(view.source)
        if kind is ViewKind.SCHEMA:
            return build_schema_table(view, show_details=True)
        if kind is ViewKind.ROW_GROUPS:
            return self._render_row_groups(view)
        if kind is ViewKind.BROWSE:
            return self._render_browse(view)
        return self._render_query(view)

    def _render_row_groups(self, view: RenderView) -> RenderableType:
        source = view.source
        state = view.state
        if source.row_group_count == 0:
            return Panel("This file has no row groups", box=box.ROUNDED)

        selected = state.horizontal_offset
        if state.vertical_offset > 0:
            chunk = source.row_groups[selected].columns[state.vertical_offset - 1]
            detail = build_column_chunk_panel(chunk)
        else:
            detail = build_row_group_summary(source, selected)

        grid = Table.grid(expand=True, padding=(0, 1))
        grid.add_column(no_wrap=True)
        grid.add_column(ratio=1)
        grid.add_row(
            build_schema_table(view, show_details=False),
            Group(build_row_group_bar(source, selected), detail),
        )
        return grid

    def _render_browse(self, view: RenderView) -> RenderableType:
        data = view.table_data()
        title = "Data"
        if view.state.active_filter is not None:
            title = f"Data (filtered: {data.total_rows} rows)"
        return build_data_table(data, view, title)

    def _render_query(self, view: RenderView) -> RenderableType:
        state = view.state
        # The editor keeps to one line: border and padding (4), prompt (5), cursor (1)
        room = max(1, self.size.width - 10)
        prompt = Text("SQL> ", no_wrap=True, overflow="crop")
        prompt.append(state.query_text[-room:])
        prompt.append(" ", style="on cyan")
        editor = Panel(prompt, title=" SQL ", box=box.ROUNDED, border_style="cyan")

        outcome = state.query_outcome
        if outcome is None:
            results = Panel(
                f"Enter SQL and press Enter to run. Table name: {view.context.table_name}",
                box=box.ROUNDED,
                border_style="bright_black",
            )
        elif isinstance(outcome, QueryErr):
            results = Panel(
                Text(outcome.message, style="red"),
                title=" Error ",
                box=box.ROUNDED,
                border_style="red",
            )
        else:
            results = build_data_table(outcome.result, view, "Query result")
        return Group(editor, results)

    def _render_row_detail(self, view: RenderView) -> RenderableType:
        # Border (2) on each axis plus one column of padding each side
        window = prepare_detail(view, self.size.height - 2, self.size.width - 4)
        return Panel(
            Text("\n".join(window.lines)),
            title=f" {window.title} (Esc close, ↑↓ PgUp PgDn scroll, ←→ horizontal) ",
            box=box.ROUNDED,
            border_style="yellow",
        )

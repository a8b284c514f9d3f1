"""Per-frame preparation: clamp stale selections and recompute scroll windows.

Runs at the start of every render, before anything is painted. It is the
only place that writes ``visible_row_capacity`` and the only place upper
bounds on the selection are enforced.
"""

from dataclasses import dataclass

from .navigation import NavigationState, clamp_index, sync_scroll
from .parquet_file import ParquetSource
from .result_set import ResultSet
from .views import (
    SCHEMA_TABLE_COLUMNS,
    ViewContext,
    ViewKind,
    ViewTabs,
    browse_result,
    query_result,
)

# Tab bar (3) + footer (1)
SCREEN_CHROME_ROWS = 4
# Table title, top border, header, header rule, bottom border
TABLE_CHROME_ROWS = 5
# SQL editor panel stacked above the query result
QUERY_EDITOR_ROWS = 3


@dataclass(frozen=True)
class RenderView:
    """Read-only snapshot handed to the painting layer.

    Attributes:
        title: Application title
        file_name: Name of the open file
        tabs: View tabs (the active one decides the body)
        state: Navigation state after clamping
        context: Collaborators, for data lookups while painting
        tree_visible_rows: Number of schema tree lines that fit on screen
    """

    title: str
    file_name: str
    tabs: ViewTabs
    state: NavigationState
    context: ViewContext
    tree_visible_rows: int = 1

    @property
    def source(self) -> ParquetSource:
        return self.context.source

    @property
    def active_kind(self) -> ViewKind:
        return self.tabs.active.kind

    def table_data(self) -> ResultSet | None:
        """Rows of the active row table, None for views without one."""
        if self.active_kind is ViewKind.BROWSE:
            return browse_result(self.state, self.context)
        if self.active_kind is ViewKind.QUERY:
            return query_result(self.state)
        return None


@dataclass(frozen=True)
class DetailWindow:
    """Visible slice of the row detail overlay."""

    title: str
    lines: tuple[str, ...]
    vertical: int
    horizontal: int
    total_lines: int


def table_chrome_rows(kind: ViewKind) -> int:
    """Lines of the screen taken by everything but the rows of the table shown for ``kind``."""
    rows = SCREEN_CHROME_ROWS + TABLE_CHROME_ROWS
    if kind is ViewKind.QUERY:
        rows += QUERY_EDITOR_ROWS
    return rows


def tree_selection_index(source: ParquetSource, vertical_offset: int) -> int | None:
    """Map a column selection (1-based, 0 = none) to its line in the schema tree."""
    if vertical_offset == 0:
        return None
    return source.primitive_tree_index(vertical_offset - 1)


def sync_tree_scroll(state: NavigationState, source: ParquetSource, visible: int) -> int:
    """Keep the selected primitive column visible in the schema tree."""
    total = len(source.schema)
    selected = tree_selection_index(source, state.vertical_offset)
    if selected is None:
        selected = state.tree_scroll_offset
    state.tree_scroll_offset = sync_scroll(selected, state.tree_scroll_offset, visible, total)
    return state.tree_scroll_offset


def prepare_frame(
    state: NavigationState,
    tabs: ViewTabs,
    context: ViewContext,
    height: int,
    title: str = "parqscope",
) -> RenderView:
    """Record the visible capacity for ``height`` lines and bring offsets in range."""
    source = context.source
    kind = tabs.active.kind
    state.visible_row_capacity = max(1, height - table_chrome_rows(kind))
    # The schema tree is drawn as a titled table too
    tree_visible = max(1, height - table_chrome_rows(ViewKind.SCHEMA))

    if kind in (ViewKind.BROWSE, ViewKind.QUERY):
        if kind is ViewKind.BROWSE:
            data = browse_result(state, context)
        else:
            data = query_result(state)
        total = data.total_rows if data is not None else 0
        columns = data.total_columns if data is not None else 0
        state.vertical_offset = clamp_index(state.vertical_offset, total)
        state.horizontal_offset = clamp_index(state.horizontal_offset, columns)
        state.data_scroll_offset = sync_scroll(
            state.vertical_offset, state.data_scroll_offset, state.visible_row_capacity, total
        )
    elif kind in (ViewKind.SCHEMA, ViewKind.ROW_GROUPS):
        state.vertical_offset = min(state.vertical_offset, source.column_count)
        if kind is ViewKind.ROW_GROUPS:
            state.horizontal_offset = clamp_index(state.horizontal_offset, source.row_group_count)
        else:
            state.horizontal_offset = clamp_index(
                state.horizontal_offset, len(SCHEMA_TABLE_COLUMNS)
            )
        sync_tree_scroll(state, source, tree_visible)

    return RenderView(title, source.metadata.file_name, tabs, state, context, tree_visible)


def detail_content(view: RenderView) -> tuple[str, list[str]]:
    """Resolve the row shown in the detail overlay into a title and text lines."""
    active = view.tabs.active
    row_index = view.state.detail_row
    if row_index is None or not active.can_resolve_row:
        return "Row detail", ["No data"]

    lookup = active.resolve_row(view.state, view.context, row_index)
    if lookup.error is not None:
        return "Row detail", [lookup.error]
    lines = [f"{column}: {value}" for column, value in zip(lookup.columns, lookup.values)]
    return f"Row {row_index + 1} ({active.identity_label()})", lines


def detail_window(
    lines: list[str], vertical: int, horizontal: int, height: int, width: int
) -> tuple[list[str], int, int]:
    """Slice ``lines`` to a ``height`` x ``width`` window, clamping both scrolls."""
    height = max(1, height)
    width = max(1, width)
    vertical = min(vertical, max(0, len(lines) - height))
    widest = max((len(line) for line in lines), default=0)
    horizontal = min(horizontal, max(0, widest - width))
    visible = [line[horizontal : horizontal + width] for line in lines[vertical : vertical + height]]
    return visible, vertical, horizontal


def prepare_detail(view: RenderView, height: int, width: int) -> DetailWindow:
    """Build the detail overlay window and write the clamped scrolls back."""
    title, lines = detail_content(view)
    visible, vertical, horizontal = detail_window(
        lines,
        view.state.detail_scroll_vertical,
        view.state.detail_scroll_horizontal,
        height,
        width,
    )
    view.state.detail_scroll_vertical = vertical
    view.state.detail_scroll_horizontal = horizontal
    return DetailWindow(title, tuple(visible), vertical, horizontal, len(lines))


def footer_parts(view: RenderView) -> tuple[str | None, tuple[tuple[str, str], ...], str | None]:
    """Return (search prompt, hints, filter note) for the footer line.

    While the search prompt is open only the prompt is shown.
    """
    state = view.state
    if state.search_mode:
        return f"Search: {state.search_query}|", (), None
    note = None
    if state.active_filter is not None and state.filtered_result is not None:
        note = f"{state.filtered_result.total_rows} rows filtered"
    return None, view.tabs.active.instruction_hints(), note

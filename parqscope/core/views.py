"""The five explorer views and the tab cycler that switches between them.

Each view is a plain record pairing its data (label, hints, kind) with the
functions that interpret key presses and resolve rows. Views never touch the
terminal; they only mutate the NavigationState they are handed.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .navigation import NavigationState, clamp_index
from .parquet_file import ParquetSource
from .query import QueryErr, QueryOk
from .result_set import ResultSet

ROW_OUT_OF_RANGE = "Row out of range"
NO_RESULT_DATA = "No result data"

# Columns of the schema detail table that scroll horizontally
SCHEMA_TABLE_COLUMNS = ("Physical", "Logical", "Converted", "Max def", "Max rep")


@dataclass(frozen=True)
class KeyPress:
    """A key press using Textual's key names (``up``, ``pagedown``, ``ctrl+x``...)."""

    key: str
    character: str | None = None

    @property
    def is_printable(self) -> bool:
        return (
            self.character is not None
            and len(self.character) == 1
            and self.character.isprintable()
        )


@dataclass
class ViewContext:
    """Collaborators the views call into.

    Attributes:
        source: The open Parquet file
        run_query: Executes SQL text and returns the outcome
        table_name: Name the file is registered under for SQL
    """

    source: ParquetSource
    run_query: Callable[[str], QueryOk | QueryErr]
    table_name: str = "parquet"


@dataclass(frozen=True)
class RowLookup:
    """A resolved row for the detail overlay, or the reason it could not be resolved."""

    columns: tuple[str, ...] = ()
    values: tuple[str, ...] = ()
    error: str | None = None


class ViewKind(Enum):
    METADATA = "Metadata"
    SCHEMA = "Schema"
    ROW_GROUPS = "Row Groups"
    BROWSE = "Browse"
    QUERY = "Query"


KeyHandler = Callable[[KeyPress, NavigationState, ViewContext], bool]
RowResolver = Callable[[NavigationState, ViewContext, int], RowLookup]


@dataclass(frozen=True)
class ViewStrategy:
    """One top-level view: its identity, hints and key handling.

    Attributes:
        kind: Tag identifying the view
        hints: Label/shortcut pairs shown in the footer
        on_key: Handler returning True when it consumed the key
        resolve_row: Row lookup for the detail overlay, None if unsupported
        accepts_text: Printable keys are input for the view itself
    """

    kind: ViewKind
    hints: tuple[tuple[str, str], ...]
    on_key: KeyHandler
    resolve_row: RowResolver | None = None
    accepts_text: bool = False

    def handle_key(self, key: KeyPress, state: NavigationState, context: ViewContext) -> bool:
        return self.on_key(key, state, context)

    def instruction_hints(self) -> tuple[tuple[str, str], ...]:
        return self.hints

    def identity_label(self) -> str:
        return self.kind.value

    @property
    def can_resolve_row(self) -> bool:
        return self.resolve_row is not None


def browse_result(state: NavigationState, context: ViewContext) -> ResultSet:
    """Rows shown by the Browse view: the filter result when a filter is active."""
    if state.filtered_result is not None:
        return state.filtered_result
    return context.source.sample


def query_result(state: NavigationState) -> ResultSet | None:
    """Rows of the last successful query, None otherwise."""
    if isinstance(state.query_outcome, QueryOk):
        return state.query_outcome.result
    return None


def lookup_row(data: ResultSet | None, index: int) -> RowLookup:
    if data is None:
        return RowLookup(error=NO_RESULT_DATA)
    row = data.row(index)
    if row is None:
        return RowLookup(error=ROW_OUT_OF_RANGE)
    return RowLookup(columns=data.columns, values=row)


def page_tree(state: NavigationState, visible: int, total: int, forward: bool) -> None:
    """Page the column selection of a tree view; the frame re-syncs the tree scroll."""
    if forward:
        state.vertical_offset = min(state.vertical_offset + visible, total)
    else:
        state.vertical_offset = max(0, state.vertical_offset - visible)


def navigate_table(key: KeyPress, state: NavigationState, data: ResultSet | None) -> bool:
    """Shared row-table navigation for Browse and the Query result table."""
    total = data.total_rows if data is not None else 0
    visible = state.visible_row_capacity
    if key.key == "down":
        if state.vertical_offset < total - 1:
            state.down()
    elif key.key == "up":
        state.up()
    elif key.key == "pagedown":
        state.page_down(visible, total)
        return True
    elif key.key == "pageup":
        state.page_up(visible, total)
        return True
    elif key.key == "home":
        state.vertical_offset = 0
    elif key.key == "end":
        state.vertical_offset = clamp_index(total - 1, total)
    elif key.key == "right":
        if data is not None and state.horizontal_offset < data.total_columns - 1:
            state.right()
        return True
    elif key.key == "left":
        state.left()
        return True
    else:
        return False
    state.adjust_scroll_to_selection(visible, total)
    return True


def _metadata_key(key: KeyPress, state: NavigationState, context: ViewContext) -> bool:
    return False


def _schema_key(key: KeyPress, state: NavigationState, context: ViewContext) -> bool:
    total = context.source.column_count
    if key.key == "down":
        if state.vertical_offset < total:
            state.down()
    elif key.key == "up":
        state.up()
    elif key.key == "right":
        if state.horizontal_offset < len(SCHEMA_TABLE_COLUMNS) - 1:
            state.right()
    elif key.key == "left":
        state.left()
    elif key.key in ("pagedown", "pageup"):
        page_tree(state, state.visible_row_capacity, total, forward=key.key == "pagedown")
    else:
        return False
    return True


def _row_groups_key(key: KeyPress, state: NavigationState, context: ViewContext) -> bool:
    source = context.source
    if key.key == "right":
        if state.horizontal_offset < source.row_group_count - 1:
            state.right()
    elif key.key == "left":
        state.left()
    elif key.key == "down":
        if state.vertical_offset < source.column_count:
            state.down()
    elif key.key == "up":
        state.up()
    elif key.key in ("pagedown", "pageup"):
        page_tree(
            state, state.visible_row_capacity, source.column_count, forward=key.key == "pagedown"
        )
    else:
        return False
    return True


def _browse_key(key: KeyPress, state: NavigationState, context: ViewContext) -> bool:
    if key.character in ("v", "V"):
        state.open_detail(state.vertical_offset)
        return True
    return navigate_table(key, state, browse_result(state, context))


def _browse_row(state: NavigationState, context: ViewContext, index: int) -> RowLookup:
    return lookup_row(browse_result(state, context), index)


def _query_key(key: KeyPress, state: NavigationState, context: ViewContext) -> bool:
    if key.key == "enter":
        state.query_outcome = context.run_query(state.query_text)
        state.reset()
        return True
    if key.key == "backspace":
        state.query_text = state.query_text[:-1]
        return True
    if key.key == "ctrl+o":
        if isinstance(state.query_outcome, QueryOk):
            state.open_detail(state.vertical_offset)
        return True
    if navigate_table(key, state, query_result(state)):
        return True
    if key.is_printable:
        state.query_text += key.character
        return True
    return False


def _query_row(state: NavigationState, context: ViewContext, index: int) -> RowLookup:
    return lookup_row(query_result(state), index)


METADATA_VIEW = ViewStrategy(
    kind=ViewKind.METADATA,
    hints=(("Switch view", "Tab"), ("Search", "/"), ("Quit", "Ctrl+X")),
    on_key=_metadata_key,
)

SCHEMA_VIEW = ViewStrategy(
    kind=ViewKind.SCHEMA,
    hints=(("Column", "↑↓"), ("Details", "←→"), ("Page", "PgUp/PgDn"), ("Reset", "Esc")),
    on_key=_schema_key,
)

ROW_GROUPS_VIEW = ViewStrategy(
    kind=ViewKind.ROW_GROUPS,
    hints=(("Row group", "←→"), ("Column", "↑↓"), ("Reset", "Esc")),
    on_key=_row_groups_key,
)

BROWSE_VIEW = ViewStrategy(
    kind=ViewKind.BROWSE,
    hints=(
        ("Rows", "↑↓"),
        ("Columns", "←→"),
        ("Page", "PgUp/PgDn"),
        ("Search", "/"),
        ("Row detail", "v"),
    ),
    on_key=_browse_key,
    resolve_row=_browse_row,
)

QUERY_VIEW = ViewStrategy(
    kind=ViewKind.QUERY,
    hints=(
        ("Run query", "Enter"),
        ("Clear", "Esc"),
        ("Rows", "↑↓"),
        ("Row detail", "Ctrl+O"),
        ("Search", "Ctrl+F"),
    ),
    on_key=_query_key,
    resolve_row=_query_row,
    accepts_text=True,
)

ALL_VIEWS = (METADATA_VIEW, SCHEMA_VIEW, ROW_GROUPS_VIEW, BROWSE_VIEW, QUERY_VIEW)


class ViewTabs:
    """Cycles through the fixed, ordered list of views."""

    def __init__(self, views: tuple[ViewStrategy, ...] = ALL_VIEWS):
        if not views:
            raise ValueError("At least one view is required")
        self.views = views
        self.index = 0

    @property
    def active(self) -> ViewStrategy:
        return self.views[self.index]

    @property
    def labels(self) -> list[str]:
        return [view.identity_label() for view in self.views]

    def next(self) -> ViewStrategy:
        self.index = (self.index + 1) % len(self.views)
        return self.active

    def prev(self) -> ViewStrategy:
        self.index = (self.index - 1) % len(self.views)
        return self.active

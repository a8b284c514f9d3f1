"""Navigation state and viewport synchronization for the explorer views."""

from dataclasses import dataclass
from enum import Enum

from .query import QueryErr, QueryOk
from .result_set import ResultSet

# Lines moved by page up/down inside the row detail overlay
DETAIL_PAGE_SIZE = 10

# Visible rows used before the first frame reports the real terminal size
DEFAULT_VISIBLE_ROWS = 20


class Mode(Enum):
    """Top-level input modes; exactly one is active at a time."""

    NORMAL = "normal"
    SEARCH_ENTRY = "search"
    ROW_DETAIL = "row_detail"


def sync_scroll(selection: int, scroll: int, visible: int, total: int) -> int:
    """Return a scroll offset that keeps ``selection`` inside the window.

    The window is ``[scroll, scroll + visible)``. The result is clamped to
    ``[0, max(0, total - visible)]``.
    """
    visible = max(1, visible)
    if selection < scroll:
        scroll = selection
    elif selection >= scroll + visible:
        scroll = selection - visible + 1
    max_scroll = max(0, total - visible)
    return max(0, min(scroll, max_scroll))


def clamp_index(index: int, total: int) -> int:
    """Clamp ``index`` into ``[0, total - 1]``; 0 when the collection is empty."""
    if total <= 0:
        return 0
    return max(0, min(index, total - 1))


@dataclass
class NavigationState:
    """Cursor, scroll, search and overlay state of one explorer session.

    ``vertical_offset`` is the selection. In the Schema and Row Groups views
    0 means "no column" and k selects primitive column k - 1; in the row
    tables it is the 0-based row index.
    """

    horizontal_offset: int = 0
    vertical_offset: int = 0
    tree_scroll_offset: int = 0
    data_scroll_offset: int = 0
    visible_row_capacity: int = DEFAULT_VISIBLE_ROWS
    # Search: "/" opens the prompt, Enter filters, Esc cancels or clears
    search_mode: bool = False
    search_query: str = ""
    active_filter: str | None = None
    filtered_result: ResultSet | None = None
    # Query view
    query_text: str = ""
    query_outcome: QueryOk | QueryErr | None = None
    # Row detail overlay
    detail_row: int | None = None
    detail_scroll_vertical: int = 0
    detail_scroll_horizontal: int = 0

    @property
    def mode(self) -> Mode:
        if self.detail_row is not None:
            return Mode.ROW_DETAIL
        if self.search_mode:
            return Mode.SEARCH_ENTRY
        return Mode.NORMAL

    def reset(self) -> None:
        """Zero the base offsets, leaving search, query and overlay state alone."""
        self.horizontal_offset = 0
        self.vertical_offset = 0
        self.tree_scroll_offset = 0
        self.data_scroll_offset = 0

    def apply_search_filter(self, text: str, result: ResultSet) -> None:
        self.active_filter = text
        self.filtered_result = result

    def clear_search_filter(self) -> None:
        self.active_filter = None
        self.filtered_result = None

    def down(self) -> None:
        self.vertical_offset += 1

    def up(self) -> None:
        self.vertical_offset = max(0, self.vertical_offset - 1)

    def right(self) -> None:
        self.horizontal_offset += 1

    def left(self) -> None:
        self.horizontal_offset = max(0, self.horizontal_offset - 1)

    def page_up(self, visible_rows: int, max_rows: int) -> None:
        """Move the selection up one page and keep it on screen."""
        self.vertical_offset = max(0, self.vertical_offset - visible_rows)
        self.adjust_scroll_to_selection(visible_rows, max_rows)

    def page_down(self, visible_rows: int, max_rows: int) -> None:
        """Move the selection down one page, stopping at the last row."""
        self.vertical_offset = min(self.vertical_offset + visible_rows, max(0, max_rows - 1))
        self.adjust_scroll_to_selection(visible_rows, max_rows)

    def adjust_scroll_to_selection(self, visible_rows: int, max_rows: int) -> None:
        self.data_scroll_offset = sync_scroll(
            self.vertical_offset, self.data_scroll_offset, visible_rows, max_rows
        )

    def open_detail(self, row: int) -> None:
        """Show the row detail overlay for ``row`` with both scrolls at the origin."""
        self.detail_row = row
        self.detail_scroll_vertical = 0
        self.detail_scroll_horizontal = 0

    def close_detail(self) -> None:
        self.detail_row = None

    def scroll_detail(self, vertical: int = 0, horizontal: int = 0) -> None:
        """Shift the detail scroll position, saturating at zero."""
        self.detail_scroll_vertical = max(0, self.detail_scroll_vertical + vertical)
        self.detail_scroll_horizontal = max(0, self.detail_scroll_horizontal + horizontal)

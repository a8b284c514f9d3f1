"""Tests for the mode coordinator's input state machine."""

from unittest.mock import Mock

from conftest import make_context, make_result, make_source, select_view

from parqscope.core.coordinator import KeyResult, ModeCoordinator
from parqscope.core.navigation import DETAIL_PAGE_SIZE, Mode
from parqscope.core.query import QueryErr, run_query
from parqscope.core.result_set import ResultSet
from parqscope.core.views import KeyPress, ViewKind


def press(key: str, character: str | None = None) -> KeyPress:
    return KeyPress(key, character)


def char(c: str) -> KeyPress:
    return KeyPress(c, c)


SLASH = KeyPress("slash", "/")


def invariants_hold(coordinator: ModeCoordinator) -> bool:
    state = coordinator.state
    filter_pair = (state.active_filter is None) == (state.filtered_result is None)
    exclusive = not (state.search_mode and state.detail_row is not None)
    return filter_pair and exclusive


class TestModeCoordinator:
    """Test routing between normal mode, search entry and row detail."""

    def setup_method(self):
        rows = []
        for index in range(1000):
            message = "ERROR: disk" if index in (3, 400, 800) else "fine"
            rows.append((str(index), message))
        sample = ResultSet(columns=("id", "message"), rows=tuple(rows))
        self.source = make_source(sample)
        self.context = make_context(self.source)
        self.coordinator = ModeCoordinator(self.context)
        self.state = self.coordinator.state

    def feed(self, *keys: KeyPress) -> list[KeyResult]:
        results = []
        for key in keys:
            results.append(self.coordinator.handle_key(key))
            assert invariants_hold(self.coordinator)
        return results

    def type_text(self, text: str) -> None:
        self.feed(*(char(c) for c in text))

    def test_starts_in_normal_mode(self):
        """Test the initial session state."""
        assert self.coordinator.mode is Mode.NORMAL
        assert self.coordinator.tabs.active.kind is ViewKind.METADATA

    def test_terminate_from_every_mode(self):
        """Test ctrl+x exits from normal, search and detail modes."""
        assert self.coordinator.handle_key(press("ctrl+x")) is KeyResult.EXIT

        self.feed(SLASH)
        assert self.coordinator.mode is Mode.SEARCH_ENTRY
        assert self.coordinator.handle_key(press("ctrl+x")) is KeyResult.EXIT

        self.feed(press("escape"))
        select_view(self.coordinator.tabs, ViewKind.BROWSE)
        self.feed(char("v"))
        assert self.coordinator.mode is Mode.ROW_DETAIL
        assert self.coordinator.handle_key(press("ctrl+x")) is KeyResult.EXIT

    def test_search_commit_filters_and_resets(self):
        """Test committing a search over 1000 rows with 3 matches."""
        select_view(self.coordinator.tabs, ViewKind.BROWSE)
        self.state.vertical_offset = 40
        self.state.data_scroll_offset = 35

        self.feed(SLASH)
        self.type_text("error")
        self.feed(press("enter"))

        assert self.coordinator.mode is Mode.NORMAL
        assert self.state.active_filter == "error"
        assert self.state.filtered_result.total_rows == 3
        assert self.state.vertical_offset == 0
        assert self.state.data_scroll_offset == 0

    def test_search_cancel_discards_buffer(self):
        """Test escape closes the prompt without touching the filter."""
        self.feed(SLASH)
        self.type_text("abc")
        self.feed(press("escape"))

        assert self.coordinator.mode is Mode.NORMAL
        assert self.state.search_query == ""
        assert self.state.active_filter is None

    def test_search_cancel_keeps_existing_filter(self):
        """Test cancelling a second search leaves the first filter active."""
        self.feed(SLASH)
        self.type_text("error")
        self.feed(press("enter"), SLASH)
        self.type_text("zzz")
        self.feed(press("escape"))
        assert self.state.active_filter == "error"

    def test_search_entry_editing_and_swallowed_keys(self):
        """Test backspace edits the buffer and navigation keys do nothing."""
        select_view(self.coordinator.tabs, ViewKind.BROWSE)
        self.feed(SLASH)
        self.type_text("ab")
        results = self.feed(press("backspace"), press("down"), press("tab"), press("pagedown"))

        assert all(result is KeyResult.HANDLED for result in results)
        assert self.state.search_query == "a"
        assert self.state.vertical_offset == 0
        assert self.coordinator.tabs.active.kind is ViewKind.BROWSE

    def test_search_starts_with_empty_buffer(self):
        """Test opening the prompt clears any previous text."""
        self.state.search_query = "stale"
        self.feed(SLASH)
        assert self.state.search_query == ""

    def test_escape_clears_filter_first(self):
        """Test escape removes an active filter before anything else."""
        select_view(self.coordinator.tabs, ViewKind.QUERY)
        self.state.query_text = "SELECT 1"
        self.state.apply_search_filter("x", make_result(1))
        self.state.vertical_offset = 2

        self.feed(press("escape"))

        assert self.state.active_filter is None
        assert self.state.filtered_result is None
        assert self.state.vertical_offset == 0
        assert self.state.query_text == "SELECT 1"

    def test_escape_clears_query_in_query_view(self):
        """Test escape clears the query text and outcome when no filter is active."""
        select_view(self.coordinator.tabs, ViewKind.QUERY)
        self.state.query_text = "SELECT 1"
        self.state.query_outcome = QueryErr("bad")

        self.feed(press("escape"))

        assert self.state.query_text == ""
        assert self.state.query_outcome is None

    def test_escape_resets_offsets_otherwise(self):
        """Test escape falls back to resetting the offsets."""
        select_view(self.coordinator.tabs, ViewKind.SCHEMA)
        self.state.vertical_offset = 2
        self.state.horizontal_offset = 1
        self.feed(press("escape"))
        assert self.state.vertical_offset == 0
        assert self.state.horizontal_offset == 0

    def test_tab_switch_resets_offsets(self):
        """Test switching views always resets the base offsets."""
        self.state.vertical_offset = 5
        self.state.data_scroll_offset = 3
        self.feed(press("tab"))
        assert self.coordinator.tabs.active.kind is ViewKind.SCHEMA
        assert (self.state.vertical_offset, self.state.data_scroll_offset) == (0, 0)

        self.state.vertical_offset = 2
        self.feed(press("shift+tab"))
        assert self.coordinator.tabs.active.kind is ViewKind.METADATA
        assert self.state.vertical_offset == 0

    def test_slash_is_text_in_query_view(self):
        """Test the query editor receives slashes instead of opening the prompt."""
        select_view(self.coordinator.tabs, ViewKind.QUERY)
        self.feed(SLASH)
        assert self.coordinator.mode is Mode.NORMAL
        assert self.state.query_text == "/"

    def test_ctrl_f_opens_search_from_query_view(self):
        """Test search stays reachable while the query editor takes text."""
        select_view(self.coordinator.tabs, ViewKind.QUERY)
        self.feed(char("a"), press("ctrl+f", "\x06"))

        assert self.coordinator.mode is Mode.SEARCH_ENTRY
        assert self.state.query_text == "a"

        self.feed(char("7"), press("enter"))
        assert self.coordinator.mode is Mode.NORMAL
        assert self.state.active_filter == "7"

    def test_unbound_key_is_ignored(self):
        """Test keys no one handles are reported as ignored."""
        assert self.coordinator.handle_key(char("z")) is KeyResult.IGNORED

    def test_row_detail_scrolling(self):
        """Test the detail overlay scroll keys."""
        select_view(self.coordinator.tabs, ViewKind.BROWSE)
        self.feed(press("down"), char("v"))
        assert self.state.detail_row == 1

        self.feed(press("down"), press("down"), press("up"))
        assert self.state.detail_scroll_vertical == 1
        self.feed(press("pagedown"))
        assert self.state.detail_scroll_vertical == 1 + DETAIL_PAGE_SIZE
        self.feed(press("pageup"), press("pageup"))
        assert self.state.detail_scroll_vertical == 0
        self.feed(press("right"), press("right"), press("left"), press("left"), press("left"))
        assert self.state.detail_scroll_horizontal == 0

    def test_row_detail_blocks_view_bindings(self):
        """Test the underlying view ignores keys while the overlay is open."""
        select_view(self.coordinator.tabs, ViewKind.BROWSE)
        self.feed(char("v"))

        results = self.feed(press("tab"), SLASH, press("end"))

        assert results == [KeyResult.IGNORED, KeyResult.IGNORED, KeyResult.IGNORED]
        assert self.coordinator.tabs.active.kind is ViewKind.BROWSE
        assert not self.state.search_mode
        assert self.state.vertical_offset == 0

        self.feed(press("escape"))
        assert self.coordinator.mode is Mode.NORMAL
        assert self.state.detail_row is None

    def test_detail_cannot_open_from_tree_views(self):
        """Test v is not a row detail key outside the row tables."""
        for kind in (ViewKind.METADATA, ViewKind.SCHEMA, ViewKind.ROW_GROUPS):
            select_view(self.coordinator.tabs, kind)
            self.feed(char("v"))
            assert self.coordinator.mode is Mode.NORMAL

    def test_empty_query_never_reaches_engine(self):
        """Test an empty query is rejected before the connector is used."""
        connector = Mock()
        context = make_context(self.source, run_query=lambda text: run_query(connector, text))
        coordinator = ModeCoordinator(context)
        select_view(coordinator.tabs, ViewKind.QUERY)

        coordinator.handle_key(press("enter"))

        assert coordinator.state.query_outcome == QueryErr("Empty query")
        connector.fetch_query.assert_not_called()

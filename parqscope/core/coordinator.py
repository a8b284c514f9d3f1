"""Top-level input routing between modal overlays and the active view."""

import logging
from enum import Enum

from .navigation import DETAIL_PAGE_SIZE, Mode, NavigationState
from .views import KeyPress, ViewContext, ViewKind, ViewTabs

logger = logging.getLogger("parqscope")

TERMINATE_KEYS = ("ctrl+x", "ctrl+c")
# Opens the search prompt from every view, including the ones that take text
SEARCH_KEY = "ctrl+f"


class KeyResult(Enum):
    """What happened to a key press."""

    HANDLED = "handled"
    IGNORED = "ignored"
    EXIT = "exit"


class ModeCoordinator:
    """Routes key presses to the search prompt, the row detail overlay or the active view.

    The coordinator owns the session's NavigationState and the view tabs; the
    UI layer only feeds it key presses and reads the state back when painting.
    """

    def __init__(
        self,
        context: ViewContext,
        tabs: ViewTabs | None = None,
        state: NavigationState | None = None,
    ):
        self.context = context
        self.tabs = tabs if tabs is not None else ViewTabs()
        self.state = state if state is not None else NavigationState()

    @property
    def mode(self) -> Mode:
        return self.state.mode

    def handle_key(self, key: KeyPress) -> KeyResult:
        """Apply one key press to the session state."""
        if key.key in TERMINATE_KEYS:
            logger.info("Terminate requested")
            return KeyResult.EXIT

        mode = self.state.mode
        if mode is Mode.ROW_DETAIL:
            return self._handle_row_detail(key)
        if mode is Mode.SEARCH_ENTRY:
            return self._handle_search_entry(key)
        return self._handle_normal(key)

    def _handle_row_detail(self, key: KeyPress) -> KeyResult:
        state = self.state
        if key.key == "escape":
            state.close_detail()
        elif key.key == "up":
            state.scroll_detail(vertical=-1)
        elif key.key == "down":
            state.scroll_detail(vertical=1)
        elif key.key == "pageup":
            state.scroll_detail(vertical=-DETAIL_PAGE_SIZE)
        elif key.key == "pagedown":
            state.scroll_detail(vertical=DETAIL_PAGE_SIZE)
        elif key.key == "left":
            state.scroll_detail(horizontal=-1)
        elif key.key == "right":
            state.scroll_detail(horizontal=1)
        else:
            return KeyResult.IGNORED
        return KeyResult.HANDLED

    def _handle_search_entry(self, key: KeyPress) -> KeyResult:
        state = self.state
        if key.key == "escape":
            state.search_mode = False
            state.search_query = ""
        elif key.key == "enter":
            self._commit_search()
        elif key.key == "backspace":
            state.search_query = state.search_query[:-1]
        elif key.is_printable:
            state.search_query += key.character
        # Navigation keys are swallowed while the prompt is open
        return KeyResult.HANDLED

    def _commit_search(self) -> None:
        state = self.state
        query = state.search_query
        filtered = self.context.source.filter_rows(query)
        state.apply_search_filter(query, filtered)
        state.reset()
        state.search_mode = False
        logger.debug(f"Search filter {query!r} applied: {filtered.total_rows} rows")

    def _handle_normal(self, key: KeyPress) -> KeyResult:
        state = self.state
        active = self.tabs.active

        if key.key == "escape":
            if state.active_filter is not None:
                state.clear_search_filter()
                state.reset()
            elif active.kind is ViewKind.QUERY:
                state.query_text = ""
                state.query_outcome = None
            else:
                state.reset()
            return KeyResult.HANDLED

        if key.key == SEARCH_KEY or (key.character == "/" and not active.accepts_text):
            state.search_mode = True
            state.search_query = ""
            return KeyResult.HANDLED

        if key.key == "tab":
            self.tabs.next()
            state.reset()
            logger.debug(f"Switched to {self.tabs.active.identity_label()} view")
            return KeyResult.HANDLED

        if key.key == "shift+tab":
            self.tabs.prev()
            state.reset()
            logger.debug(f"Switched to {self.tabs.active.identity_label()} view")
            return KeyResult.HANDLED

        if active.handle_key(key, state, self.context):
            return KeyResult.HANDLED
        return KeyResult.IGNORED

import logging

from textual.app import App, ComposeResult

from ..config import ExplorerConfig
from ..core.coordinator import KeyResult, ModeCoordinator
from ..core.frame import prepare_frame
from ..core.parquet_file import ParquetSource
from ..core.query import run_query
from ..core.views import KeyPress, ViewContext
from ..integrations import DBConnector
from .widgets import ExplorerBody, FooterBar, TabBar

logger = logging.getLogger("parqscope")


class ParqscopeApp(App):
    """Interactive explorer for a single Parquet file."""

    TITLE = "parqscope"

    CSS = """
    TabBar {
        height: 3;
        border: round $warning;
        padding: 0 1;
    }

    ExplorerBody {
        height: 1fr;
    }

    FooterBar {
        height: 1;
    }
    """

    def __init__(
        self,
        source: ParquetSource,
        config: ExplorerConfig | None = None,
        connector: DBConnector | None = None,
        **kwargs,
    ):
        """Initialize the app with an opened Parquet source."""
        super().__init__(**kwargs)
        self.config = config if config is not None else ExplorerConfig()
        self.source = source
        self.connector = (
            connector
            if connector is not None
            else DBConnector(source.file_path, table_name=self.config.table_name)
        )
        context = ViewContext(
            source=source,
            run_query=lambda text: run_query(self.connector, text),
            table_name=self.config.table_name,
        )
        self.coordinator = ModeCoordinator(context)

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield TabBar(id="tab-bar")
        yield ExplorerBody(id="body")
        yield FooterBar(id="footer")

    def on_mount(self) -> None:
        """Focus the body so it receives every key press, then paint the first frame."""
        self.log(f"parqscope started on {self.source.file_path}")
        self.query_one(ExplorerBody).focus()
        self.refresh_frame()

    def on_unmount(self) -> None:
        self.connector.close()

    def handle_key_press(self, key: KeyPress) -> None:
        """Route one key press through the coordinator and repaint."""
        result = self.coordinator.handle_key(key)
        if result is KeyResult.EXIT:
            self.exit()
            return
        if result is KeyResult.HANDLED:
            self.refresh_frame()

    def refresh_frame(self) -> None:
        """Recompute the viewport for the current terminal size and repaint every widget."""
        coordinator = self.coordinator
        view = prepare_frame(
            coordinator.state,
            coordinator.tabs,
            coordinator.context,
            self.size.height,
            title=self.config.title,
        )
        self.query_one(TabBar).show(view)
        self.query_one(ExplorerBody).show(view)
        self.query_one(FooterBar).show(view)


def run_app(source: ParquetSource, config: ExplorerConfig | None = None) -> None:
    """Run the parqscope application."""
    app = ParqscopeApp(source, config=config)
    app.run()
